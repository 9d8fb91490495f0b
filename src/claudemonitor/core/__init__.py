"""Core refresh pipeline for claudemonitor.

Import from the submodules directly; the credential layer depends on
core.gate and core.logging_config, so this package re-exports nothing.
"""
