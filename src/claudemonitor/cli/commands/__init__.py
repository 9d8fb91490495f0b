"""CLI commands for claudemonitor."""
