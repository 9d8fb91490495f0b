"""CLI module for claudemonitor."""

from claudemonitor.cli.app import app
from claudemonitor.cli.app import run_app

__all__ = ["app", "run_app"]
