"""claudemonitor: Keep an eye on Claude plan usage from the terminal."""

from __future__ import annotations

__version__ = "0.1.0"

from claudemonitor.models import ExtraUsage
from claudemonitor.models import Failed
from claudemonitor.models import Loaded
from claudemonitor.models import Loading
from claudemonitor.models import RefreshState
from claudemonitor.models import TokenDataPoint
from claudemonitor.models import UsageBucket
from claudemonitor.models import UsageSnapshot
from claudemonitor.models import UtilizationLevel
from claudemonitor.models import decode_snapshot
from claudemonitor.models import encode_snapshot
from claudemonitor.models import format_reset_countdown

__all__ = [
    "__version__",
    "UsageBucket",
    "ExtraUsage",
    "UsageSnapshot",
    "TokenDataPoint",
    "Loading",
    "Loaded",
    "Failed",
    "RefreshState",
    "UtilizationLevel",
    "decode_snapshot",
    "encode_snapshot",
    "format_reset_countdown",
]


def main() -> None:
    """Entry point for the claudemonitor CLI."""
    from claudemonitor.cli.app import run_app

    run_app()
