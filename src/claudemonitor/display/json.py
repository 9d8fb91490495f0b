"""JSON output utilities for claudemonitor."""

from __future__ import annotations

import sys
from datetime import datetime

import msgspec

from claudemonitor.errors.types import REMEDIATION
from claudemonitor.models import Failed
from claudemonitor.models import Loaded
from claudemonitor.models import RefreshState
from claudemonitor.models import TokenDataPoint

__all__ = [
    "output_json_pretty",
    "state_to_dict",
    "history_to_list",
]


def output_json_pretty(data: object, indent: int = 2) -> None:
    """Output data as pretty-printed JSON to stdout.

    Args:
        data: Any msgspec-serializable object
        indent: Number of spaces for indentation
    """
    json_bytes = msgspec.json.format(msgspec.json.encode(data), indent=indent)
    sys.stdout.write(json_bytes.decode())
    sys.stdout.write("\n")


def state_to_dict(state: RefreshState, last_updated: datetime | None = None) -> dict:
    """Convert a refresh state to a JSON-ready dict."""
    if isinstance(state, Loaded):
        data = msgspec.to_builtins(state.snapshot)
        data["last_updated"] = last_updated.isoformat() if last_updated else None
        return data

    if isinstance(state, Failed):
        error = {"kind": state.kind.value, "message": state.message}
        if remediation := REMEDIATION.get(state.kind):
            error["remediation"] = remediation
        return {"error": error}

    return {"state": "loading"}


def history_to_list(points: tuple[TokenDataPoint, ...] | list[TokenDataPoint]) -> list:
    """Convert a token time series to JSON-ready dicts."""
    return [
        {
            "timestamp": point.timestamp.isoformat(),
            "input_tokens": point.input_tokens,
            "output_tokens": point.output_tokens,
            "total_tokens": point.total_tokens,
        }
        for point in points
    ]
