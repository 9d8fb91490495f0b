"""Display utilities for claudemonitor."""

from claudemonitor.display.json import history_to_list, output_json_pretty, state_to_dict
from claudemonitor.display.rich import (
    format_bucket_line,
    format_extra_usage,
    render_history,
    render_state,
    render_usage_bar,
)

__all__ = [
    # JSON output
    "output_json_pretty",
    "state_to_dict",
    "history_to_list",
    # Rich rendering
    "render_usage_bar",
    "format_bucket_line",
    "format_extra_usage",
    "render_state",
    "render_history",
]
