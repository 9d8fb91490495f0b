"""Token history command for claudemonitor."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console

from claudemonitor.cli.app import app
from claudemonitor.config.settings import get_config
from claudemonitor.core.history import LogAggregator
from claudemonitor.display.json import history_to_list
from claudemonitor.display.json import output_json_pretty
from claudemonitor.display.rich import render_history


@app.command("history")
def history_command(
    hours: float | None = typer.Option(
        None,
        "--hours",
        "-H",
        help="Window size in hours (default: graph.time_window_hours)",
        min=0.1,
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output in JSON format",
    ),
) -> None:
    """Show token usage from Claude Code's local logs."""
    console = Console()
    config = get_config()
    window_hours = hours or config.graph.time_window_hours

    aggregator = LogAggregator(config.paths.claude_path())
    points = asyncio.run(aggregator.fetch_history(window_hours))

    if json_output:
        output_json_pretty(
            {"window_hours": window_hours, "points": history_to_list(points)}
        )
        return

    if not points:
        console.print(
            f"[dim]No token usage recorded in the last {window_hours:g} hours.[/dim]"
        )
        return

    console.print(render_history(points))
