"""Usage display commands for claudemonitor."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.console import Group
from rich.live import Live

from claudemonitor.cli.app import ExitCode
from claudemonitor.cli.app import app
from claudemonitor.cli.app import exit_code_for
from claudemonitor.config.settings import get_config
from claudemonitor.core.http import cleanup
from claudemonitor.core.orchestrator import RefreshOrchestrator
from claudemonitor.display.json import output_json_pretty
from claudemonitor.display.json import state_to_dict
from claudemonitor.display.rich import render_history
from claudemonitor.display.rich import render_state


async def fetch_once(refresh: bool) -> RefreshOrchestrator:
    """Run a single refresh cycle and return the orchestrator holding its result."""
    orchestrator = RefreshOrchestrator.from_config()
    try:
        if refresh:
            await orchestrator.manual_refresh()
        else:
            await orchestrator.refresh()
    finally:
        await cleanup()
    return orchestrator


@app.command("usage")
def usage_command(
    ctx: typer.Context,
    refresh: bool = typer.Option(
        False,
        "--refresh",
        "-r",
        help="Clear cached credentials and re-read them before fetching",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output in JSON format",
    ),
) -> None:
    """Show current Claude plan usage."""
    console = Console()

    orchestrator = asyncio.run(fetch_once(refresh))
    state = orchestrator.state

    if json_output:
        output_json_pretty(state_to_dict(state, orchestrator.last_updated))
    else:
        console.print(render_state(state, get_config(), orchestrator.last_updated))
        if ctx.meta.get("verbose", False) and orchestrator.token_history:
            console.print(render_history(orchestrator.token_history))

    code = exit_code_for(state)
    if code != ExitCode.SUCCESS:
        raise typer.Exit(code)


async def watch_usage(console: Console, interval: float | None) -> None:
    """Refresh on a schedule and redraw until cancelled."""
    orchestrator = RefreshOrchestrator.from_config()

    def renderable():
        parts = [
            render_state(
                orchestrator.state, orchestrator.settings(), orchestrator.last_updated
            )
        ]
        if orchestrator.token_history:
            parts.append(render_history(orchestrator.token_history))
        return Group(*parts)

    with Live(
        get_renderable=renderable,
        console=console,
        refresh_per_second=1,
        transient=False,
    ):
        task = orchestrator.start(interval)
        try:
            await task
        finally:
            await orchestrator.stop()
            await cleanup()


@app.command("watch")
def watch_command(
    interval: float | None = typer.Option(
        None,
        "--interval",
        "-i",
        help="Seconds between refreshes (default: fetch.refresh_interval)",
        min=1.0,
    ),
) -> None:
    """Continuously display usage until interrupted."""
    console = Console()

    try:
        asyncio.run(watch_usage(console, interval))
    except KeyboardInterrupt:
        console.print("[dim]Stopped.[/dim]")
