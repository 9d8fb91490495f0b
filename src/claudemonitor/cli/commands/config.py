"""Config management commands for claudemonitor."""

from __future__ import annotations

import msgspec.toml
import typer
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax

from claudemonitor.config.paths import config_dir
from claudemonitor.config.paths import config_file
from claudemonitor.config.settings import config_to_dict
from claudemonitor.config.settings import get_config
from claudemonitor.display.json import output_json_pretty

# Create config group
config_app = typer.Typer(help="Inspect configuration settings.")


@config_app.command("show")
def config_show_command(
    ctx: typer.Context,
    json_output: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output in JSON format",
    ),
) -> None:
    """Display current settings."""
    console = Console()

    config = get_config()
    config_path = config_file()
    verbose = ctx.meta.get("verbose", False)

    if json_output:
        config_dict = config_to_dict(config)
        config_dict["path"] = str(config_path)
        output_json_pretty(config_dict)
        return

    toml_data = msgspec.toml.encode(config_to_dict(config))
    console.print(
        Panel(Syntax(toml_data.decode(), "toml"), title=f"Config: {config_path}")
    )

    if verbose:
        if config_path.exists():
            console.print(f"[dim]File size: {config_path.stat().st_size} bytes[/dim]")
        else:
            console.print(
                "[dim]Using default configuration (file not created yet)[/dim]"
            )


@config_app.command("path")
def config_path_command(ctx: typer.Context) -> None:
    """Show paths used by claudemonitor."""
    console = Console()
    config = get_config()

    console.print(f"Config dir:    {config_dir()}")
    console.print(f"Config file:   {config_file()}")
    console.print(f"Claude dir:    {config.paths.claude_path()}")

    if ctx.meta.get("verbose", False):
        console.print("\n[dim]Directory status:[/dim]")
        console.print(f"  Config file exists: {config_file().exists()}")
        console.print(f"  Claude dir exists: {config.paths.claude_path().exists()}")
