"""Main CLI application for claudemonitor."""

from __future__ import annotations

from enum import IntEnum

import typer

from claudemonitor.config.settings import get_config
from claudemonitor.core.logging_config import configure_logging
from claudemonitor.errors.types import ErrorKind
from claudemonitor.models import Failed
from claudemonitor.models import Loaded
from claudemonitor.models import RefreshState

# Create the main app
app = typer.Typer(
    name="claudemonitor",
    help="Keep an eye on Claude plan usage",
    add_completion=True,
    no_args_is_help=False,
    invoke_without_command=True,
)


class ExitCode(IntEnum):
    """Exit codes for claudemonitor."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    AUTH_ERROR = 2
    NETWORK_ERROR = 3


AUTH_ERROR_KINDS = frozenset(
    {
        ErrorKind.CREDENTIAL_NOT_FOUND,
        ErrorKind.CREDENTIAL_STORE,
        ErrorKind.CREDENTIAL_PARSE,
        ErrorKind.TOKEN_EXPIRED,
    }
)


def exit_code_for(state: RefreshState) -> ExitCode:
    """Map a finished refresh to the process exit code."""
    if isinstance(state, Loaded):
        return ExitCode.SUCCESS
    if isinstance(state, Failed):
        if state.kind in AUTH_ERROR_KINDS:
            return ExitCode.AUTH_ERROR
        if state.kind == ErrorKind.NETWORK:
            return ExitCode.NETWORK_ERROR
    return ExitCode.GENERAL_ERROR


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug logging"
    ),
    version: bool = typer.Option(False, "--version", help="Show version and exit"),
) -> None:
    """claudemonitor - Keep an eye on Claude plan usage."""
    if version:
        from claudemonitor import __version__

        typer.echo(f"claudemonitor {__version__}")
        raise typer.Exit()

    ctx.meta["verbose"] = verbose
    configure_logging("DEBUG" if verbose else get_config().log_level)

    # If no command provided, run default usage command
    if ctx.invoked_subcommand is None:
        from claudemonitor.cli.commands.usage import usage_command

        usage_command(ctx, refresh=False, json_output=False)


def run_app() -> None:
    """Run the CLI app."""
    app()


# Import command modules - they register themselves via @app.command() decorators
# These imports must come after app is defined
from claudemonitor.cli.commands import history  # noqa: E402,F401
from claudemonitor.cli.commands import usage  # noqa: E402,F401
from claudemonitor.cli.commands import config as config_cmd  # noqa: E402

app.add_typer(config_cmd.config_app, name="config")
