"""granite-bridge main entry point and command registration."""

from __future__ import annotations

import atexit
from pathlib import Path  # noqa: TC003
from typing import Annotated

import sentry_sdk
import typer

from granite_bridge.__about__ import __version__
from granite_bridge.cli.commands.database import (
    explain_command,
    export_command,
    new_command,
    open_command,
    schema_command,
)
from granite_bridge.cli.commands.query import query_command
from granite_bridge.cli.output import OutputFormat  # noqa: TC001
from granite_bridge.core.exceptions import GraniteError
from granite_bridge.core.logging import setup_logging
from granite_bridge.core.monitoring import setup_sentry
from granite_bridge.core.operations import describe_tool

app = typer.Typer(
    help="granite-bridge - run SQL through any granitectl build",
    no_args_is_help=True,
)

app.command("query")(query_command)
app.command("open")(open_command)
app.command("new")(new_command)
app.command("explain")(explain_command)
app.command("schema")(schema_command)
app.command("export")(export_command)


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"granite-bridge {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Enable verbose logging"),
    ] = False,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to config file"),
    ] = None,
    format: Annotated[
        OutputFormat | None,
        typer.Option("--format", "-f", help="Output format: table|json|csv"),
    ] = None,
    table: Annotated[
        bool,
        typer.Option("--table", help="Shorthand for --format table"),
    ] = False,
    compact: Annotated[
        bool,
        typer.Option("--compact", help="Compact JSON output (no indentation)"),
    ] = False,
    width: Annotated[
        int,
        typer.Option("--width", help="Column width for table format"),
    ] = 40,
    no_header: Annotated[
        bool,
        typer.Option("--no-header", help="Suppress header row in CSV output"),
    ] = False,
    timeout: Annotated[
        float | None,
        typer.Option("--timeout", help="Seconds to wait for granitectl", min=0.001),
    ] = None,
) -> None:
    """granite-bridge - run SQL through any granitectl build."""
    setup_logging(verbose)
    setup_sentry()

    transaction = sentry_sdk.start_transaction(
        op="cli", name=ctx.invoked_subcommand or "granite-bridge"
    )
    transaction.__enter__()

    def cleanup() -> None:
        transaction.__exit__(None, None, None)
        sentry_sdk.flush(timeout=2)

    atexit.register(cleanup)

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config_file"] = config_file

    fmt = "table" if table else (format.value if format else None)
    ctx.obj["format"] = fmt
    ctx.obj["compact"] = compact
    ctx.obj["width"] = width
    ctx.obj["no_header"] = no_header
    ctx.obj["timeout"] = timeout


def run() -> None:
    """Entry point with global error handling."""
    try:
        app()
    except GraniteError as e:
        sentry_sdk.capture_exception(e)
        typer.echo(f"Error: {e.message}", err=True)
        raise SystemExit(e.exit_code) from None
    except SystemExit:
        raise
    except KeyboardInterrupt:
        raise SystemExit(130) from None
    except Exception as e:
        sentry_sdk.capture_exception(e)
        typer.echo(f"Error: {e}", err=True)
        raise SystemExit(1) from None


@app.command("info")
def info_command() -> None:
    """Show which granitectl would run, where it came from, and its version."""
    info = describe_tool()
    typer.echo(f"path:    {info.path}")
    typer.echo(f"source:  {info.source}")
    typer.echo(f"exists:  {'yes' if info.exists else 'no'}")
    typer.echo(f"version: {info.version or 'unknown'}")
    if info.error:
        typer.echo(f"error:   {info.error}")
