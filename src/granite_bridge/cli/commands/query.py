from __future__ import annotations

import sys
from typing import Annotated

import typer

from granite_bridge.cli.commands._shared import get_client, output_result
from granite_bridge.cli.output import write_text
from granite_bridge.core.exceptions import GraniteError
from granite_bridge.core.models import ExecFormat
from granite_bridge.core.operations import execute_sql
from granite_bridge.core.query_source import resolve_query_source


def query_command(
    ctx: typer.Context,
    database: Annotated[
        str,
        typer.Argument(help="Path to the granite database file"),
    ],
    file: Annotated[
        str | None,
        typer.Argument(help="SQL file to execute"),
    ] = None,
    execute: Annotated[
        str | None,
        typer.Option("--execute", "-e", help="Execute inline SQL"),
    ] = None,
    raw: Annotated[
        bool,
        typer.Option("--raw", help="Print granitectl's own table output"),
    ] = False,
) -> None:
    """Execute SQL from file, inline (-e), or stdin against a database."""
    try:
        is_tty = sys.stdin.isatty()
    except (ValueError, AttributeError):
        is_tty = False
    if execute is None and file is None and is_tty:
        typer.echo(ctx.get_help())
        raise typer.Exit()

    try:
        sql = resolve_query_source(inline=execute, file_path=file)
    except GraniteError as exc:
        typer.echo(exc.message, err=True)
        raise typer.Exit(exc.exit_code) from exc

    client = get_client(ctx)
    if raw:
        response = execute_sql(client, database, sql, ExecFormat.TABLE)
        write_text(response.output or "")
        return

    response = execute_sql(client, database, sql, ExecFormat.JSON_ROWS)
    if response.result is not None:
        output_result(ctx, response.result)
