"""Database file commands: open, new, explain, schema, export."""

from __future__ import annotations

import json
from pathlib import Path  # noqa: TC003
from typing import Annotated

import typer

from granite_bridge.cli.commands._shared import get_client
from granite_bridge.cli.output import write_text
from granite_bridge.core.operations import (
    create_database,
    explain_sql,
    export_query_to_file,
    fetch_schema,
    verify_database_openable,
)


def open_command(
    database: Annotated[str, typer.Argument(help="Database file to check")],
) -> None:
    """Check that a database file exists and can be opened."""
    verify_database_openable(database)
    typer.echo(f"{database}: ok")


def new_command(
    ctx: typer.Context,
    database: Annotated[str, typer.Argument(help="Database file to create")],
) -> None:
    """Create a new, empty database file (parent directories included)."""
    message = create_database(get_client(ctx), database)
    typer.echo(message or f"Created database {database}")


def explain_command(
    ctx: typer.Context,
    database: Annotated[str, typer.Argument(help="Database file")],
    execute: Annotated[
        str,
        typer.Option("--execute", "-e", help="SQL to explain"),
    ],
) -> None:
    """Print the JSON query plan granitectl produces for SQL."""
    write_text(explain_sql(get_client(ctx), database, execute))


def schema_command(
    ctx: typer.Context,
    database: Annotated[str, typer.Argument(help="Database file")],
    compact: Annotated[
        bool,
        typer.Option("--compact", help="Compact JSON output (no indentation)"),
    ] = False,
) -> None:
    """
    Print tables, columns, indexes and foreign keys as JSON.

    Uses granitectl's JSON metadata mode, or its text dump on builds that
    predate it. The output shape is the same either way.
    """
    payload = fetch_schema(get_client(ctx), database)
    compact = compact or ctx.ensure_object(dict).get("compact", False)
    if not compact:
        payload = json.dumps(json.loads(payload), indent=2)
    write_text(payload)


def export_command(
    ctx: typer.Context,
    database: Annotated[str, typer.Argument(help="Database file")],
    destination: Annotated[Path, typer.Argument(help="CSV file to write")],
    execute: Annotated[
        str,
        typer.Option("--execute", "-e", help="SQL whose result is exported"),
    ],
) -> None:
    """Run SQL and write its result to a CSV file."""
    written = export_query_to_file(get_client(ctx), database, execute, destination)
    typer.echo(f"Exported to {written}", err=True)
