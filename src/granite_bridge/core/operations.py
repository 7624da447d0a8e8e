"""Request operations exposed to the GUI shell.

Framework-agnostic entry points: each validates its inputs, runs one
granitectl invocation sequence through a GraniteClient, and returns a
value or raises a GraniteError whose message is shown to the user.
The CLI layer in cli/ provides the typer interface over the same calls.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from granite_bridge.core.client import GraniteClient
from granite_bridge.core.exceptions import (
    GraniteError,
    NotFoundError,
    OutputError,
    ValidationError,
)
from granite_bridge.core.models import ExecFormat, ExecResponse, ToolInfo
from granite_bridge.core.negotiation import load_schema, query_structured
from granite_bridge.core.resolver import Provenance, resolve_executable

if TYPE_CHECKING:
    from collections.abc import Mapping

    from granite_bridge.core.resolver import ExecutableLocation


# ---------------------------------------------------------------------------
# Input checks
# ---------------------------------------------------------------------------


def require_sql(sql: str) -> str:
    if not sql or not sql.strip():
        raise ValidationError("SQL must not be empty")
    return sql


def require_utf8_path(path: str | Path) -> str:
    """Return path as text, rejecting names that cannot be passed as UTF-8."""
    text = str(path)
    try:
        text.encode("utf-8")
    except UnicodeEncodeError:
        raise ValidationError(
            "Database path contains unsupported characters"
        ) from None
    return text


def require_existing_database(path: str | Path) -> str:
    text = require_utf8_path(path)
    if not Path(text).exists():
        raise NotFoundError(f"Database file not found: {text}")
    return text


def parse_exec_format(fmt: str | ExecFormat) -> ExecFormat:
    try:
        return ExecFormat(fmt)
    except ValueError:
        available = ", ".join(f.value for f in ExecFormat)
        msg = f"Unsupported format {fmt!r}. Available: {available}"
        raise ValidationError(msg) from None


# ---------------------------------------------------------------------------
# Database operations
# ---------------------------------------------------------------------------


def verify_database_openable(path: str | Path) -> None:
    """Check that path names an existing, readable database file."""
    db = require_existing_database(path)
    db_path = Path(db)
    if not db_path.is_file():
        raise ValidationError(f"Path must point to a file: {db}")
    try:
        with open(db_path, "rb"):
            pass
    except OSError as e:
        raise ValidationError(f"Unable to open database: {e}") from e


def create_database(client: GraniteClient, path: str | Path) -> str:
    """Create a new database at path; returns granitectl's acknowledgement."""
    db = require_utf8_path(path)
    db_path = Path(db)
    if db_path.exists():
        raise ValidationError(f"Database already exists: {db}")
    try:
        db_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise OutputError(f"Unable to create directory {db_path.parent}: {e}") from e
    output = client.new(db)
    structlog.get_logger().info("database created", path=db)
    return output.stdout.strip()


def execute_sql(
    client: GraniteClient,
    path: str | Path,
    sql: str,
    fmt: str | ExecFormat = ExecFormat.JSON_ROWS,
) -> ExecResponse:
    """Execute sql against the database at path.

    ``jsonRows`` returns a parsed QueryResult (negotiating the output
    generation); ``table`` and ``csv`` return granitectl's text verbatim.
    """
    require_sql(sql)
    exec_format = parse_exec_format(fmt)
    db = require_existing_database(path)

    if exec_format is ExecFormat.JSON_ROWS:
        result = query_structured(client, db, sql)
        return ExecResponse(format=exec_format, result=result)

    output = client.exec_query(sql, db, exec_format.value)
    return ExecResponse(format=exec_format, output=output.stdout)


def explain_sql(client: GraniteClient, path: str | Path, sql: str) -> str:
    """Return granitectl's JSON query plan for sql, unparsed."""
    require_sql(sql)
    db = require_existing_database(path)
    return client.explain(sql, db).stdout


def fetch_schema(client: GraniteClient, path: str | Path) -> str:
    """Return the schema snapshot of the database in canonical JSON form."""
    db = require_existing_database(path)
    return load_schema(client, db).to_json()


def export_query_to_file(
    client: GraniteClient,
    path: str | Path,
    sql: str,
    destination: str | Path,
) -> Path:
    """Run sql with CSV output and write it to destination."""
    require_sql(sql)
    db = require_utf8_path(path)
    output = client.exec_query(sql, db, ExecFormat.CSV.value)
    dest = Path(destination)
    try:
        dest.write_text(output.stdout, encoding="utf-8")
    except OSError as e:
        raise OutputError(f"Failed to write CSV: {e}") from e
    structlog.get_logger().info("query exported", destination=str(dest))
    return dest


# ---------------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------------


def executable_exists(location: ExecutableLocation) -> bool:
    if location.provenance is Provenance.SYSTEM:
        return shutil.which(location.path) is not None
    return Path(location.path).is_file()


def describe_tool(
    environ: Mapping[str, str] | None = None,
    program_path: Path | None = None,
    timeout: float | None = None,
) -> ToolInfo:
    """Report where granitectl resolves to and what version it claims.

    Never raises: absence or a failing ``--version`` is reported in the
    returned ToolInfo.
    """
    location = resolve_executable(environ, program_path)
    info = ToolInfo(
        path=location.path,
        source=location.provenance.value,
        exists=executable_exists(location),
    )
    client = (
        GraniteClient(location)
        if timeout is None
        else GraniteClient(location, timeout=timeout)
    )
    try:
        output = client.version()
    except GraniteError as e:
        info.error = e.message
        return info

    lines = [line.strip() for line in output.stdout.splitlines() if line.strip()]
    info.version = lines[0] if lines else None
    return info
