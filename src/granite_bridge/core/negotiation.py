"""Output-format negotiation between granitectl generations.

Structured (JSON) modes are always tried first. Only a failure whose text
is recognised as "this build does not know that format/command" causes a
second invocation in the legacy text mode, whose output goes through the
legacy parsers. Every other failure, and every successful-but-unparseable
structured body, propagates.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError as PydanticValidationError

from granite_bridge.core.exceptions import NonZeroExitError, ParseError
from granite_bridge.core.legacy_exec import parse_exec_output
from granite_bridge.core.legacy_meta import parse_dump
from granite_bridge.core.models import QueryResult, SchemaSnapshot

if TYPE_CHECKING:
    from granite_bridge.core.client import GraniteClient

UNSUPPORTED_FORMAT_PHRASES = (
    "unknown format",
    "unsupported format",
    "invalid format",
    "flag provided but not defined",
)

UNSUPPORTED_COMMAND_PHRASES = (
    "unknown command",
    "unrecognized command",
    "unknown subcommand",
    "invalid command",
)

_STRUCTURED_OPENERS = ("{", "[")
_BODY_PREVIEW = 80


def _mentions(message: str, phrases: tuple[str, ...]) -> bool:
    lowered = message.lower()
    return any(phrase in lowered for phrase in phrases)


def is_format_unsupported(message: str) -> bool:
    """True if granitectl rejected the requested output format."""
    return _mentions(message, UNSUPPORTED_FORMAT_PHRASES)


def is_command_unsupported(message: str) -> bool:
    """True if granitectl rejected the subcommand itself."""
    return _mentions(message, UNSUPPORTED_COMMAND_PHRASES)


def looks_structured(body: str) -> bool:
    return body.lstrip().startswith(_STRUCTURED_OPENERS)


def parse_structured_result(body: str) -> QueryResult:
    try:
        return QueryResult.model_validate_json(body)
    except PydanticValidationError as e:
        msg = f"Failed to parse JSON output: {e}"
        raise ParseError(msg) from e


def parse_structured_schema(body: str) -> SchemaSnapshot:
    try:
        return SchemaSnapshot.model_validate_json(body)
    except PydanticValidationError as e:
        msg = f"Failed to parse metadata JSON: {e}"
        raise ParseError(msg) from e


def query_structured(client: GraniteClient, db_path: str, sql: str) -> QueryResult:
    """Run sql and return a QueryResult from whichever mode the tool speaks."""
    log = structlog.get_logger()
    try:
        output = client.exec_query(sql, db_path, "json")
    except NonZeroExitError as e:
        if not is_format_unsupported(e.message):
            raise
        log.info("json output unsupported, using legacy table format", reason=e.message)
        start_time = time.monotonic()
        legacy = client.exec_query(sql, db_path, "table")
        elapsed_ms = int((time.monotonic() - start_time) * 1000)
        return parse_exec_output(legacy.stdout, elapsed_ms)

    return parse_structured_result(output.stdout)


def load_schema(client: GraniteClient, db_path: str) -> SchemaSnapshot:
    """Fetch schema metadata via ``meta --json``, falling back to ``dump``."""
    log = structlog.get_logger()
    try:
        output = client.meta(db_path)
    except NonZeroExitError as e:
        if not is_command_unsupported(e.message):
            raise
        log.info("meta subcommand unsupported, using legacy dump", reason=e.message)
        return _load_legacy_schema(client, db_path)

    body = output.stdout
    if looks_structured(body):
        return parse_structured_schema(body)

    if is_command_unsupported(body):
        log.info("meta subcommand unsupported, using legacy dump", reason=body.strip())
        return _load_legacy_schema(client, db_path)

    trimmed = body.strip()
    if not trimmed:
        raise ParseError("granitectl returned no metadata")
    msg = f"Unexpected metadata output from granitectl: {trimmed[:_BODY_PREVIEW]!r}"
    raise ParseError(msg)


def _load_legacy_schema(client: GraniteClient, db_path: str) -> SchemaSnapshot:
    output = client.dump(db_path)
    return parse_dump(output.stdout, database=db_path)
