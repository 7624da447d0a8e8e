"""Tests for structured/legacy output negotiation."""

from unittest.mock import Mock, call

import pytest

from granite_bridge.core.client import GraniteClient
from granite_bridge.core.exceptions import (
    ExecutionError,
    NonZeroExitError,
    ParseError,
    TimeoutError,
)
from granite_bridge.core.invoker import InvocationResult
from granite_bridge.core.negotiation import (
    is_command_unsupported,
    is_format_unsupported,
    load_schema,
    looks_structured,
    query_structured,
)
from tests.fake_tool import LEGACY_DUMP, LEGACY_TABLE, MODERN_META, MODERN_RESULT


def ok(stdout: str) -> InvocationResult:
    return InvocationResult(stdout=stdout, stderr="", succeeded=True)


@pytest.fixture
def client():
    return Mock(spec=GraniteClient)


# -- Predicates --


@pytest.mark.unit
@pytest.mark.parametrize(
    "message",
    [
        "error: unknown format json",
        "ERROR: Unknown Format 'json'",
        "unsupported format json",
        "invalid format: json",
        "flag provided but not defined: -format",
    ],
)
def test_format_unsupported_recognised(message):
    assert is_format_unsupported(message)


@pytest.mark.unit
@pytest.mark.parametrize(
    "message",
    ["error: no such table: users", "syntax error near FROM", "", "format ok"],
)
def test_format_unsupported_rejects_other_errors(message):
    assert not is_format_unsupported(message)


@pytest.mark.unit
@pytest.mark.parametrize(
    "message",
    [
        "unknown command: meta",
        "Unknown command 'meta'",
        "unrecognized command meta",
        "error: unknown subcommand",
        "Invalid command: meta",
    ],
)
def test_command_unsupported_recognised(message):
    assert is_command_unsupported(message)


@pytest.mark.unit
@pytest.mark.parametrize(
    "message", ["error: database is locked", "unknown format json", ""]
)
def test_command_unsupported_rejects_other_errors(message):
    assert not is_command_unsupported(message)


@pytest.mark.unit
@pytest.mark.parametrize(
    ("body", "expected"),
    [('{"a":1}', True), ("  \n[1]", True), ("Table t", False), ("", False)],
)
def test_looks_structured(body, expected):
    assert looks_structured(body) is expected


# -- query_structured --


@pytest.mark.unit
def test_structured_success(client):
    client.exec_query.return_value = ok(MODERN_RESULT)
    result = query_structured(client, "db.gdb", "SELECT * FROM customers")
    assert result.columns == ["id", "name"]
    assert result.rows_affected == 2
    client.exec_query.assert_called_once_with(
        "SELECT * FROM customers", "db.gdb", "json"
    )


@pytest.mark.unit
def test_falls_back_to_legacy_table(client):
    client.exec_query.side_effect = [
        NonZeroExitError("error: unknown format json"),
        ok(LEGACY_TABLE),
    ]
    result = query_structured(client, "db.gdb", "SELECT 1")
    assert result.columns == ["id", "name"]
    assert result.rows == [["1", "alice"], ["2", "bob"]]
    assert result.message == "2 row(s)"
    assert client.exec_query.call_args_list == [
        call("SELECT 1", "db.gdb", "json"),
        call("SELECT 1", "db.gdb", "table"),
    ]


@pytest.mark.unit
def test_unrecognised_failure_propagates(client):
    client.exec_query.side_effect = NonZeroExitError("error: no such table: t")
    with pytest.raises(NonZeroExitError, match="no such table"):
        query_structured(client, "db.gdb", "SELECT * FROM t")
    client.exec_query.assert_called_once()


@pytest.mark.unit
@pytest.mark.parametrize(
    "error", [TimeoutError("granitectl timed out"), ExecutionError("spawn failed")]
)
def test_process_failures_never_fall_back(client, error):
    client.exec_query.side_effect = error
    with pytest.raises(type(error)):
        query_structured(client, "db.gdb", "SELECT 1")
    client.exec_query.assert_called_once()


@pytest.mark.unit
@pytest.mark.parametrize(
    "body", ["not json", '{"columns": ["a"]}', '{"columns":["a"],"rows":[[]],"durationMs":1}']
)
def test_garbage_structured_body_is_parse_error(client, body):
    client.exec_query.return_value = ok(body)
    with pytest.raises(ParseError, match="Failed to parse JSON output"):
        query_structured(client, "db.gdb", "SELECT 1")
    client.exec_query.assert_called_once()


@pytest.mark.unit
def test_legacy_failure_after_fallback_propagates(client):
    client.exec_query.side_effect = [
        NonZeroExitError("unknown format json"),
        NonZeroExitError("error: no such table: t"),
    ]
    with pytest.raises(NonZeroExitError, match="no such table"):
        query_structured(client, "db.gdb", "SELECT * FROM t")


# -- load_schema --


@pytest.mark.unit
def test_schema_structured_success(client):
    client.meta.return_value = ok(MODERN_META)
    snapshot = load_schema(client, "db.gdb")
    assert snapshot.tables[0].name == "customers"
    assert snapshot.tables[0].indexes == []
    client.dump.assert_not_called()


@pytest.mark.unit
def test_schema_falls_back_on_unknown_command(client):
    client.meta.side_effect = NonZeroExitError("unknown command: meta")
    client.dump.return_value = ok(LEGACY_DUMP)
    snapshot = load_schema(client, "db.gdb")
    assert snapshot.database == "db.gdb"
    assert [t.name for t in snapshot.tables] == ["customers", "orders"]
    client.dump.assert_called_once_with("db.gdb")


@pytest.mark.unit
def test_schema_falls_back_when_refusal_printed_on_stdout(client):
    client.meta.return_value = ok("GraniteDB control utility\nunknown command: meta\n")
    client.dump.return_value = ok("No tables defined\n")
    snapshot = load_schema(client, "db.gdb")
    assert snapshot.tables == []
    client.dump.assert_called_once()


@pytest.mark.unit
def test_schema_other_failure_propagates(client):
    client.meta.side_effect = NonZeroExitError("error: database is locked")
    with pytest.raises(NonZeroExitError, match="locked"):
        load_schema(client, "db.gdb")
    client.dump.assert_not_called()


@pytest.mark.unit
@pytest.mark.parametrize("body", ["", "   \n"])
def test_schema_empty_body(client, body):
    client.meta.return_value = ok(body)
    with pytest.raises(ParseError, match="no metadata"):
        load_schema(client, "db.gdb")


@pytest.mark.unit
def test_schema_unexpected_body(client):
    client.meta.return_value = ok("Table t (1 row(s))\n")
    with pytest.raises(ParseError, match="Unexpected metadata output"):
        load_schema(client, "db.gdb")
    client.dump.assert_not_called()


@pytest.mark.unit
def test_schema_corrupt_json(client):
    client.meta.return_value = ok('{"tables": [{"name": 5}')
    with pytest.raises(ParseError, match="Failed to parse metadata JSON"):
        load_schema(client, "db.gdb")
