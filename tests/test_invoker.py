"""Tests for granitectl process invocation against stub scripts."""

import time

import pytest

from granite_bridge.core.exceptions import (
    ExecutableNotFoundError,
    ExecutionError,
    NonZeroExitError,
    NotFoundError,
    TimeoutError,
)
from granite_bridge.core.invoker import (
    QUERY_TIMEOUT,
    InvocationResult,
    decode_output,
    run_process,
)
from granite_bridge.core.resolver import ExecutableLocation, Provenance
from tests.fake_tool import posix_only, read_calls, write_script

pytestmark = [pytest.mark.unit, posix_only]


def _env_location(path):
    return ExecutableLocation(path=str(path), provenance=Provenance.ENV)


def test_default_budget_is_sixty_seconds():
    assert QUERY_TIMEOUT == 60.0


def test_captures_stdout_and_stderr(tmp_path):
    script = write_script(tmp_path, "echo out\necho err >&2\n")
    result = run_process(_env_location(script), ["exec"])
    assert result == InvocationResult(stdout="out\n", stderr="err\n", succeeded=True)


def test_passes_arguments_in_order(tmp_path):
    script = write_script(tmp_path, "exit 0\n")
    run_process(_env_location(script), ["exec", "--format", "json", "-q", "SELECT 1", "db"])
    assert read_calls(script) == ["exec --format json -q SELECT 1 db"]


def test_nonzero_exit_carries_stderr(tmp_path):
    script = write_script(tmp_path, "echo '  error: table missing  ' >&2\nexit 1\n")
    with pytest.raises(NonZeroExitError) as excinfo:
        run_process(_env_location(script), ["exec"])
    assert excinfo.value.message == "error: table missing"


def test_nonzero_exit_without_stderr_uses_generic_message(tmp_path):
    script = write_script(tmp_path, "echo partial\nexit 3\n")
    with pytest.raises(NonZeroExitError, match="granitectl returned an error"):
        run_process(_env_location(script), ["exec"])


def test_invalid_utf8_is_replaced_not_fatal(tmp_path):
    script = write_script(tmp_path, "printf 'ok \\377\\376 done\\n'\n")
    result = run_process(_env_location(script), [])
    assert result.stdout == "ok \ufffd\ufffd done\n"


def test_timeout_kills_and_discards_output(tmp_path):
    script = write_script(tmp_path, "echo partial\nexec sleep 30\n")
    with pytest.raises(TimeoutError, match="timed out") as excinfo:
        run_process(_env_location(script), ["exec"], timeout=0.5)
    assert "partial" not in excinfo.value.message


def test_timeout_is_not_extended_by_lingering_grandchild(tmp_path):
    script = write_script(tmp_path, "echo partial\nsleep 30\necho late\n")
    started = time.monotonic()
    with pytest.raises(TimeoutError, match="timed out after 0.5s"):
        run_process(_env_location(script), ["exec"], timeout=0.5)
    assert time.monotonic() - started < 5.0


def test_missing_env_path_is_not_spawned(tmp_path):
    missing = tmp_path / "nope" / "granitectl"
    with pytest.raises(ExecutableNotFoundError) as excinfo:
        run_process(_env_location(missing), ["exec"])
    assert str(missing) in excinfo.value.message
    assert "GRANITECTL_PATH" in excinfo.value.message


def test_missing_default_layout_path(tmp_path):
    missing = tmp_path / "engine" / "granitectl"
    location = ExecutableLocation(path=str(missing), provenance=Provenance.DEFAULT)
    with pytest.raises(NotFoundError, match="default build layout"):
        run_process(location, [])


def test_missing_on_search_path_is_relabelled(monkeypatch, tmp_path):
    monkeypatch.setenv("PATH", str(tmp_path))
    location = ExecutableLocation(
        path="granitectl-not-installed", provenance=Provenance.SYSTEM
    )
    with pytest.raises(ExecutableNotFoundError, match="system PATH"):
        run_process(location, [])


def test_system_path_lookup_runs_found_binary(monkeypatch, tmp_path):
    write_script(tmp_path, "echo found\n")
    monkeypatch.setenv("PATH", str(tmp_path))
    location = ExecutableLocation(path="granitectl", provenance=Provenance.SYSTEM)
    assert run_process(location, []).stdout == "found\n"


def test_unexecutable_file_is_execution_error(tmp_path):
    path = tmp_path / "granitectl"
    path.write_text("#!/bin/sh\necho hi\n")
    path.chmod(0o644)
    with pytest.raises(ExecutionError) as excinfo:
        run_process(_env_location(path), [])
    assert not isinstance(excinfo.value, NotFoundError)
    assert "Failed to run granitectl" in excinfo.value.message


@pytest.mark.parametrize(
    ("data", "expected"),
    [(None, ""), (b"", ""), (b"abc", "abc"), (b"\xffa", "\ufffda")],
)
def test_decode_output(data, expected):
    assert decode_output(data) == expected
