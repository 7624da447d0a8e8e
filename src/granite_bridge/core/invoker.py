"""granitectl process invocation.

Spawns the resolved executable, enforces a hard timeout and maps the
outcome onto the GraniteError hierarchy. Output is captured in full and
decoded permissively; a timed-out child is killed and its output dropped.
"""

from __future__ import annotations

import os
import signal
import subprocess
import sys
import time
from pathlib import Path
from typing import TYPE_CHECKING

import sentry_sdk
import structlog
from pydantic import BaseModel, ConfigDict

from granite_bridge.core.exceptions import (
    ExecutableNotFoundError,
    ExecutionError,
    NonZeroExitError,
    TimeoutError,
)
from granite_bridge.core.resolver import ENV_OVERRIDE, Provenance, describe_source

if TYPE_CHECKING:
    from collections.abc import Sequence

    from granite_bridge.core.resolver import ExecutableLocation

QUERY_TIMEOUT = 60.0

_GENERIC_FAILURE = "granitectl returned an error"
_REAP_TIMEOUT = 5.0
_POSIX = sys.platform != "win32"


class InvocationResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    stdout: str
    stderr: str
    succeeded: bool


def decode_output(data: bytes | None) -> str:
    if not data:
        return ""
    return data.decode("utf-8", errors="replace")


def _kill_tree(proc: subprocess.Popen[bytes]) -> None:
    """Kill the child and anything it spawned into its session."""
    if not _POSIX:
        proc.kill()
        return
    try:
        os.killpg(proc.pid, signal.SIGKILL)
    except ProcessLookupError:
        proc.kill()


def _not_found(location: ExecutableLocation) -> ExecutableNotFoundError:
    if location.provenance is Provenance.SYSTEM:
        msg = (
            f"granitectl not found on the system PATH (looked for "
            f"'{location.path}'). Install granitectl or set {ENV_OVERRIDE} "
            "to its full path."
        )
    else:
        msg = (
            f"granitectl not found at {location.path} (resolved from "
            f"{describe_source(location)}). Check the path or set "
            f"{ENV_OVERRIDE} to a valid granitectl binary."
        )
    return ExecutableNotFoundError(msg)


def run_process(
    location: ExecutableLocation,
    arguments: Sequence[str],
    timeout: float = QUERY_TIMEOUT,
) -> InvocationResult:
    """Run granitectl once and return its captured output.

    Raises ExecutableNotFoundError, ExecutionError, TimeoutError, or
    NonZeroExitError (with stderr text) on failure.
    """
    log = structlog.get_logger()

    if location.prechecked and not Path(location.path).is_file():
        raise _not_found(location)

    argv = [location.path, *arguments]
    subcommand = arguments[0] if arguments else ""
    log.debug("running granitectl", argv=argv, source=location.provenance.value)

    with sentry_sdk.start_span(
        op="subprocess", description=f"granitectl {subcommand}".strip()
    ) as span:
        start_time = time.monotonic()
        try:
            proc = subprocess.Popen(
                argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                start_new_session=_POSIX,
            )
        except FileNotFoundError as e:
            span.set_status("not_found")
            raise _not_found(location) from e
        except OSError as e:
            span.set_status("internal_error")
            msg = f"Failed to run granitectl: {e}"
            raise ExecutionError(msg) from e

        with proc:
            try:
                out, err = proc.communicate(timeout=timeout)
            except subprocess.TimeoutExpired as e:
                # Grandchildren may still hold the pipes; do not drain them.
                _kill_tree(proc)
                proc.wait(timeout=_REAP_TIMEOUT)
                span.set_status("deadline_exceeded")
                log.error(
                    "granitectl timed out",
                    subcommand=subcommand,
                    timeout_s=timeout,
                )
                msg = f"granitectl timed out after {timeout:g}s"
                raise TimeoutError(msg) from e
            except OSError as e:
                _kill_tree(proc)
                span.set_status("internal_error")
                msg = f"Failed to read granitectl output: {e}"
                raise ExecutionError(msg) from e

        duration_ms = (time.monotonic() - start_time) * 1000
        span.set_data("exit_status", proc.returncode)
        span.set_data("duration_ms", duration_ms)

        stdout = decode_output(out)
        stderr = decode_output(err)
        log.debug(
            "granitectl finished",
            subcommand=subcommand,
            exit_status=proc.returncode,
            duration_ms=f"{duration_ms:.1f}",
        )

        if proc.returncode != 0:
            span.set_status("unknown_error")
            raise NonZeroExitError(stderr.strip() or _GENERIC_FAILURE)

        return InvocationResult(stdout=stdout, stderr=stderr, succeeded=True)
