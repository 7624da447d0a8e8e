"""granitectl executable resolution.

Decides which granitectl binary to run, in priority order:
1. GRANITECTL_PATH environment variable (non-empty)  -> provenance "env"
2. <program dir>/../engine/granitectl[.exe]           -> provenance "default"
3. bare "granitectl[.exe]" via the OS search path     -> provenance "system"

Resolution is recomputed on every call. Only the log line announcing the
decision is once-per-process.
"""

from __future__ import annotations

import os
import sys
import threading
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

ENV_OVERRIDE = "GRANITECTL_PATH"
ENGINE_DIR = "engine"
EXECUTABLE_STEM = "granitectl"


class Provenance(StrEnum):
    ENV = "env"
    DEFAULT = "default"
    SYSTEM = "system"


class ExecutableLocation(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    provenance: Provenance

    @property
    def prechecked(self) -> bool:
        """Whether existence can be checked before spawning."""
        return self.provenance is not Provenance.SYSTEM


class OnceFlag:
    """Run a side-effecting action at most once, safe under concurrent callers."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._done = False

    @property
    def done(self) -> bool:
        return self._done

    def call_once(self, action: Callable[[], object]) -> bool:
        """Run action if no caller has yet; return True for the winning caller."""
        if self._done:
            return False
        with self._lock:
            if self._done:
                return False
            self._done = True
        action()
        return True


_resolution_logged = OnceFlag()


def executable_name(platform: str | None = None) -> str:
    platform = platform or sys.platform
    suffix = ".exe" if platform.startswith("win") else ""
    return f"{EXECUTABLE_STEM}{suffix}"


def program_location() -> Path | None:
    """Return the path of the running program, or None if unknown."""
    if getattr(sys, "frozen", False):
        return Path(sys.executable)
    if sys.argv and sys.argv[0]:
        return Path(sys.argv[0])
    return None


def default_layout_path(program: Path, platform: str | None = None) -> Path:
    """<program dir>/../engine/granitectl[.exe]"""
    program_dir = program.resolve().parent
    return program_dir.parent / ENGINE_DIR / executable_name(platform)


def resolve_executable(
    environ: Mapping[str, str] | None = None,
    program_path: Path | None = None,
    *,
    platform: str | None = None,
    once: OnceFlag | None = None,
) -> ExecutableLocation:
    """Resolve the granitectl location and tag it with its provenance.

    ``environ`` and ``program_path`` default to the live process state;
    ``once`` defaults to the process-wide flag guarding the resolution log.
    """
    env = os.environ if environ is None else environ
    if program_path is None:
        program_path = program_location()

    override = env.get(ENV_OVERRIDE, "")
    if override:
        location = ExecutableLocation(path=override, provenance=Provenance.ENV)
    elif program_path is not None:
        location = ExecutableLocation(
            path=str(default_layout_path(program_path, platform)),
            provenance=Provenance.DEFAULT,
        )
    else:
        location = ExecutableLocation(
            path=executable_name(platform), provenance=Provenance.SYSTEM
        )

    flag = _resolution_logged if once is None else once
    flag.call_once(lambda: _log_resolution(location))
    return location


def _log_resolution(location: ExecutableLocation) -> None:
    log = structlog.get_logger()
    log.info(
        "granitectl resolved",
        path=location.path,
        source=location.provenance.value,
    )


def describe_source(location: ExecutableLocation) -> str:
    """Human-readable resolution source for error messages."""
    if location.provenance is Provenance.ENV:
        return f"the {ENV_OVERRIDE} environment variable"
    if location.provenance is Provenance.DEFAULT:
        return "the default build layout next to this program"
    return "the system PATH"
