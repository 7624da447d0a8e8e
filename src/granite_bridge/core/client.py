"""granitectl client for granite-bridge.

Binds one resolved executable location and a timeout, and runs
granitectl subcommands through the process invoker.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from granite_bridge.core.invoker import QUERY_TIMEOUT, run_process
from granite_bridge.core.resolver import resolve_executable

if TYPE_CHECKING:
    from granite_bridge.core.invoker import InvocationResult
    from granite_bridge.core.resolver import ExecutableLocation


class GraniteClient:
    """Runs granitectl subcommands for a single request."""

    def __init__(
        self,
        location: ExecutableLocation | None = None,
        timeout: float = QUERY_TIMEOUT,
    ) -> None:
        self.location = location if location is not None else resolve_executable()
        self.timeout = timeout

    def run(self, *arguments: str) -> InvocationResult:
        return run_process(self.location, arguments, timeout=self.timeout)

    def exec_query(self, sql: str, db_path: str, fmt: str) -> InvocationResult:
        return self.run("exec", "--format", fmt, "-q", sql, db_path)

    def explain(self, sql: str, db_path: str) -> InvocationResult:
        return self.run("explain", "--json", "-q", sql, db_path)

    def meta(self, db_path: str) -> InvocationResult:
        return self.run("meta", "--json", db_path)

    def dump(self, db_path: str) -> InvocationResult:
        return self.run("dump", db_path)

    def new(self, db_path: str) -> InvocationResult:
        return self.run("new", db_path)

    def version(self) -> InvocationResult:
        return self.run("--version")
