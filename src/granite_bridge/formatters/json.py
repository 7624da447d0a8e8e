"""JSON formatter for QueryResult output.

Emits the canonical wire form (camelCase keys), the same shape granitectl
produces in its JSON mode.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from granite_bridge.formatters.base import registry

if TYPE_CHECKING:
    from collections.abc import Iterator

    from granite_bridge.core.models import QueryResult


@registry.register("json")
class JSONFormatter:
    def __init__(self, compact: bool = False) -> None:
        self.compact = compact

    def format(self, result: QueryResult) -> Iterator[str]:
        indent = None if self.compact else 2
        yield result.model_dump_json(by_alias=True, exclude_none=True, indent=indent)

