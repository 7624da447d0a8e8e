"""CSV formatter for QueryResult output (RFC 4180 compliant)."""

from __future__ import annotations

import csv
from io import StringIO
from typing import TYPE_CHECKING

from granite_bridge.formatters.base import is_status_only, registry, status_lines

if TYPE_CHECKING:
    from collections.abc import Iterator

    from granite_bridge.core.models import QueryResult


def _write_row(values: list[str]) -> str:
    buf = StringIO()
    writer = csv.writer(buf)
    writer.writerow(values)
    return buf.getvalue().rstrip("\r\n")


@registry.register("csv")
class CSVFormatter:
    def __init__(self, no_header: bool = False) -> None:
        self.no_header = no_header

    def format(self, result: QueryResult) -> Iterator[str]:
        if is_status_only(result):
            yield from status_lines(result)
            return

        if not self.no_header:
            yield _write_row(result.columns)

        for row in result.rows:
            yield _write_row(row)

