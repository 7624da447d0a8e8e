"""Parser for legacy ``granitectl exec --format table`` output.

Older granitectl builds have no JSON mode. Their table output looks like::

    id | name
    -- | -----
    1  | alice
    2  | bob
    (2 row(s))

or, for statements without a result set, a single status line such as
``3 row(s) inserted``. Both are converted to the QueryResult the JSON mode
would have produced.
"""

from __future__ import annotations

import re

from granite_bridge.core.exceptions import ParseError
from granite_bridge.core.models import QueryResult

_TRAILER_RE = re.compile(r"^\((\d+) row\(s\)\)$")
_DIGITS_RE = re.compile(r"\d+")


def _positive(count: int) -> int | None:
    return count if count > 0 else None


def _split_cells(line: str) -> list[str]:
    return [cell.strip() for cell in line.split("|")]


def _status_result(line: str, elapsed_ms: int) -> QueryResult:
    match = _DIGITS_RE.search(line)
    affected = _positive(int(match.group())) if match else None
    return QueryResult(
        columns=[],
        rows=[],
        duration_ms=elapsed_ms,
        rows_affected=affected,
        message=line,
    )


def parse_exec_output(text: str, elapsed_ms: int) -> QueryResult:
    """Convert legacy table output into a QueryResult.

    Raises ParseError when the text is empty, lacks a header/separator,
    or has a row whose cell count differs from the header.
    """
    lines = [line.strip() for line in text.splitlines()]
    lines = [line for line in lines if line]
    if not lines:
        raise ParseError("Failed to parse legacy output: no output")

    elapsed_ms = max(0, int(elapsed_ms))

    if len(lines) == 1 and not lines[0].startswith("("):
        return _status_result(lines[0], elapsed_ms)

    rows_affected: int | None = None
    message: str | None = None
    has_trailer = False
    trailer = _TRAILER_RE.match(lines[-1])
    if trailer:
        count = int(trailer.group(1))
        lines.pop()
        has_trailer = True
        rows_affected = _positive(count)
        message = f"{count} row(s)"

    if len(lines) < 2:
        msg = "Failed to parse legacy output: expected a header and separator line"
        raise ParseError(msg)

    columns = _split_cells(lines[0])
    if not any(columns):
        raise ParseError("Failed to parse legacy output: header has no columns")

    rows: list[list[str]] = []
    for rowno, line in enumerate(lines[2:], start=1):
        cells = _split_cells(line)
        if len(cells) != len(columns):
            msg = (
                f"Failed to parse legacy output: row column count mismatch on "
                f"data row {rowno} (expected {len(columns)}, got {len(cells)})"
            )
            raise ParseError(msg)
        rows.append(cells)

    if not has_trailer:
        rows_affected = _positive(len(rows))
        if message is None:
            message = f"{len(rows)} row(s)"

    return QueryResult(
        columns=columns,
        rows=rows,
        duration_ms=elapsed_ms,
        rows_affected=rows_affected,
        message=message,
    )
