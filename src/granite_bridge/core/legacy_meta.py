"""Parser for legacy ``granitectl dump`` output.

Older granitectl builds have no ``meta --json`` subcommand; schema
metadata is only available as an indented text dump::

    Table customers (2 row(s))
      - id INT NOT NULL PRIMARY KEY
      - name VARCHAR(50)
      Indexes:
        - idx_customers_name (name) UNIQUE
      Foreign Keys:
        - fk_region (region_id) REFERENCES regions(id)

The parser is a line-driven state machine. The state is the section of
the open table being read; each line is handled by the transition for
that section. Empty index/foreign-key sections are reported as absent
(None), since the dump cannot tell "none declared" from "not inspected".
"""

from __future__ import annotations

import re
from enum import Enum

from granite_bridge.core.exceptions import ParseError
from granite_bridge.core.models import (
    ColumnMeta,
    ForeignKeyMeta,
    IndexMeta,
    SchemaSnapshot,
    TableMeta,
)

NO_TABLES_SENTINEL = "no tables defined"

_TABLE_PREFIX = "Table "
_ROW_COUNT_SUFFIX = " row(s))"
_COLUMN_PREFIX = "  - "
_ITEM_PREFIX = "    - "
_INDEXES_MARKER = "  Indexes:"
_FOREIGN_KEYS_MARKER = "  Foreign Keys:"
_NOT_NULL = " NOT NULL"
_PRIMARY_KEY = " PRIMARY KEY"
_UNIQUE = " UNIQUE"

_INDEX_RE = re.compile(r"^(?P<name>.+?) \((?P<cols>[^)]*)\)$")
_FOREIGN_KEY_RE = re.compile(
    r"^(?P<name>.+?) \((?P<cols>[^)]*)\) REFERENCES "
    r"(?P<table>[^\s(]+)\s*\((?P<ref>[^)]*)\)$"
)


class Section(Enum):
    COLUMNS = "columns"
    INDEXES = "indexes"
    FOREIGN_KEYS = "foreign_keys"


def _split_list(text: str) -> list[str]:
    return [part.strip() for part in text.split(",") if part.strip()]


def parse_table_header(line: str) -> tuple[str, int]:
    """Split ``Table <name> (<count> row(s))`` into name and row count."""
    rest = line[len(_TABLE_PREFIX) :]
    open_paren = rest.rfind(" (")
    if open_paren <= 0 or not rest.endswith(_ROW_COUNT_SUFFIX):
        raise ParseError(f"Invalid table header in dump: {line!r}")
    name = rest[:open_paren].strip()
    count_text = rest[open_paren + 2 : -len(_ROW_COUNT_SUFFIX)].strip()
    if not name or not (count_text.isascii() and count_text.isdigit()):
        raise ParseError(f"Invalid row count in table header: {line!r}")
    return name, int(count_text)


def parse_column(body: str) -> ColumnMeta:
    """Parse ``<name> <type>[ NOT NULL][ PRIMARY KEY]`` in any flag order."""
    not_null = _NOT_NULL in body
    is_primary_key = _PRIMARY_KEY in body
    body = body.replace(_NOT_NULL, "", 1).replace(_PRIMARY_KEY, "", 1).strip()
    name, sep, declared_type = body.partition(" ")
    if not sep or not declared_type.strip():
        raise ParseError(f"Invalid column definition in dump: {body!r}")
    return ColumnMeta(
        name=name,
        declared_type=declared_type.strip(),
        not_null=not_null,
        is_primary_key=is_primary_key,
    )


def parse_index(body: str) -> IndexMeta:
    """Parse ``<name> (<col>, <col>)[ UNIQUE]``."""
    is_unique = body.endswith(_UNIQUE)
    if is_unique:
        body = body[: -len(_UNIQUE)]
    match = _INDEX_RE.match(body.strip())
    if not match:
        raise ParseError(f"Invalid index definition in dump: {body!r}")
    return IndexMeta(
        name=match.group("name").strip(),
        columns=_split_list(match.group("cols")),
        is_unique=is_unique,
    )


def parse_foreign_key(body: str) -> ForeignKeyMeta:
    """Parse ``<name> (<cols>) REFERENCES <table>(<cols>)``."""
    match = _FOREIGN_KEY_RE.match(body.strip())
    if not match:
        raise ParseError(f"Invalid foreign key definition in dump: {body!r}")
    return ForeignKeyMeta(
        name=match.group("name").strip(),
        columns=_split_list(match.group("cols")),
        referenced_table=match.group("table"),
        referenced_columns=_split_list(match.group("ref")),
    )


class _TableBuilder:
    def __init__(self, name: str, row_count: int) -> None:
        self.name = name
        self.row_count = row_count
        self.columns: list[ColumnMeta] = []
        self.indexes: list[IndexMeta] = []
        self.foreign_keys: list[ForeignKeyMeta] = []

    def build(self) -> TableMeta:
        return TableMeta(
            name=self.name,
            row_count=self.row_count,
            columns=self.columns,
            indexes=self.indexes or None,
            foreign_keys=self.foreign_keys or None,
        )


class DumpParser:
    """State machine over the lines of a legacy dump."""

    def __init__(self) -> None:
        self.section = Section.COLUMNS
        self.current: _TableBuilder | None = None
        self.tables: list[TableMeta] = []

    def feed(self, line: str) -> None:
        if line.startswith(_TABLE_PREFIX):
            self.open_table(line)
        elif line == _INDEXES_MARKER:
            self.enter(Section.INDEXES)
        elif line == _FOREIGN_KEYS_MARKER:
            self.enter(Section.FOREIGN_KEYS)
        elif self.current is not None:
            self._section_handlers[self.section](self, line)

    def open_table(self, line: str) -> None:
        name, row_count = parse_table_header(line)
        self.close_table()
        self.current = _TableBuilder(name, row_count)
        self.section = Section.COLUMNS

    def enter(self, section: Section) -> None:
        if self.current is not None:
            self.section = section

    def close_table(self) -> None:
        if self.current is not None:
            self.tables.append(self.current.build())
            self.current = None

    def on_column_line(self, line: str) -> None:
        if self.current is not None and line.startswith(_COLUMN_PREFIX):
            self.current.columns.append(parse_column(line[len(_COLUMN_PREFIX) :]))

    def on_index_line(self, line: str) -> None:
        if self.current is not None and line.startswith(_ITEM_PREFIX):
            self.current.indexes.append(parse_index(line[len(_ITEM_PREFIX) :]))

    def on_foreign_key_line(self, line: str) -> None:
        if self.current is not None and line.startswith(_ITEM_PREFIX):
            self.current.foreign_keys.append(
                parse_foreign_key(line[len(_ITEM_PREFIX) :])
            )

    _section_handlers = {
        Section.COLUMNS: on_column_line,
        Section.INDEXES: on_index_line,
        Section.FOREIGN_KEYS: on_foreign_key_line,
    }

    def finish(self, database: str | None = None) -> SchemaSnapshot:
        self.close_table()
        return SchemaSnapshot(database=database, tables=self.tables)


def is_no_tables_sentinel(line: str) -> bool:
    return line.strip().lower() == NO_TABLES_SENTINEL


def parse_dump(text: str, database: str | None = None) -> SchemaSnapshot:
    """Convert legacy dump text into a SchemaSnapshot.

    Raises ParseError on malformed table headers or column, index, and
    foreign key lines. Unrecognised lines are skipped.
    """
    parser = DumpParser()
    for raw in text.splitlines():
        line = raw.rstrip()
        if not line:
            continue
        if is_no_tables_sentinel(line):
            return SchemaSnapshot(database=database, tables=[])
        parser.feed(line)
    return parser.finish(database)
