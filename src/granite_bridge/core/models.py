"""Request-scoped value models for granite-bridge.

Pydantic models for query results, schema snapshots and tool diagnostics.
Wire names are camelCase aliases so a model dumped with ``by_alias=True``
matches what granitectl emits in its JSON modes.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt, model_validator
from pydantic.alias_generators import to_camel


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ExecFormat(StrEnum):
    """Output formats accepted by execute_sql."""

    JSON_ROWS = "jsonRows"
    TABLE = "table"
    CSV = "csv"


class QueryResult(_WireModel):
    """Canonical result of a statement, from either output generation."""

    columns: list[str]
    rows: list[list[str]]
    duration_ms: NonNegativeInt
    rows_affected: NonNegativeInt | None = None
    message: str | None = None

    @model_validator(mode="after")
    def check_row_widths(self) -> QueryResult:
        width = len(self.columns)
        for i, row in enumerate(self.rows):
            if len(row) != width:
                msg = f"row {i} has {len(row)} cells, expected {width}"
                raise ValueError(msg)
        return self


class ExecResponse(_WireModel):
    """What execute_sql hands back: a parsed result or raw tool text."""

    format: ExecFormat
    output: str | None = None
    result: QueryResult | None = None


# -- Schema metadata --
#
# Schema models keep unknown fields so a structured payload from the tool
# (column defaults, index type, onDelete/onUpdate) survives re-encoding.


class _SchemaModel(_WireModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="allow"
    )


class ColumnMeta(_SchemaModel):
    name: str
    declared_type: str = Field(alias="type")
    not_null: bool = False
    is_primary_key: bool = False


class IndexMeta(_SchemaModel):
    name: str
    columns: list[str]
    is_unique: bool = Field(default=False, alias="unique")


class ForeignKeyMeta(_SchemaModel):
    name: str
    columns: list[str] = Field(alias="fromColumns")
    referenced_table: str = Field(alias="toTable")
    referenced_columns: list[str] = Field(alias="toColumns")


class TableMeta(_SchemaModel):
    name: str
    row_count: NonNegativeInt = 0
    columns: list[ColumnMeta] = []
    indexes: list[IndexMeta] | None = None
    foreign_keys: list[ForeignKeyMeta] | None = None


class SchemaSnapshot(_SchemaModel):
    database: str | None = None
    tables: list[TableMeta] = []

    def to_json(self) -> str:
        """Encode in the canonical wire form, omitting absent sections."""
        return self.model_dump_json(by_alias=True, exclude_none=True)


# -- Diagnostics --


class ToolInfo(_WireModel):
    """Where granitectl was looked for and what it reported about itself."""

    path: str
    source: str
    exists: bool
    version: str | None = None
    error: str | None = None
