"""
Encoder interface and encoded-batch contracts for the TDengine writer.

Concrete encoders (super-table by SQL, super-table by schemaless lines,
sub-table, normal table) implement TableEncoder and return one of the
EncodedBatch variants so the executor can run them uniformly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence, Tuple, Union, runtime_checkable

from tdwriter.domain.models import (
    Cell,
    ColumnMeta,
    ConfiguredColumns,
    Record,
    TimestampPrecision,
)
from tdwriter.encoders.values import format_line_value, format_sql_value


@dataclass(frozen=True)
class EncodeContext:
    """
    Run-wide inputs every encoder needs besides the table and the batch.
    """

    columns: ConfiguredColumns
    precision: TimestampPrecision = TimestampPrecision.MILLISEC
    ignore_tags_unmatched: bool = False

    def sql_value(self, cell: Cell, column: ColumnMeta) -> str:
        return format_sql_value(cell, column, self.precision)

    def line_value(self, cell: Cell, column: ColumnMeta) -> str:
        return format_line_value(cell, column, self.precision)


@dataclass(frozen=True)
class SqlStatement:
    table: str
    sql: str
    rows: int


@dataclass(frozen=True)
class LineBatch:
    table: str
    lines: Tuple[str, ...]
    precision: TimestampPrecision

    @property
    def rows(self) -> int:
        return len(self.lines)


@dataclass(frozen=True)
class EmptyBatch:
    """Nothing to send for this table, e.g. every row was filtered out."""

    table: str
    reason: str = ""

    @property
    def rows(self) -> int:
        return 0


EncodedBatch = Union[SqlStatement, LineBatch, EmptyBatch]


@runtime_checkable
class TableEncoder(Protocol):
    """
    Common interface of the table-kind encoders.

    Attributes
    ----------
    name : str
        A short machine-friendly identifier.
    description : str
        A human-friendly summary of the encoding.
    """

    name: str
    description: str

    def encode(
        self,
        table: str,
        batch: Sequence[Record],
        metas: Sequence[ColumnMeta],
        context: EncodeContext,
    ) -> EncodedBatch:
        """
        Render one batch for `table`.

        Parameters
        ----------
        table : str
            Destination table name.
        batch : Sequence[Record]
            Records in arrival order.
        metas : Sequence[ColumnMeta]
            The table's column metadata in declaration order.
        context : EncodeContext
            Configured columns, precision and tag-mismatch toggle.
        """
        ...


__all__ = [
    "EncodeContext",
    "SqlStatement",
    "LineBatch",
    "EmptyBatch",
    "EncodedBatch",
    "TableEncoder",
]
