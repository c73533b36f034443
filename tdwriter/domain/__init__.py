"""
Domain package for the TDengine writer.

Exports the record, cell and metadata models shared by encoders, the executor
and the orchestrator. Keep this package focused on data definitions.
"""

from tdwriter.domain.models import (
    TBNAME,
    Cell,
    CellKind,
    ColumnMeta,
    ConfiguredColumns,
    Record,
    SchemaSnapshot,
    TableKind,
    TableMeta,
    TimestampPrecision,
)

__all__ = [
    "TBNAME",
    "Cell",
    "CellKind",
    "ColumnMeta",
    "ConfiguredColumns",
    "Record",
    "SchemaSnapshot",
    "TableKind",
    "TableMeta",
    "TimestampPrecision",
]
