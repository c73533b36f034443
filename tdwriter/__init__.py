"""
tdwriter - batch write path for TDengine time-series databases.

Streams generic tabular records into super tables, sub tables and normal
tables:

- Super tables through multi-table SQL when records name their sub-table
  (`tbname` column), or through schemaless line protocol otherwise
- Sub tables through plain inserts filtered by table name and tag values
- Normal tables through plain multi-row inserts

Failed batches are retried row by row and rows that still fail are handed to
a dirty-record collector.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from tdwriter.collectors import (
    DirtyRecordCollector,
    JsonLinesDirtyCollector,
    LoggingDirtyCollector,
    MemoryDirtyCollector,
)
from tdwriter.config import Settings, WriterOptions, get_settings
from tdwriter.domain.models import (
    Cell,
    CellKind,
    ColumnMeta,
    Record,
    SchemaSnapshot,
    TableKind,
    TableMeta,
    TimestampPrecision,
)
from tdwriter.errors import (
    ConfigurationError,
    DataIntegrityWarning,
    TransportError,
    UnsupportedTypeError,
    WriterError,
)
from tdwriter.orchestrator import WriteOrchestrator, WriteSummary, run_writer
from tdwriter.sources import IterableRecordSource, JsonLinesRecordSource, RecordSource
from tdwriter.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "WriterOptions",
    "get_settings",
    # Domain
    "Cell",
    "CellKind",
    "ColumnMeta",
    "Record",
    "SchemaSnapshot",
    "TableKind",
    "TableMeta",
    "TimestampPrecision",
    # Errors
    "WriterError",
    "ConfigurationError",
    "UnsupportedTypeError",
    "TransportError",
    "DataIntegrityWarning",
    # Orchestration
    "WriteOrchestrator",
    "WriteSummary",
    "run_writer",
    # Sources and collectors
    "RecordSource",
    "IterableRecordSource",
    "JsonLinesRecordSource",
    "DirtyRecordCollector",
    "MemoryDirtyCollector",
    "LoggingDirtyCollector",
    "JsonLinesDirtyCollector",
    # Logging
    "configure_logging",
    "get_logger",
]
