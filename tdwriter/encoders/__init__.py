"""
Encoders package for the TDengine writer.

Re-exports the encoder interface, the encoded-batch variants and the four
table-kind encoders so downstream code can import from `tdwriter.encoders`.
"""

from tdwriter.encoders.abstract import (
    EmptyBatch,
    EncodeContext,
    EncodedBatch,
    LineBatch,
    SqlStatement,
    TableEncoder,
)
from tdwriter.encoders.normal_table import NormalTableEncoder
from tdwriter.encoders.sub_table import SubTableEncoder
from tdwriter.encoders.super_schemaless import SuperTableSchemalessEncoder
from tdwriter.encoders.super_sql import SuperTableSqlEncoder

__all__ = [
    # Contracts
    "EmptyBatch",
    "EncodeContext",
    "EncodedBatch",
    "LineBatch",
    "SqlStatement",
    "TableEncoder",
    # Concrete encoders
    "NormalTableEncoder",
    "SubTableEncoder",
    "SuperTableSchemalessEncoder",
    "SuperTableSqlEncoder",
]
