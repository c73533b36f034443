"""
Routes each destination table to the encoder for its kind.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, Dict, List

from tdwriter.domain.models import ConfiguredColumns, TableKind, TableMeta
from tdwriter.encoders import (
    NormalTableEncoder,
    SubTableEncoder,
    SuperTableSchemalessEncoder,
    SuperTableSqlEncoder,
    TableEncoder,
)


class EncoderRoute(str, Enum):
    SUPER_SQL = "super_sql"
    SUPER_SCHEMALESS = "super_schemaless"
    SUB = "sub_table"
    NORMAL = "normal_table"


def classify(table: TableMeta, columns: ConfiguredColumns) -> EncoderRoute:
    """
    Super tables go through SQL when the stream names sub-tables via `tbname`,
    otherwise through schemaless lines. Unknown kinds are treated as normal tables.
    """
    if table.kind is TableKind.SUPER:
        return EncoderRoute.SUPER_SQL if columns.has_tbname else EncoderRoute.SUPER_SCHEMALESS
    if table.kind is TableKind.SUB:
        return EncoderRoute.SUB
    return EncoderRoute.NORMAL


def _encoder_factories() -> Dict[EncoderRoute, Callable[[], TableEncoder]]:
    """Registry of available encoders."""
    return {
        EncoderRoute.SUPER_SQL: SuperTableSqlEncoder,
        EncoderRoute.SUPER_SCHEMALESS: SuperTableSchemalessEncoder,
        EncoderRoute.SUB: SubTableEncoder,
        EncoderRoute.NORMAL: NormalTableEncoder,
    }


def available_encoders() -> List[str]:
    """List available encoder names."""
    return sorted(route.value for route in _encoder_factories())


def resolve_encoder(route: EncoderRoute) -> TableEncoder:
    return _encoder_factories()[route]()


__all__ = ["EncoderRoute", "available_encoders", "classify", "resolve_encoder"]
