"""
Loads table kinds, column metadata and database precision from the catalog.

The snapshot is read once per run through the same transport the writer uses
and is never refreshed mid-run.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

from tdwriter.domain.models import ColumnMeta, SchemaSnapshot, TableKind, TableMeta, TimestampPrecision
from tdwriter.errors import ConfigurationError
from tdwriter.infrastructure.transport import Transport
from tdwriter.utils.logging import get_logger

log = get_logger(__name__)


class MetadataLoader(Protocol):
    def load(self, tables: Sequence[str]) -> SchemaSnapshot:
        """Describe every table in `tables` and the database precision."""
        ...


def _literal(value: str) -> str:
    return "'" + value.replace("'", "\\'") + "'"


def _first_value(row: Dict[str, Any]) -> Any:
    return next(iter(row.values()), None)


class SchemaManager:
    """
    Catalog-backed MetadataLoader.
    """

    def __init__(self, transport: Transport, database: Optional[str] = None) -> None:
        self._transport = transport
        self._database = database

    @property
    def database(self) -> str:
        if self._database is None:
            rows = self._transport.query("select database()")
            name = _first_value(rows[0]) if rows else None
            if not name:
                raise ConfigurationError("no database selected; add it to the JDBC url")
            self._database = str(name)
        return self._database

    def load(self, tables: Sequence[str]) -> SchemaSnapshot:
        precision = self.load_database_precision()
        table_metas = self.load_table_metas(tables)
        column_metas = {name: self.load_column_metas(meta) for name, meta in table_metas.items()}
        log.info(
            "schema loaded",
            extra={
                "database": self.database,
                "precision": precision.value,
                "tables": {name: meta.kind.value for name, meta in table_metas.items()},
            },
        )
        return SchemaSnapshot(tables=table_metas, columns=column_metas, precision=precision)

    def load_database_precision(self) -> TimestampPrecision:
        rows = self._transport.query(
            "select * from information_schema.ins_databases where name = " + _literal(self.database)
        )
        if not rows:
            raise ConfigurationError(f"database not found: {self.database}")
        return TimestampPrecision.from_code(rows[0].get("precision"))

    def load_table_metas(self, tables: Sequence[str]) -> Dict[str, TableMeta]:
        return {name: TableMeta(name=name, kind=self._table_kind(name)) for name in tables}

    def _table_kind(self, table: str) -> TableKind:
        db = _literal(self.database)
        stables = self._transport.query(
            "select stable_name from information_schema.ins_stables "
            f"where db_name = {db} and stable_name = {_literal(table)}"
        )
        if stables:
            return TableKind.SUPER
        rows = self._transport.query(
            "select stable_name from information_schema.ins_tables "
            f"where db_name = {db} and table_name = {_literal(table)}"
        )
        if not rows:
            raise ConfigurationError(f"table not found: {self.database}.{table}")
        return TableKind.SUB if rows[0].get("stable_name") else TableKind.NORMAL

    def load_column_metas(self, table: TableMeta) -> Tuple[ColumnMeta, ...]:
        rows = self._transport.query(f"describe {self.database}.{table.name}")
        bound = self._tag_values(table.name) if table.kind is TableKind.SUB else {}
        metas: List[ColumnMeta] = []
        for position, row in enumerate(rows):
            field = str(row["field"])
            is_tag = str(row.get("note") or "").upper() == "TAG"
            metas.append(
                ColumnMeta(
                    field=field,
                    type=str(row["type"]),
                    length=row.get("length"),
                    note=str(row.get("note") or ""),
                    is_tag=is_tag,
                    is_primary_key=position == 0,
                    value=bound.get(field) if is_tag else None,
                )
            )
        return tuple(metas)

    def _tag_values(self, table: str) -> Dict[str, Any]:
        rows = self._transport.query(f"show tags from {table} from {self.database}")
        return {str(row["tag_name"]): row.get("tag_value") for row in rows}


__all__ = ["MetadataLoader", "SchemaManager"]
