"""
Super-table encoder for streams without a `tbname` column.

Rows become InfluxDB-style line protocol and the server derives sub-tables
from the tag set:

    meters,location=San\\ Francisco,groupid=2 current=10.3f32,voltage=219i32 1700000000000
"""

from __future__ import annotations

from typing import List, Sequence

from tdwriter.domain.models import ColumnMeta, ConfiguredColumns, Record
from tdwriter.encoders.abstract import EmptyBatch, EncodeContext, EncodedBatch, LineBatch, TableEncoder
from tdwriter.encoders.rows import select_columns
from tdwriter.encoders.values import escape_tag_value, line_timestamp
from tdwriter.errors import ConfigurationError
from tdwriter.utils.logging import get_logger

log = get_logger(__name__)


def _tag_pairs(record: Record, metas: Sequence[ColumnMeta], columns: ConfiguredColumns) -> List[str]:
    pairs = []
    for meta in metas:
        value = columns.cell(record, meta.field).as_string()
        # Line protocol has no null tag; omit the pair instead.
        if value is None:
            continue
        pairs.append(f"{meta.field}={escape_tag_value(value)}")
    return pairs


class SuperTableSchemalessEncoder(TableEncoder):
    """
    One line-protocol line per record, submitted as a single schemaless write.
    """

    name: str = "super_schemaless"
    description: str = "Super table via schemaless line protocol; sub-tables derived from tags."

    def encode(
        self,
        table: str,
        batch: Sequence[Record],
        metas: Sequence[ColumnMeta],
        context: EncodeContext,
    ) -> EncodedBatch:
        if not batch:
            return EmptyBatch(table, "empty batch")

        primary = next((meta for meta in metas if meta.is_primary_key), None)
        if primary is None:
            raise ConfigurationError(f"table {table} has no primary timestamp column")

        columns = context.columns
        tag_metas = select_columns(metas, columns, tags=True)
        field_metas = select_columns(metas, columns, tags=False, include_primary_key=False)

        lines = []
        for record in batch:
            head = table
            tags = _tag_pairs(record, tag_metas, columns)
            if tags:
                head += "," + ",".join(tags)
            fields = ",".join(
                f"{meta.field}={context.line_value(columns.cell(record, meta.field), meta)}"
                for meta in field_metas
            )
            ts = line_timestamp(columns.cell(record, primary.field), context.precision)
            line = f"{head} {fields} {ts}"
            log.debug(">>> %s", line)
            lines.append(line)

        return LineBatch(table=table, lines=tuple(lines), precision=context.precision)


__all__ = ["SuperTableSchemalessEncoder"]
