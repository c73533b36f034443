"""
Sub-table encoder.

Only rows addressed to this sub-table are written: when the stream carries a
`tbname` column the row's value must equal the table name, and when tag
mismatches are ignored the row's tag cells must equal the table's bound tags.
Other rows are skipped for this table without error.
"""

from __future__ import annotations

from typing import Sequence

from tdwriter.domain.models import TBNAME, ColumnMeta, ConfiguredColumns, Record
from tdwriter.encoders.abstract import EmptyBatch, EncodeContext, EncodedBatch, SqlStatement, TableEncoder
from tdwriter.encoders.rows import column_list, render_tuple, select_columns, value_tuple
from tdwriter.encoders.tags import tag_matches
from tdwriter.utils.logging import get_logger

log = get_logger(__name__)


def _addressed_to(table: str, record: Record, columns: ConfiguredColumns) -> bool:
    if not columns.has_tbname:
        return True
    return columns.cell(record, TBNAME).as_string() == table


def _tags_match(record: Record, tag_metas: Sequence[ColumnMeta], columns: ConfiguredColumns) -> bool:
    return all(tag_matches(columns.cell(record, meta.field), meta) for meta in tag_metas)


class SubTableEncoder(TableEncoder):
    name: str = "sub_table"
    description: str = "Plain multi-row insert into one sub-table, filtered by tbname and tags."

    def encode(
        self,
        table: str,
        batch: Sequence[Record],
        metas: Sequence[ColumnMeta],
        context: EncodeContext,
    ) -> EncodedBatch:
        columns = context.columns
        field_metas = select_columns(metas, columns, tags=False)
        tag_metas = select_columns(metas, columns, tags=True)

        tuples = []
        for record in batch:
            if not _addressed_to(table, record, columns):
                continue
            if context.ignore_tags_unmatched and not _tags_match(record, tag_metas, columns):
                continue
            tuples.append(value_tuple(render_tuple(record, field_metas, columns, context.sql_value)))

        skipped = len(batch) - len(tuples)
        if not tuples:
            log.warning("no valid records in this batch", extra={"table": table, "skipped": skipped})
            return EmptyBatch(table, "no records matched this sub-table")
        if skipped:
            log.debug("skipped rows for sub-table", extra={"table": table, "skipped": skipped})

        sql = f"insert into {table} {column_list(field_metas)} values {''.join(tuples)}"
        return SqlStatement(table=table, sql=sql, rows=len(tuples))


__all__ = ["SubTableEncoder"]
