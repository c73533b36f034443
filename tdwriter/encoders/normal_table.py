"""
Normal (standalone) table encoder: every record becomes one value tuple.
"""

from __future__ import annotations

from typing import Sequence

from tdwriter.domain.models import ColumnMeta, Record
from tdwriter.encoders.abstract import EmptyBatch, EncodeContext, EncodedBatch, SqlStatement, TableEncoder
from tdwriter.encoders.rows import column_list, render_tuple, select_columns, value_tuple


class NormalTableEncoder(TableEncoder):
    name: str = "normal_table"
    description: str = "Multi-row insert over the configured columns, no tag handling."

    def encode(
        self,
        table: str,
        batch: Sequence[Record],
        metas: Sequence[ColumnMeta],
        context: EncodeContext,
    ) -> EncodedBatch:
        if not batch:
            return EmptyBatch(table, "empty batch")

        selected = select_columns(metas, context.columns)
        tuples = "".join(
            value_tuple(render_tuple(record, selected, context.columns, context.sql_value))
            for record in batch
        )
        sql = f"insert into {table} {column_list(selected)} values {tuples}"
        return SqlStatement(table=table, sql=sql, rows=len(batch))


__all__ = ["NormalTableEncoder"]
