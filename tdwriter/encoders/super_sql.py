"""
Super-table encoder for streams that carry a `tbname` column.

Each record names its own sub-table, which is auto-created from the super
table on first insert:

    insert into d1 using meters tags('SF',2) values(1700000000000,10.3)
           d2 using meters tags('LA',3) values(1700000000000,11.0)
"""

from __future__ import annotations

from typing import Sequence

from tdwriter.domain.models import TBNAME, ColumnMeta, Record
from tdwriter.encoders.abstract import EmptyBatch, EncodeContext, EncodedBatch, SqlStatement, TableEncoder
from tdwriter.encoders.rows import render_tuple, select_columns


class SuperTableSqlEncoder(TableEncoder):
    """
    One multi-table `insert into ... using <stable> tags(...) values(...)` statement per batch.
    """

    name: str = "super_sql"
    description: str = "Super table via SQL with sub-table names taken from the tbname column."

    def encode(
        self,
        table: str,
        batch: Sequence[Record],
        metas: Sequence[ColumnMeta],
        context: EncodeContext,
    ) -> EncodedBatch:
        if not batch:
            return EmptyBatch(table, "empty batch")

        columns = context.columns
        tag_metas = select_columns(metas, columns, tags=True)
        field_metas = select_columns(metas, columns, tags=False)

        clauses = []
        for record in batch:
            sub_table = columns.cell(record, TBNAME).as_string()
            if not sub_table:
                raise ValueError(f"record has no {TBNAME} value for super table {table}")
            tags = ",".join(render_tuple(record, tag_metas, columns, context.sql_value))
            values = ",".join(render_tuple(record, field_metas, columns, context.sql_value))
            clauses.append(f"{sub_table} using {table} tags({tags}) values({values})")

        return SqlStatement(table=table, sql="insert into " + " ".join(clauses), rows=len(batch))


__all__ = ["SuperTableSqlEncoder"]
