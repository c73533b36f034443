"""
Row builder shared by the table encoders.

Column selection (which metadata columns apply, in declaration order) is kept
apart from tuple rendering (formatting the record's cells for those columns).
"""

from __future__ import annotations

from typing import Callable, List, Optional, Sequence

from tdwriter.domain.models import Cell, ColumnMeta, ConfiguredColumns, Record

CellRenderer = Callable[[Cell, ColumnMeta], str]


def select_columns(
    metas: Sequence[ColumnMeta],
    columns: ConfiguredColumns,
    *,
    tags: Optional[bool] = None,
    include_primary_key: bool = True,
) -> List[ColumnMeta]:
    """
    Metadata columns present in the configured list, in declaration order.

    Parameters
    ----------
    tags : bool | None
        True keeps only tag columns, False only non-tag columns, None keeps both.
    include_primary_key : bool
        Whether the primary timestamp column is kept.
    """
    return [
        meta
        for meta in metas
        if meta.field in columns
        and (tags is None or meta.is_tag == tags)
        and (include_primary_key or not meta.is_primary_key)
    ]


def render_tuple(
    record: Record,
    metas: Sequence[ColumnMeta],
    columns: ConfiguredColumns,
    render: CellRenderer,
) -> List[str]:
    """Render the record's cell for each selected column, in the given order."""
    return [render(columns.cell(record, meta.field), meta) for meta in metas]


def column_list(metas: Sequence[ColumnMeta]) -> str:
    return "(" + ",".join(meta.field for meta in metas) + ")"


def value_tuple(values: Sequence[str]) -> str:
    return "(" + ",".join(values) + ")"


__all__ = ["CellRenderer", "select_columns", "render_tuple", "column_list", "value_tuple"]
