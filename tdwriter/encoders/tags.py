"""
Tag matching between a record's tag cells and a sub-table's bound tag values.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from tdwriter.domain.models import Cell, CellKind, ColumnMeta, datetime_to_millis


def _bound_int(value: Any) -> int:
    if isinstance(value, int):
        return int(value)
    return int(str(value).strip())


def _bound_millis(value: Any) -> int:
    # Text without an offset is read as UTC; the catalog renders it in the client zone.
    if isinstance(value, datetime):
        return datetime_to_millis(value)
    if isinstance(value, int):
        return value
    return datetime_to_millis(datetime.fromisoformat(str(value).strip()))


def _bound_bytes(value: Any) -> Optional[bytes]:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    return str(value).encode("utf-8")


def tag_matches(cell: Cell, column: ColumnMeta) -> bool:
    """
    True when `cell` equals the tag value bound to `column`.

    Comparison follows the cell's runtime kind; a bound value that cannot be
    converted to that kind compares unequal.
    """
    bound = column.value
    if cell.kind is CellKind.NULL:
        return bound is None
    if bound is None or cell.value is None:
        return False
    try:
        if cell.kind is CellKind.BOOL:
            return cell.as_bool() == (str(bound).strip().lower() == "true")
        if cell.kind in (CellKind.INT, CellKind.LONG):
            return cell.as_long() == _bound_int(bound)
        if cell.kind is CellKind.DOUBLE:
            return cell.as_double() == float(bound)
        if cell.kind is CellKind.DATE:
            return cell.epoch_millis() == _bound_millis(bound)
        if cell.kind in (CellKind.BYTES, CellKind.BAD):
            return cell.as_bytes() == _bound_bytes(bound)
    except (TypeError, ValueError):
        return False
    return cell.as_string() == str(bound)


__all__ = ["tag_matches"]
