"""
Cell-to-literal formatting for SQL inserts and schemaless line protocol.

Each mode is a table of rules keyed by the cell's runtime kind; a rule receives
the cell, the destination column and the database precision and branches on
the column's declared type where the mode requires it. Both tables cover every
CellKind.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable, Dict, Optional

from tdwriter.domain.models import (
    Cell,
    CellKind,
    ColumnMeta,
    TimestampPrecision,
    datetime_to_millis,
)
from tdwriter.errors import UnsupportedTypeError

NULL = "NULL"

Rule = Callable[[Cell, ColumnMeta, TimestampPrecision], str]

# Declared type -> line-protocol width suffix for numeric cells.
LINE_NUMERIC_SUFFIXES: Dict[str, str] = {
    "FLOAT": "f32",
    "DOUBLE": "f64",
    "TINYINT": "i8",
    "SMALLINT": "i16",
    "INT": "i32",
    "BIGINT": "i64",
    "TIMESTAMP": "i64",
    "TINYINT UNSIGNED": "u8",
    "SMALLINT UNSIGNED": "u16",
    "INT UNSIGNED": "u32",
    "BIGINT UNSIGNED": "u64",
}

_QUOTED_LINE_TYPES = ("BINARY", "VARCHAR")


def _is_empty(text: Optional[str]) -> bool:
    return text is None or text == ""


def escape_single_quotes(text: str) -> str:
    return text.replace("'", "\\'")


def escape_double_quotes(text: str) -> str:
    return text.replace('"', '\\"')


def escape_tag_value(text: str) -> str:
    """Backslash-escape the characters line protocol treats as separators in tags."""
    for char in (",", "=", " "):
        text = text.replace(char, "\\" + char)
    return text


# SQL literal rules


def _sql_null(cell: Cell, column: ColumnMeta, precision: TimestampPrecision) -> str:
    return NULL


def _sql_date(cell: Cell, column: ColumnMeta, precision: TimestampPrecision) -> str:
    if cell.value is None:
        return NULL
    if precision is TimestampPrecision.UNKNOWN:
        return "'" + escape_single_quotes(cell.as_string()) + "'"
    return str(precision.scale(cell.epoch_millis()))


def _sql_text(cell: Cell, column: ColumnMeta, precision: TimestampPrecision) -> str:
    text = cell.as_string()
    if _is_empty(text):
        return NULL
    if column.base_type == "TIMESTAMP":
        return '"' + text + '"'
    return "'" + escape_single_quotes(text) + "'"


def _sql_raw(cell: Cell, column: ColumnMeta, precision: TimestampPrecision) -> str:
    text = cell.as_string()
    if _is_empty(text):
        return NULL
    return text


def _sql_unsupported(cell: Cell, column: ColumnMeta, precision: TimestampPrecision) -> str:
    raise UnsupportedTypeError(cell.kind.value, column.field)


SQL_RULES: Dict[CellKind, Rule] = {
    CellKind.DATE: _sql_date,
    CellKind.STRING: _sql_text,
    CellKind.BYTES: _sql_text,
    CellKind.NULL: _sql_null,
    CellKind.BAD: _sql_null,
    CellKind.BOOL: _sql_raw,
    CellKind.DOUBLE: _sql_raw,
    CellKind.INT: _sql_raw,
    CellKind.LONG: _sql_raw,
    CellKind.OBJECT: _sql_unsupported,
}


# Line-protocol rules


def _line_null(cell: Cell, column: ColumnMeta, precision: TimestampPrecision) -> str:
    return NULL


def _line_date(cell: Cell, column: ColumnMeta, precision: TimestampPrecision) -> str:
    if cell.value is None:
        return NULL
    if column.base_type == "TIMESTAMP":
        return f"{precision.scale(cell.epoch_millis())}i64"
    return f"L'{cell.as_string()}'"


def _line_text(cell: Cell, column: ColumnMeta, precision: TimestampPrecision) -> str:
    text = cell.as_string()
    if _is_empty(text):
        return NULL
    if column.base_type == "TIMESTAMP":
        return f"{text}i64"
    base_type = column.base_type
    if base_type in _QUOTED_LINE_TYPES:
        return '"' + escape_double_quotes(text) + '"'
    if base_type == "NCHAR":
        return 'L"' + escape_double_quotes(text) + '"'
    return text


def _line_numeric(cell: Cell, column: ColumnMeta, precision: TimestampPrecision) -> str:
    text = cell.as_string()
    if _is_empty(text):
        return NULL
    suffix = LINE_NUMERIC_SUFFIXES.get(column.type)
    if suffix is None:
        return _line_text(cell, column, precision)
    return text + suffix


def _line_raw(cell: Cell, column: ColumnMeta, precision: TimestampPrecision) -> str:
    text = cell.as_string()
    return NULL if text is None else text


LINE_RULES: Dict[CellKind, Rule] = {
    CellKind.DATE: _line_date,
    CellKind.NULL: _line_null,
    CellKind.BAD: _line_null,
    CellKind.DOUBLE: _line_numeric,
    CellKind.INT: _line_numeric,
    CellKind.LONG: _line_numeric,
    CellKind.STRING: _line_text,
    CellKind.BYTES: _line_text,
    CellKind.BOOL: _line_raw,
    CellKind.OBJECT: _line_raw,
}


def format_sql_value(cell: Cell, column: ColumnMeta, precision: TimestampPrecision) -> str:
    """Render a cell as an SQL literal for `column`."""
    rule = SQL_RULES.get(cell.kind, _sql_unsupported)
    return rule(cell, column, precision)


def format_line_value(cell: Cell, column: ColumnMeta, precision: TimestampPrecision) -> str:
    """Render a cell as a type-suffixed line-protocol field value for `column`."""
    rule = LINE_RULES.get(cell.kind, _line_raw)
    return rule(cell, column, precision)


def parse_timestamp_text(text: str, precision: TimestampPrecision) -> int:
    """
    Convert timestamp text to an integer in the database precision.

    Integer strings are taken as already expressed in that precision; anything
    else must be ISO-8601 (`2024-01-01 08:00:00.000` or with a `T`).
    """
    stripped = text.strip()
    if stripped.lstrip("-").isdigit():
        return int(stripped)
    parsed = datetime.fromisoformat(stripped)
    return precision.scale(datetime_to_millis(parsed))


def line_timestamp(cell: Cell, precision: TimestampPrecision) -> int:
    """Timestamp segment of a schemaless line, taken from the primary-key cell."""
    if cell.kind is CellKind.DATE:
        return precision.scale(cell.epoch_millis())
    if cell.kind is CellKind.STRING:
        return parse_timestamp_text(cell.as_string(), precision)
    return cell.as_long()


__all__ = [
    "NULL",
    "SQL_RULES",
    "LINE_RULES",
    "LINE_NUMERIC_SUFFIXES",
    "escape_tag_value",
    "format_sql_value",
    "format_line_value",
    "line_timestamp",
    "parse_timestamp_text",
]
