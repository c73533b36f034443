from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest
from pydantic import ValidationError

from tdwriter.domain.models import Cell, CellKind, ColumnMeta, ConfiguredColumns, Record, TimestampPrecision
from tdwriter.errors import ConfigurationError


@pytest.mark.parametrize(
    ("value", "kind"),
    [
        (None, CellKind.NULL),
        (True, CellKind.BOOL),
        (3, CellKind.LONG),
        (1.5, CellKind.DOUBLE),
        (Decimal("1.5"), CellKind.DOUBLE),
        ("x", CellKind.STRING),
        (b"x", CellKind.BYTES),
        (datetime(2024, 1, 1), CellKind.DATE),
        (date(2024, 1, 1), CellKind.DATE),
        ({"a": 1}, CellKind.OBJECT),
    ],
)
def test_cell_kind_is_inferred(value, kind) -> None:
    assert Cell.of(value).kind is kind


def test_cell_text_views() -> None:
    assert Cell.of(True).as_string() == "true"
    assert Cell.of(date(2024, 1, 2)).as_string() == "2024-01-02 00:00:00"
    assert Cell.of("2").as_long() == 2
    assert Cell.of(" TRUE ").as_bool() is True
    assert Cell.of(None).as_string() is None


def test_column_meta_normalizes_type_and_base_type() -> None:
    meta = ColumnMeta(field="name", type="binary(16)")
    assert meta.type == "BINARY(16)"
    assert meta.base_type == "BINARY"


def test_column_cannot_be_tag_and_primary_key() -> None:
    with pytest.raises(ValidationError):
        ColumnMeta(field="ts", type="TIMESTAMP", is_tag=True, is_primary_key=True)


def test_configured_columns_lookup() -> None:
    columns = ConfiguredColumns(["ts", "f1", "tbname"])
    record = Record.of([1000, "x", "d1"])

    assert columns.has_tbname
    assert columns.cell(record, "f1").value == "x"
    assert "f1" in columns and "f2" not in columns
    with pytest.raises(ConfigurationError, match="cannot find col: f2"):
        columns.index_of("f2")


@pytest.mark.parametrize(
    ("code", "precision"),
    [
        ("ms", TimestampPrecision.MILLISEC),
        ("US", TimestampPrecision.MICROSEC),
        ("ns", TimestampPrecision.NANOSEC),
        ("s", TimestampPrecision.UNKNOWN),
        (None, TimestampPrecision.UNKNOWN),
    ],
)
def test_precision_from_code(code, precision) -> None:
    assert TimestampPrecision.from_code(code) is precision
