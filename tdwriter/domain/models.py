"""
Domain models for the TDengine writer.

Records carry typed cells only; column names live in the configured column
list and the loaded metadata, so every lookup goes through ConfiguredColumns.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, Optional, Sequence, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator

from tdwriter.errors import ConfigurationError

TBNAME = "tbname"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MILLI = timedelta(milliseconds=1)


class CellKind(str, Enum):
    """Runtime kind of a cell value."""

    BAD = "BAD"
    NULL = "NULL"
    INT = "INT"
    LONG = "LONG"
    DOUBLE = "DOUBLE"
    STRING = "STRING"
    BOOL = "BOOL"
    DATE = "DATE"
    BYTES = "BYTES"
    OBJECT = "OBJECT"


def _to_utc(value: datetime) -> datetime:
    # Naive datetimes are taken as UTC so epoch values never depend on the host zone.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def datetime_to_millis(value: datetime) -> int:
    return (_to_utc(value) - _EPOCH) // _ONE_MILLI


@dataclass(frozen=True)
class Cell:
    """
    One typed value of a record.

    `kind` drives formatting; `value` keeps the raw Python object.
    """

    kind: CellKind
    value: Any = None

    @classmethod
    def of(cls, value: Any) -> "Cell":
        """Infer the cell kind from a plain Python value."""
        if value is None:
            return cls(CellKind.NULL)
        if isinstance(value, bool):
            return cls(CellKind.BOOL, value)
        if isinstance(value, int):
            return cls(CellKind.LONG, value)
        if isinstance(value, (float, Decimal)):
            return cls(CellKind.DOUBLE, value)
        if isinstance(value, str):
            return cls(CellKind.STRING, value)
        if isinstance(value, (bytes, bytearray)):
            return cls(CellKind.BYTES, bytes(value))
        if isinstance(value, datetime):
            return cls(CellKind.DATE, value)
        if isinstance(value, date):
            return cls(CellKind.DATE, datetime(value.year, value.month, value.day))
        return cls(CellKind.OBJECT, value)

    def as_string(self) -> Optional[str]:
        if self.value is None:
            return None
        if self.kind is CellKind.BOOL:
            return "true" if self.value else "false"
        if self.kind is CellKind.BYTES:
            return bytes(self.value).decode("utf-8", errors="replace")
        if self.kind is CellKind.DATE and isinstance(self.value, datetime):
            return self.value.strftime(DATE_FORMAT)
        if self.kind in (CellKind.INT, CellKind.LONG):
            return str(int(self.value))
        return str(self.value)

    def as_long(self) -> Optional[int]:
        if self.value is None:
            return None
        if self.kind is CellKind.DATE:
            return self.epoch_millis()
        if self.kind is CellKind.BOOL:
            return 1 if self.value else 0
        if self.kind is CellKind.DOUBLE:
            return int(float(self.value))
        if self.kind is CellKind.BYTES:
            return int(self.as_string())
        return int(self.value)

    def as_double(self) -> Optional[float]:
        if self.value is None:
            return None
        if self.kind is CellKind.DATE:
            return float(self.epoch_millis())
        if self.kind is CellKind.BYTES:
            return float(self.as_string())
        return float(self.value)

    def as_bool(self) -> Optional[bool]:
        if self.value is None:
            return None
        if self.kind in (CellKind.STRING, CellKind.BYTES):
            return self.as_string().strip().lower() == "true"
        return bool(self.value)

    def as_bytes(self) -> Optional[bytes]:
        if self.value is None:
            return None
        if isinstance(self.value, (bytes, bytearray)):
            return bytes(self.value)
        return self.as_string().encode("utf-8")

    def epoch_millis(self) -> int:
        """Milliseconds since the Unix epoch for DATE cells (ints pass through)."""
        if isinstance(self.value, datetime):
            return datetime_to_millis(self.value)
        return int(self.value)


@dataclass(frozen=True)
class Record:
    """Ordered cells, one per configured column position."""

    cells: Tuple[Cell, ...]

    @classmethod
    def of(cls, values: Iterable[Any]) -> "Record":
        return cls(tuple(v if isinstance(v, Cell) else Cell.of(v) for v in values))

    def column(self, index: int) -> Cell:
        return self.cells[index]

    def values(self) -> list:
        return [cell.value for cell in self.cells]

    def __len__(self) -> int:
        return len(self.cells)


class TableKind(str, Enum):
    SUPER = "SUPER"
    SUB = "SUB"
    NORMAL = "NORMAL"


class TimestampPrecision(str, Enum):
    """Database-wide unit of integer timestamps."""

    MILLISEC = "ms"
    MICROSEC = "us"
    NANOSEC = "ns"
    UNKNOWN = ""

    @property
    def multiplier(self) -> int:
        return _MULTIPLIERS.get(self, 1)

    def scale(self, millis: int) -> int:
        """Convert epoch milliseconds to this precision (UNKNOWN keeps millis)."""
        return millis * self.multiplier

    @classmethod
    def from_code(cls, code: Optional[str]) -> "TimestampPrecision":
        normalized = (code or "").strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        return cls.UNKNOWN


_MULTIPLIERS: Dict[TimestampPrecision, int] = {
    TimestampPrecision.MILLISEC: 1,
    TimestampPrecision.MICROSEC: 1_000,
    TimestampPrecision.NANOSEC: 1_000_000,
}


class ColumnMeta(BaseModel):
    """
    Description of one destination column, as loaded from the catalog.
    """

    field: str = Field(..., description="Column name.")
    type: str = Field(..., description="Declared storage type, e.g. 'INT' or 'BINARY(16)'.")
    length: Optional[int] = Field(None, description="Declared length for sized types.")
    note: str = Field("", description="Catalog note, 'TAG' for tag columns.")
    is_tag: bool = Field(False, description="Whether the column is a tag.")
    is_primary_key: bool = Field(False, description="Whether the column is the timestamp key.")
    value: Any = Field(None, description="Bound tag value for sub-tables.")

    model_config = {
        "frozen": True,
        "arbitrary_types_allowed": True,
    }

    @field_validator("type")
    @classmethod
    def _upper_type(cls, value: str) -> str:
        return value.strip().upper()

    @model_validator(mode="after")
    def _exclusive_roles(self) -> "ColumnMeta":
        if self.is_tag and self.is_primary_key:
            raise ValueError(f"column '{self.field}' cannot be both tag and primary key")
        return self

    @property
    def base_type(self) -> str:
        """Declared type without size, e.g. 'BINARY' for 'BINARY(16)'."""
        return self.type.split("(", 1)[0].strip()


class TableMeta(BaseModel):
    name: str
    kind: TableKind

    model_config = {"frozen": True}


class SchemaSnapshot(BaseModel):
    """
    Metadata for every destination table of one run plus the database precision.
    """

    tables: Dict[str, TableMeta]
    columns: Dict[str, Tuple[ColumnMeta, ...]]
    precision: TimestampPrecision = TimestampPrecision.MILLISEC

    model_config = {"frozen": True}

    def table(self, name: str) -> TableMeta:
        try:
            return self.tables[name]
        except KeyError:
            raise ConfigurationError(f"no metadata loaded for table: {name}") from None

    def columns_of(self, name: str) -> Tuple[ColumnMeta, ...]:
        try:
            return self.columns[name]
        except KeyError:
            raise ConfigurationError(f"no column metadata loaded for table: {name}") from None


class ConfiguredColumns:
    """
    The ordered column names the record stream supplies.
    """

    def __init__(self, names: Sequence[str]) -> None:
        self._names: Tuple[str, ...] = tuple(names)
        self._index = {name: i for i, name in reversed(list(enumerate(self._names)))}

    @property
    def names(self) -> Tuple[str, ...]:
        return self._names

    @property
    def has_tbname(self) -> bool:
        return TBNAME in self._index

    def index_of(self, name: str) -> int:
        try:
            return self._index[name]
        except KeyError:
            raise ConfigurationError(
                f"cannot find col: {name} in columns: {list(self._names)}"
            ) from None

    def cell(self, record: Record, name: str) -> Cell:
        return record.column(self.index_of(name))

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)

    def __repr__(self) -> str:
        return f"ConfiguredColumns({list(self._names)!r})"


__all__ = [
    "TBNAME",
    "CellKind",
    "Cell",
    "Record",
    "TableKind",
    "TimestampPrecision",
    "ColumnMeta",
    "TableMeta",
    "SchemaSnapshot",
    "ConfiguredColumns",
    "datetime_to_millis",
]
