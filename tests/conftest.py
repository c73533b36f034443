"""
Pytest configuration for the TDengine writer.

Provides fixtures for:
- A fake transport that records statements and line batches
- Column metadata and schema snapshots for the three table kinds
- A fake metadata loader that counts load calls
- Writer options and a connect factory bound to the fake transport
"""

from __future__ import annotations

import re
from contextlib import contextmanager
from typing import Any, Callable, Dict, Generator, List, Optional, Sequence, Tuple

import pytest

from tdwriter.config import WriterOptions
from tdwriter.domain.models import ColumnMeta, SchemaSnapshot, TableKind, TableMeta, TimestampPrecision
from tdwriter.errors import TransportError
from tdwriter.infrastructure.transport import SchemalessProtocol

_TUPLE = re.compile(r"\(([^()]*)\)")


def parse_value_tuples(sql: str) -> List[Tuple[str, ...]]:
    """Split the `values (...)(...)` part of a plain insert into tuples of literals."""
    _, _, values = sql.partition(" values ")
    return [tuple(part.split(",")) for part in _TUPLE.findall(values)]


def _affected(sql: str) -> int:
    if " using " in sql:
        return sql.count(" using ")
    return len(parse_value_tuples(sql))


class FakeTransport:
    """
    In-memory Transport: counts value tuples as affected rows.

    Set `fail_when` to a predicate over the statement (or over each line of a
    schemaless batch) to make matching writes raise TransportError.
    """

    def __init__(self) -> None:
        self.statements: List[str] = []
        self.line_batches: List[Tuple[List[str], TimestampPrecision, SchemalessProtocol]] = []
        self.queries: List[str] = []
        self.fail_when: Optional[Callable[[str], bool]] = None
        self.closed = False

    def execute(self, sql: str) -> int:
        if self.fail_when and self.fail_when(sql):
            raise TransportError(f"rejected: {sql}")
        self.statements.append(sql)
        return _affected(sql)

    def query(self, sql: str) -> List[Dict[str, Any]]:
        self.queries.append(sql)
        return []

    def write_lines(
        self,
        lines: Sequence[str],
        precision: TimestampPrecision,
        protocol: SchemalessProtocol = SchemalessProtocol.LINE,
    ) -> None:
        if self.fail_when and any(self.fail_when(line) for line in lines):
            raise TransportError("schemaless write rejected")
        self.line_batches.append((list(lines), precision, protocol))

    def close(self) -> None:
        self.closed = True


class FakeLoader:
    """
    Loader factory and MetadataLoader in one: returns a fixed snapshot or raises `error`.
    """

    def __init__(self, snapshot: Optional[SchemaSnapshot] = None, error: Optional[Exception] = None) -> None:
        self.snapshot = snapshot
        self.error = error
        self.calls: List[List[str]] = []

    def __call__(self, transport: Any) -> "FakeLoader":
        return self

    def load(self, tables: Sequence[str]) -> SchemaSnapshot:
        self.calls.append(list(tables))
        if self.error is not None:
            raise self.error
        return self.snapshot


def col(field: str, type_: str, **kwargs: Any) -> ColumnMeta:
    return ColumnMeta(field=field, type=type_, **kwargs)


@pytest.fixture
def fake_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def connect(fake_transport: FakeTransport):
    """Connect factory yielding the fake transport and closing it on exit."""

    @contextmanager
    def _connect(options: WriterOptions) -> Generator[FakeTransport, None, None]:
        try:
            yield fake_transport
        finally:
            fake_transport.close()

    return _connect


@pytest.fixture
def fake_loader() -> FakeLoader:
    return FakeLoader()


@pytest.fixture
def parse_tuples() -> Callable[[str], List[Tuple[str, ...]]]:
    return parse_value_tuples


@pytest.fixture
def normal_columns() -> Tuple[ColumnMeta, ...]:
    """Normal table `tbl (ts TIMESTAMP, f1 BINARY(10), t1 BINARY(10))`."""
    return (
        col("ts", "TIMESTAMP", is_primary_key=True),
        col("f1", "BINARY(10)", length=10),
        col("t1", "BINARY(10)", length=10),
    )


@pytest.fixture
def meters_columns() -> Tuple[ColumnMeta, ...]:
    """Super table `meters (ts, current FLOAT, voltage INT) TAGS (location BINARY(64), groupid INT)`."""
    return (
        col("ts", "TIMESTAMP", is_primary_key=True),
        col("current", "FLOAT"),
        col("voltage", "INT"),
        col("location", "BINARY(64)", length=64, note="TAG", is_tag=True),
        col("groupid", "INT", note="TAG", is_tag=True),
    )


@pytest.fixture
def sub_columns() -> Tuple[ColumnMeta, ...]:
    """Sub-table `d1` bound to t1='A'."""
    return (
        col("ts", "TIMESTAMP", is_primary_key=True),
        col("f1", "INT"),
        col("t1", "BINARY(8)", length=8, note="TAG", is_tag=True, value="A"),
    )


@pytest.fixture
def make_snapshot():
    def _make(
        tables: Dict[str, Tuple[TableKind, Sequence[ColumnMeta]]],
        precision: TimestampPrecision = TimestampPrecision.MILLISEC,
    ) -> SchemaSnapshot:
        return SchemaSnapshot(
            tables={name: TableMeta(name=name, kind=kind) for name, (kind, _) in tables.items()},
            columns={name: tuple(metas) for name, (_, metas) in tables.items()},
            precision=precision,
        )

    return _make


@pytest.fixture
def make_options():
    def _make(**overrides: Any) -> WriterOptions:
        values: Dict[str, Any] = {
            "jdbc_url": "jdbc:TAOS://localhost:6030/test",
            "tables": ["tbl"],
            "columns": ["ts", "f1", "t1"],
            "batch_size": 1000,
        }
        values.update(overrides)
        return WriterOptions.build(**values)

    return _make
