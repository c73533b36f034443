"""
Upstream record sources.

A source is pulled one record at a time; `None` marks the end of the stream.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, Iterator, Optional, Protocol, Sequence, TextIO, Union

from tdwriter.domain.models import Record


class RecordSource(Protocol):
    def next_record(self) -> Optional[Record]:
        """Return the next record, or None once the stream is exhausted."""
        ...


class IterableRecordSource:
    """Pull-based view over any iterable of records or plain value sequences."""

    def __init__(self, rows: Iterable[Union[Record, Sequence[Any]]]) -> None:
        self._rows: Iterator[Union[Record, Sequence[Any]]] = iter(rows)

    def next_record(self) -> Optional[Record]:
        row = next(self._rows, None)
        if row is None or isinstance(row, Record):
            return row
        return Record.of(row)


class JsonLinesRecordSource:
    """
    Reads one record per line from a JSON Lines file.

    A line is either an array (positional, in configured column order) or an
    object keyed by configured column name; missing keys become nulls. Blank
    lines are skipped.
    """

    def __init__(self, path: Union[str, Path], columns: Sequence[str]) -> None:
        self.path = Path(path)
        self.columns = list(columns)
        self._fh: Optional[TextIO] = None
        self._line_no = 0

    def __enter__(self) -> "JsonLinesRecordSource":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def next_record(self) -> Optional[Record]:
        if self._fh is None:
            self._fh = self.path.open("r", encoding="utf-8")
        for line in self._fh:
            self._line_no += 1
            if line.strip():
                return self._parse(line)
        return None

    def _parse(self, line: str) -> Record:
        try:
            payload = json.loads(line)
        except json.JSONDecodeError as exc:
            raise ValueError(f"{self.path}:{self._line_no}: invalid JSON: {exc.msg}") from exc
        if isinstance(payload, list):
            if len(payload) != len(self.columns):
                raise ValueError(
                    f"{self.path}:{self._line_no}: expected {len(self.columns)} values, got {len(payload)}"
                )
            return Record.of(payload)
        if isinstance(payload, dict):
            return Record.of(payload.get(name) for name in self.columns)
        raise ValueError(f"{self.path}:{self._line_no}: expected a JSON array or object")

    def close(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None


__all__ = ["RecordSource", "IterableRecordSource", "JsonLinesRecordSource"]
