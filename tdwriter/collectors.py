"""
Dirty-record collectors: sinks for rows that failed even when written alone.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional, Protocol, TextIO, Tuple, Union

from tdwriter.domain.models import Record
from tdwriter.utils.logging import get_logger

log = get_logger(__name__)


class DirtyRecordCollector(Protocol):
    def collect(self, record: Record, error: BaseException) -> None:
        ...


class MemoryDirtyCollector:
    """Keeps (record, error) pairs in memory."""

    def __init__(self) -> None:
        self.items: List[Tuple[Record, BaseException]] = []

    def collect(self, record: Record, error: BaseException) -> None:
        self.items.append((record, error))

    def __len__(self) -> int:
        return len(self.items)


class LoggingDirtyCollector:
    def __init__(self) -> None:
        self.count = 0

    def collect(self, record: Record, error: BaseException) -> None:
        self.count += 1
        log.error(
            "dirty record",
            extra={"values": record.values(), "error": str(error), "error_type": type(error).__name__},
        )


class JsonLinesDirtyCollector:
    """
    Appends one JSON object per dirty record: values, error text and error type.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)
        self.count = 0
        self._fh: Optional[TextIO] = None

    def __enter__(self) -> "JsonLinesDirtyCollector":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def collect(self, record: Record, error: BaseException) -> None:
        if self._fh is None:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._fh = self.path.open("a", encoding="utf-8")
        payload = {
            "values": record.values(),
            "error": str(error),
            "error_type": type(error).__name__,
        }
        self._fh.write(json.dumps(payload, default=str) + "\n")
        self.count += 1

    def close(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None


__all__ = [
    "DirtyRecordCollector",
    "MemoryDirtyCollector",
    "LoggingDirtyCollector",
    "JsonLinesDirtyCollector",
]
