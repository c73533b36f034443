from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from tdwriter.collectors import JsonLinesDirtyCollector, LoggingDirtyCollector, MemoryDirtyCollector
from tdwriter.domain.models import CellKind, Record
from tdwriter.errors import TransportError
from tdwriter.sources import IterableRecordSource, JsonLinesRecordSource

COLUMNS = ["ts", "current", "location"]


def _drain(source) -> list:
    return list(iter(source.next_record, None))


def test_iterable_source_wraps_plain_rows() -> None:
    source = IterableRecordSource([[1000, 1.5, "SF"], Record.of([2000, 2.5, "LA"])])

    records = _drain(source)

    assert [r.values() for r in records] == [[1000, 1.5, "SF"], [2000, 2.5, "LA"]]
    assert source.next_record() is None


def test_jsonl_source_reads_arrays_and_objects(tmp_path: Path) -> None:
    path = tmp_path / "input.jsonl"
    path.write_text(
        '[1000, 1.5, "SF"]\n'
        "\n"
        '{"ts": 2000, "location": "LA"}\n',
        encoding="utf-8",
    )

    with JsonLinesRecordSource(path, COLUMNS) as source:
        records = _drain(source)

    assert [r.values() for r in records] == [[1000, 1.5, "SF"], [2000, None, "LA"]]
    assert records[1].column(1).kind is CellKind.NULL


@pytest.mark.parametrize("line", ["[1000, 1.5]", "not json", '"scalar"'])
def test_jsonl_source_rejects_malformed_lines(tmp_path: Path, line: str) -> None:
    path = tmp_path / "bad.jsonl"
    path.write_text(line + "\n", encoding="utf-8")

    with JsonLinesRecordSource(path, COLUMNS) as source:
        with pytest.raises(ValueError, match="bad.jsonl:1"):
            source.next_record()


def test_memory_collector_keeps_pairs() -> None:
    collector = MemoryDirtyCollector()
    error = TransportError("rejected")

    collector.collect(Record.of([1]), error)

    assert len(collector) == 1
    assert collector.items[0][1] is error


def test_logging_collector_counts_and_logs(caplog) -> None:
    collector = LoggingDirtyCollector()

    with caplog.at_level(logging.ERROR):
        collector.collect(Record.of([1000, "x"]), TransportError("rejected"))

    assert collector.count == 1
    assert "dirty record" in caplog.text


def test_jsonl_collector_appends_records(tmp_path: Path) -> None:
    path = tmp_path / "out" / "dirty.jsonl"

    with JsonLinesDirtyCollector(path) as collector:
        collector.collect(Record.of([1000, "x"]), TransportError("rejected"))
        collector.collect(Record.of([2000, None]), ValueError("bad"))

    lines = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
    assert collector.count == 2
    assert lines[0] == {"values": [1000, "x"], "error": "rejected", "error_type": "TransportError"}
    assert lines[1]["error_type"] == "ValueError"
