"""
Orchestrator for streaming records into TDengine in fixed-size batches.

Usage (example from CLI):
    from tdwriter.orchestrator import run_writer

    summary = run_writer(options, source, collector)
    print(summary["affected_rows"])

Every batch is written to every configured table. A batch that fails for any
reason other than a configuration error is retried row by row; rows that fail
alone go to the dirty-record collector and are not retried again.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, ContextManager, Dict, Iterator, List, Optional, Sequence, TypedDict

from tdwriter.classifier import EncoderRoute, classify, resolve_encoder
from tdwriter.collectors import DirtyRecordCollector
from tdwriter.config import WriterOptions
from tdwriter.domain.models import ConfiguredColumns, Record, SchemaSnapshot
from tdwriter.encoders.abstract import EncodeContext, TableEncoder
from tdwriter.errors import ConfigurationError, DataIntegrityWarning
from tdwriter.executor import BatchExecutor
from tdwriter.infrastructure.schema_manager import MetadataLoader, SchemaManager
from tdwriter.infrastructure.transport import Transport, transport_session
from tdwriter.sources import RecordSource
from tdwriter.utils.logging import get_logger

log = get_logger(__name__)

ConnectFactory = Callable[[WriterOptions], ContextManager[Transport]]
LoaderFactory = Callable[[Transport], MetadataLoader]


class WriteSummary(TypedDict, total=False):
    """
    Outcome of one run, as returned by run_writer and rendered by the reporter.
    """

    tables: List[str]
    routes: Dict[str, str]
    records: int
    affected_rows: int
    dirty_records: int
    batches: int
    fallback_batches: int
    duration_seconds: float
    throughput_rows_per_sec: float


@dataclass
class WriteStats:
    records: int = 0
    affected_rows: int = 0
    dirty_records: int = 0
    batches: int = 0
    fallback_batches: int = 0
    duration_seconds: float = 0.0


def _drain(source: RecordSource) -> Iterator[Record]:
    return iter(source.next_record, None)


class WriteOrchestrator:
    """
    Batching write loop with row-level fallback.

    Parameters
    ----------
    options : WriterOptions
        Tables, configured columns, batch size and tag-mismatch toggle.
    collector : DirtyRecordCollector
        Receives rows that fail even when written alone.
    connect : callable, optional
        Context-manager factory owning the connection; defaults to transport_session.
    loader_factory : callable, optional
        Builds the metadata loader from the open transport; defaults to SchemaManager.
    snapshot : SchemaSnapshot, optional
        Preloaded metadata; skips the loader entirely.
    """

    def __init__(
        self,
        options: WriterOptions,
        collector: DirtyRecordCollector,
        *,
        connect: Optional[ConnectFactory] = None,
        loader_factory: Optional[LoaderFactory] = None,
        snapshot: Optional[SchemaSnapshot] = None,
    ) -> None:
        self.options = options
        self.collector = collector
        self.columns = ConfiguredColumns(options.columns)
        self.stats = WriteStats()
        self._connect = connect or transport_session
        self._loader_factory = loader_factory or SchemaManager
        self._snapshot = snapshot

    @property
    def snapshot(self) -> Optional[SchemaSnapshot]:
        return self._snapshot

    def _ensure_snapshot(self, transport: Transport) -> SchemaSnapshot:
        if self._snapshot is None:
            self._snapshot = self._loader_factory(transport).load(self.options.tables)
        return self._snapshot

    def routes(self) -> Dict[str, EncoderRoute]:
        if self._snapshot is None:
            return {}
        return {
            table: classify(self._snapshot.table(table), self.columns)
            for table in self.options.tables
        }

    def handle(self, source: RecordSource) -> int:
        """
        Stream `source` to the configured tables and return the affected-row total.

        Raises
        ------
        ConfigurationError
            A column cannot be located or metadata is missing.
        TransportError
            Connecting or loading metadata failed.
        """
        count = 0
        affected_rows = 0
        batch_size = self.options.batch_size
        start = time.perf_counter()

        with self._connect(self.options) as transport:
            log.info(
                "connection established",
                extra={"jdbc_url": self.options.jdbc_url, "username": self.options.username},
            )
            snapshot = self._ensure_snapshot(transport)
            executor = BatchExecutor(transport)
            encoders = {
                table: resolve_encoder(route) for table, route in self.routes().items()
            }
            context = EncodeContext(
                columns=self.columns,
                precision=snapshot.precision,
                ignore_tags_unmatched=self.options.ignore_tags_unmatched,
            )

            batch: List[Record] = []
            for position, record in enumerate(_drain(source), start=1):
                batch.append(record)
                count += 1
                if position % batch_size == 0:
                    affected_rows += self._dispatch(executor, encoders, context, batch)
                    batch = []

            if batch:
                affected_rows += self._dispatch(executor, encoders, context, batch)

        self.stats.records = count
        self.stats.affected_rows = affected_rows
        self.stats.duration_seconds = time.perf_counter() - start

        if affected_rows != count:
            warning = DataIntegrityWarning(
                f"write record missing or incorrect happened, affectedRows: {affected_rows}, total: {count}"
            )
            log.error(
                str(warning),
                extra={"affected_rows": affected_rows, "records": count, "warning": type(warning).__name__},
            )

        return affected_rows

    def write_batch(
        self,
        executor: BatchExecutor,
        encoders: Dict[str, TableEncoder],
        context: EncodeContext,
        batch: Sequence[Record],
    ) -> int:
        """Encode and execute `batch` once per configured table."""
        affected_rows = 0
        snapshot = self._snapshot
        for table in self.options.tables:
            encoded = encoders[table].encode(table, batch, snapshot.columns_of(table), context)
            affected_rows += executor.execute(encoded)
        return affected_rows

    def write_each_row(
        self,
        executor: BatchExecutor,
        encoders: Dict[str, TableEncoder],
        context: EncodeContext,
        batch: Sequence[Record],
    ) -> int:
        affected_rows = 0
        for record in batch:
            try:
                affected_rows += self.write_batch(executor, encoders, context, [record])
            except ConfigurationError:
                raise
            except Exception as exc:  # noqa: BLE001 - any row failure is collected as dirty
                log.error(str(exc), exc_info=True)
                self.stats.dirty_records += 1
                self.collector.collect(record, exc)
        return affected_rows

    def _dispatch(
        self,
        executor: BatchExecutor,
        encoders: Dict[str, TableEncoder],
        context: EncodeContext,
        batch: Sequence[Record],
    ) -> int:
        self.stats.batches += 1
        try:
            return self.write_batch(executor, encoders, context, batch)
        except ConfigurationError:
            raise
        except Exception as exc:  # noqa: BLE001 - any batch failure degrades to row writes
            log.warning(
                "use one row insert. because: %s",
                exc,
                extra={"batch_rows": len(batch), "error_type": type(exc).__name__},
            )
            self.stats.fallback_batches += 1
            return self.write_each_row(executor, encoders, context, batch)


def run_writer(
    options: WriterOptions,
    source: RecordSource,
    collector: DirtyRecordCollector,
    *,
    connect: Optional[ConnectFactory] = None,
    loader_factory: Optional[LoaderFactory] = None,
    snapshot: Optional[SchemaSnapshot] = None,
) -> WriteSummary:
    """
    Run one write job and return its summary.
    """
    orchestrator = WriteOrchestrator(
        options,
        collector,
        connect=connect,
        loader_factory=loader_factory,
        snapshot=snapshot,
    )
    log.info(
        "[WRITER START]",
        extra={"tables": options.tables, "batch_size": options.batch_size},
    )
    affected_rows = orchestrator.handle(source)
    stats = orchestrator.stats
    duration = stats.duration_seconds
    summary = WriteSummary(
        tables=list(options.tables),
        routes={table: route.value for table, route in orchestrator.routes().items()},
        records=stats.records,
        affected_rows=affected_rows,
        dirty_records=stats.dirty_records,
        batches=stats.batches,
        fallback_batches=stats.fallback_batches,
        duration_seconds=round(duration, 3),
        throughput_rows_per_sec=round(stats.records / duration, 2) if duration > 0 else 0.0,
    )
    log.info("[WRITER COMPLETE]", extra=dict(summary))
    return summary


__all__ = [
    "WriteOrchestrator",
    "WriteStats",
    "WriteSummary",
    "run_writer",
]
