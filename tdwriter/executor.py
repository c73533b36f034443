"""
Runs encoded batches against the transport.
"""

from __future__ import annotations

from tdwriter.encoders.abstract import EmptyBatch, EncodedBatch, LineBatch
from tdwriter.infrastructure.transport import SchemalessProtocol, Transport
from tdwriter.utils.logging import get_logger

log = get_logger(__name__)


class BatchExecutor:
    """
    Sends one EncodedBatch to the transport and returns the affected rows.

    Transport failures propagate unchanged. Schemaless batches report their
    line count because the server does not return one.
    """

    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    def execute(self, encoded: EncodedBatch) -> int:
        if isinstance(encoded, EmptyBatch):
            return 0
        if isinstance(encoded, LineBatch):
            self._transport.write_lines(list(encoded.lines), encoded.precision, SchemalessProtocol.LINE)
            log.warning(
                "schemaless writer does not return affected rows!",
                extra={"table": encoded.table, "lines": encoded.rows},
            )
            return encoded.rows
        log.debug(">>> %s", encoded.sql)
        return self._transport.execute(encoded.sql)


__all__ = ["BatchExecutor"]
