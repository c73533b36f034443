"""
Transport to the TDengine server.

Wraps a taospy connection (native `taos` client or REST `taosrest` client,
chosen by the JDBC-style URL) behind the small Transport protocol the executor
and schema manager use. Driver modules are imported when a connection is
opened, never at import time, so the native client library is only required
by runs that actually connect with it.

Includes retry logic for transient connection failures using tenacity.
"""

from __future__ import annotations

from contextlib import contextmanager
from enum import Enum
from typing import Any, Callable, Dict, Generator, List, Optional, Protocol, Sequence

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from tdwriter.config import ConnectionTarget, WriterOptions, parse_jdbc_url
from tdwriter.domain.models import TimestampPrecision
from tdwriter.errors import TransportError
from tdwriter.utils.logging import get_logger

log = get_logger(__name__)


class SchemalessProtocol(str, Enum):
    LINE = "line"


SchemalessWriter = Callable[[List[str], TimestampPrecision, SchemalessProtocol], None]


class Transport(Protocol):
    """
    What the writer needs from a database connection.
    """

    def execute(self, sql: str) -> int:
        """Run a statement and return the affected-row count."""
        ...

    def query(self, sql: str) -> List[Dict[str, Any]]:
        """Run a query and return rows keyed by lower-cased column name."""
        ...

    def write_lines(
        self,
        lines: Sequence[str],
        precision: TimestampPrecision,
        protocol: SchemalessProtocol = SchemalessProtocol.LINE,
    ) -> None:
        """Submit schemaless lines; no affected-row count is reported."""
        ...

    def close(self) -> None:
        ...


class TaosTransport:
    """
    Transport over a DB-API style taospy connection.

    Any driver exception is re-raised as TransportError with the driver error
    chained as its cause.
    """

    def __init__(self, connection: Any, schemaless: Optional[SchemalessWriter] = None) -> None:
        self._conn = connection
        self._schemaless = schemaless

    def execute(self, sql: str) -> int:
        try:
            cursor = self._conn.cursor()
            try:
                cursor.execute(sql)
                return int(cursor.rowcount)
            finally:
                cursor.close()
        except Exception as exc:  # noqa: BLE001 - driver errors have no common base
            raise TransportError(str(exc)) from exc

    def query(self, sql: str) -> List[Dict[str, Any]]:
        try:
            cursor = self._conn.cursor()
            try:
                cursor.execute(sql)
                names = [str(desc[0]).lower() for desc in cursor.description or ()]
                return [dict(zip(names, row)) for row in cursor.fetchall()]
            finally:
                cursor.close()
        except Exception as exc:  # noqa: BLE001 - driver errors have no common base
            raise TransportError(str(exc)) from exc

    def write_lines(
        self,
        lines: Sequence[str],
        precision: TimestampPrecision,
        protocol: SchemalessProtocol = SchemalessProtocol.LINE,
    ) -> None:
        if self._schemaless is None:
            raise TransportError("schemaless writes require the native TDengine client (jdbc:TAOS://)")
        try:
            self._schemaless(list(lines), precision, protocol)
        except Exception as exc:  # noqa: BLE001 - driver errors have no common base
            raise TransportError(str(exc)) from exc

    def close(self) -> None:
        try:
            self._conn.close()
        except Exception:  # noqa: BLE001
            log.warning("error while closing connection", exc_info=True)


def _native_transport(target: ConnectionTarget, username: str, password: str) -> TaosTransport:
    import taos

    conn = taos.connect(
        host=target.host,
        port=target.port,
        user=target.params.get("user", username),
        password=target.params.get("password", password),
        database=target.database,
    )
    precisions = {
        TimestampPrecision.MILLISEC: taos.SmlPrecision.MILLI_SECONDS,
        TimestampPrecision.MICROSEC: taos.SmlPrecision.MICRO_SECONDS,
        TimestampPrecision.NANOSEC: taos.SmlPrecision.NANO_SECONDS,
    }
    protocols = {SchemalessProtocol.LINE: taos.SmlProtocol.LINE_PROTOCOL}

    def write(lines: List[str], precision: TimestampPrecision, protocol: SchemalessProtocol) -> None:
        conn.schemaless_insert(
            lines,
            protocols[protocol],
            precisions.get(precision, taos.SmlPrecision.NOT_CONFIGURED),
        )

    return TaosTransport(conn, schemaless=write)


def _rest_transport(target: ConnectionTarget, username: str, password: str) -> TaosTransport:
    import taosrest

    conn = taosrest.connect(
        url=target.http_url,
        user=target.params.get("user", username),
        password=target.params.get("password", password),
        database=target.database,
    )
    return TaosTransport(conn)


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type(TransportError),
    reraise=True,
)
def open_transport(options: WriterOptions) -> TaosTransport:
    """
    Open a connection for `options.jdbc_url` with automatic retry.

    Retries up to 3 times with exponential backoff for connection errors.

    Raises
    ------
    ConfigurationError
        If the URL cannot be parsed (not retried).
    TransportError
        If connecting fails after all retry attempts.
    """
    target = parse_jdbc_url(options.jdbc_url)
    opener = _rest_transport if target.is_rest else _native_transport
    try:
        return opener(target, options.username, options.password)
    except ImportError:
        raise
    except Exception as exc:  # noqa: BLE001 - driver errors have no common base
        raise TransportError(f"cannot connect to {target.host}:{target.port}: {exc}") from exc


@contextmanager
def transport_session(options: WriterOptions) -> Generator[Transport, None, None]:
    """
    Context manager that owns one connection for the duration of a run.

    Example
    -------
        with transport_session(options) as transport:
            transport.execute("insert into t values (now, 1)")
    """
    transport = open_transport(options)
    try:
        yield transport
    finally:
        transport.close()


__all__ = [
    "SchemalessProtocol",
    "Transport",
    "TaosTransport",
    "open_transport",
    "transport_session",
]
