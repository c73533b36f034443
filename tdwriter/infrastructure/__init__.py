"""
Infrastructure package for the TDengine writer.

Centralizes database connectivity (transport, connection lifecycle) and the
catalog-backed metadata loader. Keep this layer focused on I/O, decoupled from
encoder and orchestrator logic.
"""

from tdwriter.infrastructure.schema_manager import MetadataLoader, SchemaManager
from tdwriter.infrastructure.transport import (
    SchemalessProtocol,
    TaosTransport,
    Transport,
    open_transport,
    transport_session,
)

__all__ = [
    "MetadataLoader",
    "SchemaManager",
    "SchemalessProtocol",
    "TaosTransport",
    "Transport",
    "open_transport",
    "transport_session",
]
