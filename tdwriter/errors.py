"""
Error taxonomy for the TDengine writer.

Batch-level failures are downgraded to row-level retries by the orchestrator;
only ConfigurationError (and TransportError raised while connecting or loading
metadata) aborts a run.
"""

from __future__ import annotations


class WriterError(Exception):
    """Base class for all writer errors."""


class ConfigurationError(WriterError):
    """Invalid run configuration, e.g. a column missing from the configured list."""


class UnsupportedTypeError(WriterError):
    """A cell has no formatting rule for the requested syntax."""

    def __init__(self, kind: object, field: str) -> None:
        super().__init__(f"invalid column type: {kind} {field}")
        self.kind = kind
        self.field = field


class TransportError(WriterError):
    """Statement execution or connection failure reported by the driver."""


class DataIntegrityWarning(UserWarning):
    """Affected-row total differs from the number of records consumed."""


__all__ = [
    "WriterError",
    "ConfigurationError",
    "UnsupportedTypeError",
    "TransportError",
    "DataIntegrityWarning",
]
