"""
Utilities package for the TDengine writer.

Exports shared logging helpers. Keep this package free of domain logic.
"""

from tdwriter.utils.logging import JsonFormatter, configure_logging, get_logger

__all__ = [
    "JsonFormatter",
    "configure_logging",
    "get_logger",
]
