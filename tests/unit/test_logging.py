from __future__ import annotations

import json
import logging
import sys

from tdwriter.utils.logging import JsonFormatter, _json_formatter, configure_logging, get_logger

EXPECTED_ROWS = 10
EXPECTED_BATCH_SIZE = 1000


def _record(msg: str = "hello") -> logging.LogRecord:
    return logging.LogRecord(
        name="test.logger",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )


def test_json_formatter_promotes_standard_extra_fields() -> None:
    record = _record()
    record.rows = EXPECTED_ROWS
    record.table = "meters"

    payload = json.loads(_json_formatter(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "test.logger"
    assert payload["message"] == "hello"
    assert payload["rows"] == EXPECTED_ROWS
    assert payload["table"] == "meters"


def test_json_formatter_supports_legacy_nested_extra_field() -> None:
    record = _record()
    record.extra = {"batch_size": EXPECTED_BATCH_SIZE}

    payload = json.loads(_json_formatter(record))

    assert payload["batch_size"] == EXPECTED_BATCH_SIZE


def test_json_formatter_includes_exception_text() -> None:
    try:
        raise ValueError("boom")
    except ValueError:
        record = logging.LogRecord("test.logger", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())

    payload = json.loads(JsonFormatter().format(record))

    assert payload["level"] == "ERROR"
    assert "ValueError: boom" in payload["exc_info"]


def test_configure_logging_sets_package_level() -> None:
    configure_logging(level="debug", json_logs=True)

    assert get_logger("tdwriter").level == logging.DEBUG
    assert any(isinstance(h.formatter, JsonFormatter) for h in logging.getLogger().handlers)

    configure_logging(level="INFO")
    assert get_logger("tdwriter").level == logging.INFO
