from __future__ import annotations

import pytest
from pydantic import ValidationError

from tdwriter.config import DEFAULT_BATCH_SIZE, Settings, WriterOptions, get_settings, parse_jdbc_url
from tdwriter.errors import ConfigurationError

NATIVE_PORT = 6030
REST_PORT = 6041

_ENV_VARS = (
    "TDENGINE_JDBC_URL",
    "TDENGINE_USER",
    "TDENGINE_PASSWORD",
    "WRITER_BATCH_SIZE",
    "WRITER_TABLES",
    "WRITER_COLUMNS",
    "WRITER_IGNORE_TAGS_UNMATCHED",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_settings_defaults(clean_env):
    settings = Settings(_env_file=None)
    assert settings.jdbc_url == "jdbc:TAOS://localhost:6030/test"
    assert settings.username == "root"
    assert settings.password == "taosdata"
    assert settings.batch_size == DEFAULT_BATCH_SIZE
    assert settings.tables == []
    assert settings.columns == []
    assert settings.ignore_tags_unmatched is False


def test_settings_split_comma_separated_lists(clean_env):
    clean_env.setenv("WRITER_TABLES", "meters, d1")
    clean_env.setenv("WRITER_COLUMNS", "ts,current,,tbname")
    clean_env.setenv("WRITER_IGNORE_TAGS_UNMATCHED", "true")

    settings = Settings(_env_file=None)

    assert settings.tables == ["meters", "d1"]
    assert settings.columns == ["ts", "current", "tbname"]
    assert settings.ignore_tags_unmatched is True


def test_get_settings_is_cached(clean_env):
    get_settings.cache_clear()
    try:
        assert get_settings() is get_settings()
    finally:
        get_settings.cache_clear()


def test_writer_options_ignores_none_overrides(clean_env):
    settings = Settings(_env_file=None, WRITER_TABLES="meters", WRITER_COLUMNS="ts,current")

    options = settings.writer_options(batch_size=None, tables=["d1"])

    assert options.tables == ["d1"]
    assert options.columns == ["ts", "current"]
    assert options.batch_size == DEFAULT_BATCH_SIZE


@pytest.mark.parametrize(
    "values",
    [
        {"tables": ["t"], "columns": ["ts"], "batch_size": 0},
        {"tables": [], "columns": ["ts"]},
        {"tables": ["t"], "columns": []},
    ],
)
def test_invalid_writer_options_raise_configuration_error(values):
    with pytest.raises(ConfigurationError):
        WriterOptions.build(jdbc_url="jdbc:TAOS://localhost:6030/test", **values)


def test_writer_options_are_frozen():
    options = WriterOptions.build(jdbc_url="jdbc:TAOS://h/db", tables="a,b", columns="ts")
    assert options.tables == ["a", "b"]
    with pytest.raises(ValidationError):
        options.batch_size = 5  # type: ignore[misc]


def test_parse_native_url_with_params():
    target = parse_jdbc_url("jdbc:TAOS://db.example:6999/power?user=writer&password=secret")

    assert target.scheme == "TAOS"
    assert target.host == "db.example"
    assert target.port == 6999
    assert target.database == "power"
    assert target.params == {"user": "writer", "password": "secret"}
    assert not target.is_rest


def test_parse_rest_url_defaults_port():
    target = parse_jdbc_url("jdbc:TAOS-RS://localhost/power")

    assert target.is_rest
    assert target.port == REST_PORT
    assert target.http_url == f"http://localhost:{REST_PORT}"


def test_parse_url_without_database():
    target = parse_jdbc_url("jdbc:TAOS://localhost")
    assert target.port == NATIVE_PORT
    assert target.database is None


@pytest.mark.parametrize(
    "url",
    ["", "postgresql://localhost/db", "jdbc:mysql://localhost:3306/db", "jdbc:TAOS://localhost:port/db"],
)
def test_parse_invalid_urls(url):
    with pytest.raises(ConfigurationError):
        parse_jdbc_url(url)
