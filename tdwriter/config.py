"""
Configuration settings for the TDengine writer.

Uses Pydantic Settings to load environment variables for the connection, the
write job and logging. `WriterOptions` is the validated, frozen view of one
run that the orchestrator consumes; the CLI builds it from `Settings` plus
command-line overrides.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Annotated, Any, Dict, List, Optional
from urllib.parse import parse_qsl, urlsplit

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from tdwriter.errors import ConfigurationError

DEFAULT_BATCH_SIZE = 1000
DEFAULT_IGNORE_TAGS_UNMATCHED = False

NATIVE_SCHEME = "TAOS"
REST_SCHEME = "TAOS-RS"
_DEFAULT_PORTS = {NATIVE_SCHEME: 6030, REST_SCHEME: 6041}


def _split_names(value: Any) -> Any:
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return value


class Settings(BaseSettings):
    # Connection
    jdbc_url: str = Field("jdbc:TAOS://localhost:6030/test", alias="TDENGINE_JDBC_URL")
    username: str = Field("root", alias="TDENGINE_USER")
    password: str = Field("taosdata", alias="TDENGINE_PASSWORD")

    # Write job
    batch_size: int = Field(DEFAULT_BATCH_SIZE, alias="WRITER_BATCH_SIZE")
    tables: Annotated[List[str], NoDecode] = Field(default_factory=list, alias="WRITER_TABLES")
    columns: Annotated[List[str], NoDecode] = Field(default_factory=list, alias="WRITER_COLUMNS")
    ignore_tags_unmatched: bool = Field(
        DEFAULT_IGNORE_TAGS_UNMATCHED, alias="WRITER_IGNORE_TAGS_UNMATCHED"
    )

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("tables", "columns", mode="before")
    @classmethod
    def _comma_separated(cls, value: Any) -> Any:
        return _split_names(value)

    def writer_options(self, **overrides: Any) -> "WriterOptions":
        """
        Build run options from settings; `None` overrides are ignored.
        """
        values: Dict[str, Any] = {
            "jdbc_url": self.jdbc_url,
            "username": self.username,
            "password": self.password,
            "batch_size": self.batch_size,
            "tables": self.tables,
            "columns": self.columns,
            "ignore_tags_unmatched": self.ignore_tags_unmatched,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return WriterOptions.build(**values)


class WriterOptions(BaseModel):
    """
    Validated configuration for one write run.
    """

    jdbc_url: str
    username: str = "root"
    password: str = "taosdata"
    batch_size: int = Field(DEFAULT_BATCH_SIZE, ge=1)
    tables: List[str] = Field(..., min_length=1)
    columns: List[str] = Field(..., min_length=1)
    ignore_tags_unmatched: bool = DEFAULT_IGNORE_TAGS_UNMATCHED

    model_config = {"frozen": True}

    @field_validator("tables", "columns", mode="before")
    @classmethod
    def _comma_separated(cls, value: Any) -> Any:
        return _split_names(value)

    @classmethod
    def build(cls, **values: Any) -> "WriterOptions":
        """Validate options, surfacing failures as ConfigurationError."""
        try:
            return cls(**values)
        except ValidationError as exc:
            raise ConfigurationError(f"invalid writer configuration: {exc}") from exc


@dataclass(frozen=True)
class ConnectionTarget:
    """
    Parsed form of a JDBC-style TDengine URL.
    """

    scheme: str
    host: str
    port: int
    database: Optional[str]
    params: Dict[str, str] = field(default_factory=dict)

    @property
    def is_rest(self) -> bool:
        return self.scheme == REST_SCHEME

    @property
    def http_url(self) -> str:
        return f"http://{self.host}:{self.port}"


def parse_jdbc_url(url: str) -> ConnectionTarget:
    """
    Parse `jdbc:TAOS://host:port/db?k=v` (native) or `jdbc:TAOS-RS://...` (REST).
    """
    if not url or not url.lower().startswith("jdbc:"):
        raise ConfigurationError(f"not a JDBC url: {url!r}")
    body = url[len("jdbc:"):]
    scheme, sep, _ = body.partition("://")
    scheme = scheme.upper()
    if not sep or scheme not in _DEFAULT_PORTS:
        raise ConfigurationError(f"unsupported JDBC scheme in url: {url!r}")

    parts = urlsplit("//" + body[len(scheme) + 3:])
    try:
        port = parts.port or _DEFAULT_PORTS[scheme]
    except ValueError as exc:
        raise ConfigurationError(f"invalid port in url: {url!r}") from exc

    database = parts.path.strip("/") or None
    params = dict(parse_qsl(parts.query, keep_blank_values=True))
    return ConnectionTarget(
        scheme=scheme,
        host=parts.hostname or "localhost",
        port=port,
        database=database,
        params=params,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = [
    "DEFAULT_BATCH_SIZE",
    "Settings",
    "WriterOptions",
    "ConnectionTarget",
    "get_settings",
    "parse_jdbc_url",
]
