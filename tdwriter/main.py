from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Optional

import typer

from tdwriter.classifier import classify
from tdwriter.collectors import JsonLinesDirtyCollector, LoggingDirtyCollector
from tdwriter.config import WriterOptions, get_settings
from tdwriter.domain.models import ConfiguredColumns
from tdwriter.errors import WriterError
from tdwriter.infrastructure.schema_manager import SchemaManager
from tdwriter.infrastructure.transport import transport_session
from tdwriter.orchestrator import run_writer
from tdwriter.reporter import print_schema, print_summary
from tdwriter.sources import JsonLinesRecordSource
from tdwriter.utils.logging import configure_logging, get_logger

app = typer.Typer(help="Batch writer for TDengine super, sub and normal tables.")
log = get_logger(__name__)


def _options(
    tables: Optional[List[str]],
    columns: Optional[List[str]],
    batch_size: Optional[int] = None,
    ignore_tags_unmatched: Optional[bool] = None,
) -> WriterOptions:
    return get_settings().writer_options(
        tables=tables or None,
        columns=columns or None,
        batch_size=batch_size,
        ignore_tags_unmatched=ignore_tags_unmatched,
    )


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"URL={settings.jdbc_url} user={settings.username} | "
        f"tables={','.join(settings.tables) or '-'} columns={','.join(settings.columns) or '-'} | "
        f"batch={settings.batch_size} ignore_tags_unmatched={settings.ignore_tags_unmatched}"
    )


@app.command()
def describe(
    table: Optional[List[str]] = typer.Option(None, "--table", "-t", help="Destination table (repeatable)."),
    column: Optional[List[str]] = typer.Option(None, "--column", "-c", help="Configured column (repeatable)."),
) -> None:
    """
    Load destination table metadata and show how each table will be written.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    options = _options(table, column)
    columns = ConfiguredColumns(options.columns)
    with transport_session(options) as transport:
        snapshot = SchemaManager(transport).load(options.tables)
    routes = {name: classify(snapshot.table(name), columns).value for name in options.tables}
    print_schema(snapshot, routes)


@app.command()
def write(
    input_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON Lines file of records."),
    table: Optional[List[str]] = typer.Option(None, "--table", "-t", help="Destination table (repeatable)."),
    column: Optional[List[str]] = typer.Option(None, "--column", "-c", help="Configured column (repeatable)."),
    batch_size: Optional[int] = typer.Option(None, "--batch-size", "-b", help="Records per batch."),
    ignore_tags_unmatched: Optional[bool] = typer.Option(
        None,
        "--ignore-tags-unmatched/--keep-tags-unmatched",
        help="Skip sub-table rows whose tags differ from the table's tags.",
    ),
    dirty_output: Optional[Path] = typer.Option(
        None, "--dirty-output", help="Write dirty records to this JSON Lines file instead of the log."
    ),
) -> None:
    """
    Stream records from a JSON Lines file into the configured tables.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    options = _options(table, column, batch_size, ignore_tags_unmatched)

    collector = JsonLinesDirtyCollector(dirty_output) if dirty_output else LoggingDirtyCollector()
    try:
        with JsonLinesRecordSource(input_path, options.columns) as source:
            summary = run_writer(options, source, collector)
    finally:
        if isinstance(collector, JsonLinesDirtyCollector):
            collector.close()
    print_summary(summary)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
    except WriterError as exc:
        log.error("write aborted: %s", exc)
        typer.echo(f"Error: {exc}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
