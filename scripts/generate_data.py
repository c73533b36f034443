"""
Sample data generator for the TDengine writer.

Emits deterministic smart-meter readings as JSON Lines, shaped for a super
table `meters (ts TIMESTAMP, current FLOAT, voltage INT, phase FLOAT) TAGS
(location BINARY(64), groupid INT)`, and optionally streams them into
TDengine through the writer.
"""

from __future__ import annotations

import json
import random
import sys
import tempfile
import time
from pathlib import Path

import typer

from tdwriter.collectors import LoggingDirtyCollector
from tdwriter.config import get_settings
from tdwriter.orchestrator import run_writer
from tdwriter.sources import JsonLinesRecordSource
from tdwriter.utils.logging import configure_logging

app = typer.Typer(help="Generate synthetic meter readings (JSON Lines) and load them into TDengine.")

METER_COLUMNS = ["ts", "current", "voltage", "phase", "location", "groupid"]
LOCATIONS = ["California.SanFrancisco", "California.LosAngeles", "California.San Diego", "Nevada.Las Vegas"]
START_TS_MS = 1_700_000_000_000


def _columns(with_tbname: bool) -> list[str]:
    return METER_COLUMNS + ["tbname"] if with_tbname else list(METER_COLUMNS)


def _generate_rows_jsonl(
    path: Path,
    rows: int,
    meters: int,
    seed: int,
    with_tbname: bool = False,
) -> None:
    rng = random.Random(seed)
    devices = [(f"d{i}", LOCATIONS[i % len(LOCATIONS)], i % 10) for i in range(meters)]

    with path.open("w", encoding="utf-8") as f:
        for i in range(rows):
            name, location, groupid = devices[i % meters]
            row = [
                START_TS_MS + (i // meters) * 1_000,
                round(rng.uniform(8.0, 15.0), 2),
                rng.randint(200, 240),
                round(rng.uniform(0.2, 0.4), 3),
                location,
                groupid,
            ]
            if with_tbname:
                row.append(name)
            f.write(json.dumps(row) + "\n")


@app.command()
def main(
    rows: int = typer.Option(10_000, "--rows", "-r", help="Number of rows to generate."),
    meters: int = typer.Option(4, "--meters", "-m", help="Number of distinct devices."),
    seed: int = typer.Option(42, "--seed", help="Deterministic RNG seed."),
    with_tbname: bool = typer.Option(
        False, "--with-tbname", help="Append a tbname column so the super table is written via SQL."
    ),
    table: str = typer.Option("meters", "--table", "-t", help="Destination table when loading."),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Optional JSON Lines output path (if omitted, a temp file will be used).",
    ),
    no_load: bool = typer.Option(False, "--no-load", help="Only generate the file; skip loading."),
) -> None:
    """
    Generate synthetic readings and optionally write them into TDengine.
    """
    start = time.perf_counter()
    if output:
        path = output
        path.parent.mkdir(parents=True, exist_ok=True)
    else:
        path = Path(tempfile.mkdtemp(prefix="tdwriter_jsonl_")) / "meters.jsonl"

    typer.echo(f"Generating {rows:,} rows for {meters} meters -> {path} (seed={seed})")
    _generate_rows_jsonl(path, rows=rows, meters=meters, seed=seed, with_tbname=with_tbname)
    typer.echo(f"Generation completed in {time.perf_counter() - start:.2f}s")

    if no_load:
        typer.echo("Skipping load (no-load flag set).")
        return

    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    options = settings.writer_options(tables=[table], columns=_columns(with_tbname))
    with JsonLinesRecordSource(path, options.columns) as source:
        summary = run_writer(options, source, LoggingDirtyCollector())
    typer.echo(
        f"Loaded {summary['affected_rows']:,}/{summary['records']:,} rows "
        f"in {summary['duration_seconds']:.2f}s ({summary['dirty_records']} dirty)."
    )


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
