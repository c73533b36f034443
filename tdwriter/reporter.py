from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from tdwriter.domain.models import SchemaSnapshot


def print_summary(summary: Mapping[str, Any], console: Optional[Console] = None) -> None:
    """
    Render a write summary as a rich table.

    Dirty records and a mismatch between records and affected rows are
    highlighted so partial loads stand out.
    """
    console = console or Console()

    if not summary:
        console.print("[yellow]Nothing was written.[/yellow]")
        return

    records = summary.get("records", 0)
    affected = summary.get("affected_rows", 0)
    dirty = summary.get("dirty_records", 0)

    table = Table(title="TDengine Write Summary", box=box.ROUNDED)
    table.add_column("Metric", style="cyan", no_wrap=True)
    table.add_column("Value", justify="right", style="magenta")

    routes: Dict[str, str] = summary.get("routes", {})
    for name in summary.get("tables", []):
        table.add_row(f"table {name}", routes.get(name, "-"))

    affected_style = "green" if affected == records else "bold red"
    table.add_row("Records", f"{records:,}")
    table.add_row("Affected rows", f"[{affected_style}]{affected:,}[/{affected_style}]")
    table.add_row("Dirty records", f"[{'bold red' if dirty else 'green'}]{dirty:,}[/]")
    table.add_row("Batches", f"{summary.get('batches', 0):,}")
    table.add_row("Fallback batches", f"{summary.get('fallback_batches', 0):,}")
    table.add_row("Duration (s)", f"{summary.get('duration_seconds', 0.0):.2f}")
    table.add_row("Throughput (rows/s)", f"{summary.get('throughput_rows_per_sec', 0.0):,.2f}")

    console.print(table)


def print_schema(snapshot: SchemaSnapshot, routes: Mapping[str, str], console: Optional[Console] = None) -> None:
    """Render loaded table metadata, one row per column."""
    console = console or Console()

    table = Table(
        title="Destination Tables",
        box=box.ROUNDED,
        caption=f"Database precision: {snapshot.precision.value or 'unknown'}",
    )
    table.add_column("Table", style="cyan", no_wrap=True)
    table.add_column("Kind", style="blue")
    table.add_column("Route", style="green")
    table.add_column("Column")
    table.add_column("Type", style="yellow")
    table.add_column("Role")
    table.add_column("Bound Value", style="magenta")

    for name, meta in snapshot.tables.items():
        for i, column in enumerate(snapshot.columns_of(name)):
            role = "tag" if column.is_tag else ("primary key" if column.is_primary_key else "")
            table.add_row(
                name if i == 0 else "",
                meta.kind.value if i == 0 else "",
                routes.get(name, "") if i == 0 else "",
                column.field,
                column.type,
                role,
                "" if column.value is None else str(column.value),
            )

    console.print(table)
