from __future__ import annotations

from rich.console import Console

from tdwriter.domain.models import TableKind
from tdwriter.reporter import print_schema, print_summary


def _console() -> Console:
    return Console(record=True, width=140)


def test_print_summary_lists_tables_and_counts() -> None:
    console = _console()
    summary = {
        "tables": ["meters"],
        "routes": {"meters": "super_sql"},
        "records": 1200,
        "affected_rows": 1199,
        "dirty_records": 1,
        "batches": 2,
    }

    print_summary(summary, console=console)

    text = console.export_text()
    assert "table meters" in text
    assert "super_sql" in text
    assert "1,200" in text
    assert "1,199" in text


def test_print_summary_handles_empty_summary() -> None:
    console = _console()
    print_summary({}, console=console)
    assert "Nothing was written." in console.export_text()


def test_print_schema_marks_roles_and_bound_values(make_snapshot, sub_columns) -> None:
    console = _console()
    snapshot = make_snapshot({"d1": (TableKind.SUB, sub_columns)})

    print_schema(snapshot, {"d1": "sub_table"}, console=console)

    text = console.export_text()
    assert "primary key" in text
    assert "tag" in text
    assert "sub_table" in text
    assert "Database precision: ms" in text
