"""CLI commands: sampro export inventory | summary | master."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console

from sampro.cli._common import open_app, reported_errors
from sampro.core.models import MASTER_PREFIXES, Collection
from sampro.core.reports import GROUP_LABELS

console = Console()

_DIR_OPTION = click.option(
    "--dir",
    "directory",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    show_default=True,
)


def _report_written(path: Path | None) -> None:
    if path is None:
        console.print("Nothing to export.")
    else:
        console.print(f"[green]Spreadsheet written:[/green] {path}")


@click.group()
def export_group() -> None:
    """Spreadsheet (.xls) exports."""


@export_group.command("inventory")
@_DIR_OPTION
@click.option("--search", default="", help="Only reports matching this text")
def export_inventory(directory: Path, search: str) -> None:
    """Every daily report with resolved names and balance."""
    from sampro.core.reports import report_rows, search_reports
    from sampro.core.spreadsheet import write_spreadsheet

    with reported_errors():
        app = open_app()
        app.require("can_export")
        data = app.store.data
        rows = report_rows(data, search_reports(data, search))
        _report_written(write_spreadsheet("inventory-records", rows, directory))


@export_group.command("summary")
@_DIR_OPTION
@click.option(
    "--group-by",
    type=click.Choice(list(GROUP_LABELS)),
    default="modelId",
    show_default=True,
)
@click.option("--from", "date_from", default="", help="Earliest report date (YYYY-MM-DD)")
@click.option("--to", "date_to", default="", help="Latest report date (YYYY-MM-DD)")
@click.option("--material", "material_type_id", default="", help="Only reports using this material type")
def export_summary(directory: Path, group_by: str, date_from: str, date_to: str, material_type_id: str) -> None:
    """Totals of used, manufactured and sold quantities per group."""
    from sampro.core.reports import filter_reports, group_reports, group_rows
    from sampro.core.spreadsheet import write_spreadsheet

    with reported_errors():
        app = open_app()
        app.require("can_export")
        data = app.store.data
        reports = filter_reports(
            data.daily_reports,
            date_from=date_from,
            date_to=date_to,
            material_type_id=material_type_id,
        )
        rows = group_rows(group_reports(data, reports, group_by), group_by)
        _report_written(write_spreadsheet(f"report-grouped-by-{group_by}", rows, directory))


@export_group.command("master")
@_DIR_OPTION
@click.argument("collection", type=click.Choice([c.value for c in MASTER_PREFIXES]))
def export_master(directory: Path, collection: str) -> None:
    """One master table."""
    from sampro.core.reports import master_rows
    from sampro.core.spreadsheet import write_spreadsheet

    with reported_errors():
        app = open_app()
        app.require("can_export")
        rows = master_rows(app.store.data, Collection(collection))
        _report_written(write_spreadsheet(f"{collection}-list", rows, directory))
