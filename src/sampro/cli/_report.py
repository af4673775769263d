"""CLI commands: sampro report list | add | delete."""

from __future__ import annotations

from datetime import date

import click
from rich.console import Console
from rich.table import Table

from sampro.cli._common import open_app, reported_errors, warn_if_unsaved
from sampro.core.models import Collection

console = Console()


def _parse_material(ctx: click.Context, param: click.Parameter, values: tuple[str, ...]) -> list[dict]:
    usages = []
    for value in values:
        material_id, sep, qty = value.partition("=")
        if not sep or not material_id:
            raise click.BadParameter(f"expected MATERIAL_ID=QUANTITY, got {value!r}")
        try:
            quantity = float(qty)
        except ValueError:
            raise click.BadParameter(f"quantity must be a number, got {qty!r}") from None
        if quantity < 0:
            raise click.BadParameter("quantity cannot be negative")
        usages.append({"materialTypeId": material_id, "quantityUsed": quantity})
    return usages


@click.group()
def report_group() -> None:
    """Daily production reports."""


@report_group.command("list")
@click.option("--search", default="", help="Match names, dates, notes and materials")
@click.option("--from", "date_from", default="", help="Earliest report date (YYYY-MM-DD)")
@click.option("--to", "date_to", default="", help="Latest report date (YYYY-MM-DD)")
def report_list(search: str, date_from: str, date_to: str) -> None:
    """List daily reports with resolved names and balance."""
    from sampro.core.reports import describe_materials, filter_reports, lookup_name, search_reports

    with reported_errors():
        app = open_app()
        data = app.store.data
        reports = filter_reports(search_reports(data, search), date_from=date_from, date_to=date_to)

        table = Table(title="Daily reports")
        for column in ("id", "date", "barcode", "model", "item", "materials", "made", "sold", "balance"):
            table.add_column(column)
        for r in reports:
            table.add_row(
                r.id,
                r.report_date,
                lookup_name(data, Collection.BARCODES, r.barcode_id),
                lookup_name(data, Collection.MODELS, r.model_id),
                lookup_name(data, Collection.ITEMS, r.item_id),
                describe_materials(data, r),
                f"{r.quantity_manufactured:g}",
                f"{r.quantity_sold:g}",
                f"{r.balance:g}",
            )
        console.print(table)


@report_group.command("add")
@click.option("--id", "report_id", default="", help="Edit the report with this id instead of adding")
@click.option("--date", "report_date", default=lambda: date.today().isoformat(), show_default="today")
@click.option("--start", "start_date", default="", help="Run start date (defaults to --date)")
@click.option("--end", "end_date", default="", help="Run end date (defaults to --date)")
@click.option(
    "--material",
    "materials",
    multiple=True,
    required=True,
    callback=_parse_material,
    help="MATERIAL_ID=QUANTITY; repeat for several materials",
)
@click.option("--item", "item_id", default="")
@click.option("--color", "color_id", default="")
@click.option("--model", "model_id", default="")
@click.option("--barcode", "barcode_id", default="")
@click.option("--size", "size_id", default="")
@click.option("--category", "category_id", default="")
@click.option("--season", "season_id", default="")
@click.option("--manufactured", type=float, default=0.0)
@click.option("--sold", type=float, default=0.0)
@click.option("--notes", default="")
def report_add(report_id: str, report_date: str, start_date: str, end_date: str, materials: list[dict], **fields) -> None:
    """Record a day's material usage and output."""
    from sampro.core.constants import REPORT_ID_PREFIX
    from sampro.core.models import DailyReport
    from sampro.core.reports import validate_report
    from sampro.core.store import timestamp_id

    with reported_errors():
        app = open_app()
        editing = bool(report_id) and app.store.get(Collection.DAILY_REPORTS, report_id) is not None
        app.require("can_edit" if editing else "can_add")

        report = DailyReport.model_validate(
            {
                "id": report_id or timestamp_id(REPORT_ID_PREFIX),
                "reportDate": report_date,
                "startDate": start_date or report_date,
                "endDate": end_date or report_date,
                "materialsUsed": materials,
                "quantityManufactured": fields.pop("manufactured"),
                "quantitySold": fields.pop("sold"),
                **fields,
            }
        )
        validate_report(report)
        app.store.upsert(Collection.DAILY_REPORTS, report)
        console.print(f"[green]{'Updated' if editing else 'Saved'}[/green] report {report.id}")
        warn_if_unsaved(app, console)


@report_group.command("delete")
@click.argument("report_id")
@click.option("--yes", is_flag=True, default=False, help="Do not ask for confirmation")
def report_delete(report_id: str, yes: bool) -> None:
    """Delete a daily report."""
    with reported_errors():
        app = open_app()
        app.require("can_delete")
        if app.store.get(Collection.DAILY_REPORTS, report_id) is None:
            console.print(f"No report with id {report_id}.")
            return
        if not yes:
            click.confirm(f"Delete report {report_id}?", abort=True)
        app.store.delete(Collection.DAILY_REPORTS, report_id)
        console.print(f"[green]Deleted[/green] report {report_id}")
        warn_if_unsaved(app, console)
