"""CLI commands: sampro master list | add | delete."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from sampro.cli._common import open_app, reported_errors, warn_if_unsaved
from sampro.core.models import MASTER_PREFIXES, Collection

console = Console()

_COLLECTION = click.Choice([c.value for c in MASTER_PREFIXES])


def _non_empty(ctx: click.Context, param: click.Parameter, value: str) -> str:
    value = value.strip()
    if not value:
        raise click.BadParameter("name cannot be empty")
    return value


@click.group()
def master_group() -> None:
    """Colors, models, material types, barcodes, items, sizes, categories, seasons."""


@master_group.command("list")
@click.argument("collection", type=_COLLECTION)
def master_list(collection: str) -> None:
    """List the records of one master table."""
    from sampro.core.reports import MASTER_FIELD_LABELS, MASTER_FIELDS

    with reported_errors():
        app = open_app()
        coll = Collection(collection)
        fields = MASTER_FIELDS[coll]

        table = Table(title=collection)
        for field in fields:
            table.add_column(MASTER_FIELD_LABELS[field])
        for record in app.store.data.records(coll):
            table.add_row(*(str(getattr(record, f, None) or "") for f in fields))
        console.print(table)


@master_group.command("add")
@click.argument("collection", type=_COLLECTION)
@click.option("--name", required=True, callback=_non_empty)
@click.option("--id", "record_id", default="", help="Edit the record with this id instead of adding")
@click.option("--description", default=None, help="models only")
@click.option("--model-id", default=None, help="barcodes only")
@click.option("--type", "item_type", default=None, help="items only")
@click.option("--notes", default=None, help="items only")
def master_add(
    collection: str,
    name: str,
    record_id: str,
    description: str | None,
    model_id: str | None,
    item_type: str | None,
    notes: str | None,
) -> None:
    """Add a record (next sequential id) or edit one with --id."""
    with reported_errors():
        app = open_app()
        coll = Collection(collection)
        editing = bool(record_id) and app.store.get(coll, record_id) is not None
        app.require("can_edit" if editing else "can_add")

        record = {"id": record_id or app.store.next_master_id(coll), "name": name}
        extras = {"description": description, "model_id": model_id, "type": item_type, "notes": notes}
        allowed = set(coll.record_type.model_fields)
        record.update({k: v for k, v in extras.items() if v is not None and k in allowed})

        app.store.upsert(coll, record)
        verb = "Updated" if editing else "Added"
        console.print(f"[green]{verb}[/green] {collection} {record['id']}: {name}")
        warn_if_unsaved(app, console)


@master_group.command("delete")
@click.argument("collection", type=_COLLECTION)
@click.argument("record_id")
@click.option("--yes", is_flag=True, default=False, help="Do not ask for confirmation")
def master_delete(collection: str, record_id: str, yes: bool) -> None:
    """Delete a master record. Reports that use it show it as unspecified."""
    with reported_errors():
        app = open_app()
        app.require("can_delete")
        coll = Collection(collection)
        if app.store.get(coll, record_id) is None:
            console.print(f"No {collection} record with id {record_id}.")
            return
        if not yes:
            click.confirm(f"Delete {collection} {record_id}?", abort=True)
        app.store.delete(coll, record_id)
        console.print(f"[green]Deleted[/green] {collection} {record_id}")
        warn_if_unsaved(app, console)
