"""CLI commands: sampro backup export | import."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console

from sampro.cli._common import open_app, reported_errors, warn_if_unsaved

console = Console()


@click.group()
def backup_group() -> None:
    """Full-document JSON backup and restore."""


@backup_group.command("export")
@click.option(
    "--dir",
    "directory",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    show_default=True,
)
def backup_export(directory: Path) -> None:
    """Write sampro-backup-<date>.json with the entire document."""
    from sampro.core.backup import export_backup

    with reported_errors():
        app = open_app()
        app.require("can_export")
        try:
            path = export_backup(app.store.data, directory)
        except OSError as exc:
            console.print(f"[red]Export failed:[/red] {exc}")
            raise SystemExit(1) from exc
        console.print(f"[green]Backup written:[/green] {path}")


@backup_group.command("import")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--yes", is_flag=True, default=False, help="Do not ask for confirmation")
def backup_import(path: Path, yes: bool) -> None:
    """Replace ALL current data with the contents of a backup file."""
    from sampro.core.backup import read_backup

    with reported_errors():
        app = open_app()
        app.require("can_edit")
        imported = read_backup(path)
        if not yes:
            click.confirm("All current data will be replaced. Continue?", abort=True)
        app.store.replace(imported)
        console.print(
            f"[green]Imported[/green] {len(imported.daily_reports)} report(s) "
            f"and {len(imported.users)} user(s) from {path.name}"
        )
        warn_if_unsaved(app, console)
