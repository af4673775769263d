"""CLI commands: sampro settings show | set."""

from __future__ import annotations

import json

import click
from rich.console import Console

from sampro.cli._common import open_app, reported_errors, warn_if_unsaved

console = Console()


@click.group()
def settings_group() -> None:
    """Company name, logo, contact details and manager."""


@settings_group.command("show")
@click.option("--json", "as_json", is_flag=True, default=False, help="Output as JSON")
def settings_show(as_json: bool) -> None:
    """Display the company settings."""
    with reported_errors():
        app = open_app()
        settings = app.store.data.settings
        if as_json:
            click.echo(json.dumps(settings.model_dump(by_alias=True), ensure_ascii=False, indent=2))
            return
        console.print("[bold]Company settings[/bold]\n")
        for key, value in settings.model_dump().items():
            console.print(f"  {key:<14} = {value!r}")


@settings_group.command("set")
@click.option("--company-name", default=None)
@click.option("--logo-url", default=None, help="URL or data: URI")
@click.option("--contact-info", default=None)
@click.option("--manager-name", default=None)
def settings_set(**changes: str | None) -> None:
    """Update one or more company settings."""
    with reported_errors():
        app = open_app()
        app.require("can_edit")
        changes = {k: v for k, v in changes.items() if v is not None}
        if not changes:
            console.print("Nothing to change.")
            return
        app.store.update_settings(**changes)
        console.print("[green]Settings saved.[/green]")
        warn_if_unsaved(app, console)
