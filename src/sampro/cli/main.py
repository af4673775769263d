"""
SAM Pro CLI entry point.

Commands:
  sampro status                 — document location, schema version, record counts
  sampro migrate [--dry-run]    — upgrade a legacy document now
  sampro login / logout         — start or end the session
  sampro whoami                 — show the logged-in user and permissions
  sampro master ...             — list/add/delete master data
  sampro report ...             — list/add/delete daily reports
  sampro user ...               — list/add/delete users
  sampro settings ...           — show/update company settings
  sampro backup export|import   — full JSON backup and restore
  sampro export ...             — spreadsheet exports
  sampro config init|show|validate — configuration file
"""

from __future__ import annotations

import json

import click
from rich.console import Console

from sampro import __version__
from sampro.cli._backup import backup_group
from sampro.cli._common import open_app, reported_errors
from sampro.cli._config_cmd import config_group
from sampro.cli._export import export_group
from sampro.cli._master import master_group
from sampro.cli._report import report_group
from sampro.cli._settings import settings_group
from sampro.cli._user import user_group

console = Console()


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, "--version", "-V", message="sampro %(version)s")
def cli() -> None:
    """SAM Pro — daily production ledger for textile manufacturing."""


cli.add_command(master_group, "master")
cli.add_command(report_group, "report")
cli.add_command(user_group, "user")
cli.add_command(settings_group, "settings")
cli.add_command(backup_group, "backup")
cli.add_command(export_group, "export")
cli.add_command(config_group, "config")


# ---------------------------------------------------------------------------
# status / migrate
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--json", "as_json", is_flag=True, default=False)
def status(as_json: bool) -> None:
    """Show where the document lives and how many records it holds."""
    from sampro.core.models import Collection
    from sampro.core.store.migrations import CURRENT_SCHEMA_VERSION

    with reported_errors():
        app = open_app()
        data = app.store.data
        counts = {c.value: len(data.records(c)) for c in Collection}
        user = app.user()

        if as_json:
            click.echo(
                json.dumps(
                    {
                        "data_dir": str(app.config.data_dir),
                        "schema_version": CURRENT_SCHEMA_VERSION,
                        "company": data.settings.company_name,
                        "user": user.username if user else None,
                        "counts": counts,
                    },
                    ensure_ascii=False,
                    indent=2,
                )
            )
            return

        console.print(f"[bold]SAM Pro[/bold]: {data.settings.company_name}")
        console.print(f"Data directory: {app.config.data_dir}")
        console.print(f"Schema version: {CURRENT_SCHEMA_VERSION}")
        console.print(f"Logged in as:   {user.username if user else '[dim]nobody[/dim]'}")
        console.print("\nRecord counts:")
        for name, count in counts.items():
            console.print(f"  {name:<16} {count}")


@cli.command()
@click.option("--dry-run", is_flag=True, default=False, help="Report without writing")
def migrate(dry_run: bool) -> None:
    """Upgrade a legacy (fabric-era) document to the current layout."""
    from sampro.core.config import load_config
    from sampro.core.log import configure_logging
    from sampro.core.store import FileStorage
    from sampro.core.store.migrations import (
        CURRENT_SCHEMA_VERSION,
        pending_migration,
        run_pre_boot_migration,
    )

    with reported_errors():
        config = load_config()
        configure_logging(config.logging)
        storage = FileStorage(config.data_dir)

        version = pending_migration(storage)
        if version is None:
            console.print(f"Document is already at version {CURRENT_SCHEMA_VERSION}. No migration needed.")
            return

        if dry_run:
            console.print(
                f"[dim]Dry run — document would be migrated from v{version} "
                f"to v{CURRENT_SCHEMA_VERSION}.[/dim]"
            )
            return

        run_pre_boot_migration(storage)
        if pending_migration(storage) is None:
            console.print(f"[green]Document migrated to v{CURRENT_SCHEMA_VERSION}.[/green]")
        else:
            console.print("[red]Migration failed; the stored document was left unchanged.[/red]")
            raise SystemExit(1)


# ---------------------------------------------------------------------------
# login / logout / whoami
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--username", "-u", prompt=True)
@click.option("--password", "-p", prompt=True, hide_input=True)
def login(username: str, password: str) -> None:
    """Log in with a username and password."""
    from sampro.core.exceptions import AuthenticationError
    from sampro.core.session import authenticate

    with reported_errors():
        app = open_app()
        user = authenticate(app.store.data, username, password)
        if user is None:
            raise AuthenticationError("Invalid username or password")
        app.session.login(user)
        console.print(f"[green]Welcome, {user.name}.[/green]")


@cli.command()
def logout() -> None:
    """End the current session."""
    with reported_errors():
        app = open_app()
        app.session.logout()
        console.print("Logged out.")


@cli.command()
@click.option("--json", "as_json", is_flag=True, default=False)
def whoami(as_json: bool) -> None:
    """Show the logged-in user and their permissions."""
    with reported_errors():
        app = open_app()
        user = app.user()
        if user is None:
            console.print("Not logged in.")
            raise SystemExit(1)
        if as_json:
            click.echo(
                json.dumps(
                    user.model_dump(mode="json", by_alias=True, exclude_none=True),
                    ensure_ascii=False,
                    indent=2,
                )
            )
            return
        console.print(f"[bold]{user.name}[/bold] ({user.username}, id {user.id})")
        for perm, allowed in user.permissions.model_dump().items():
            mark = "[green]yes[/green]" if allowed else "[red]no[/red]"
            console.print(f"  {perm:<12} {mark}")
