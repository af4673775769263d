"""CLI commands: sampro user list | add | passwd | delete."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from sampro.cli._common import open_app, reported_errors, warn_if_unsaved
from sampro.core.models import PERMISSION_NAMES, Collection, User

console = Console()


@click.group()
def user_group() -> None:
    """Users and their permissions."""


@user_group.command("list")
def user_list() -> None:
    """List users (passwords are never shown)."""
    with reported_errors():
        app = open_app()
        table = Table(title="Users")
        table.add_column("id")
        table.add_column("name")
        table.add_column("username")
        for perm in PERMISSION_NAMES:
            table.add_column(perm)
        for user in app.store.data.users:
            flags = user.permissions.model_dump()
            table.add_row(
                user.id,
                user.name,
                user.username,
                *("yes" if flags[p] else "-" for p in PERMISSION_NAMES),
            )
        console.print(table)


@user_group.command("add")
@click.option("--id", "user_id", default="", help="Edit the user with this id instead of adding")
@click.option("--name", default=None, help="Required for new users; omit to keep the current one")
@click.option("--username", default=None, help="Required for new users; omit to keep the current one")
@click.option("--password", default="", help="Required for new users; omit to keep the current one")
@click.option(
    "--allow",
    multiple=True,
    type=click.Choice(list(PERMISSION_NAMES)),
    help="Grant a permission; repeat as needed",
)
@click.option(
    "--deny",
    multiple=True,
    type=click.Choice(list(PERMISSION_NAMES)),
    help="Revoke a permission; repeat as needed",
)
def user_add(
    user_id: str,
    name: str | None,
    username: str | None,
    password: str,
    allow: tuple[str, ...],
    deny: tuple[str, ...],
) -> None:
    """Create a user, or edit one with --id.

    A new user gets only the --allow permissions. An edit starts from the
    user's stored permissions and applies --allow then --deny to them.
    """
    from sampro.core.constants import USER_ID_PREFIX
    from sampro.core.exceptions import ConstraintError
    from sampro.core.store import timestamp_id

    with reported_errors():
        both = set(allow) & set(deny)
        if both:
            raise click.UsageError(f"Cannot both allow and deny: {', '.join(sorted(both))}")

        app = open_app()
        existing = app.store.get(Collection.USERS, user_id) if user_id else None
        app.require("can_edit" if existing is not None else "can_add")

        if existing is None:
            if not name or not username:
                raise ConstraintError("A new user needs --name and --username")
            if not password:
                raise ConstraintError("A new user needs a password")
            permissions = dict.fromkeys(PERMISSION_NAMES, False)
        else:
            name = existing.name if name is None else name
            username = existing.username if username is None else username
            permissions = existing.permissions.model_dump()
        permissions.update(dict.fromkeys(allow, True))
        permissions.update(dict.fromkeys(deny, False))

        record = {
            "id": user_id or timestamp_id(USER_ID_PREFIX),
            "name": name,
            "username": username,
            "permissions": permissions,
        }
        if password:
            record["password"] = password
        revoking_edit = existing is not None and existing.permissions.can_edit and not permissions["can_edit"]
        if revoking_edit and not _others_can_edit(app.store.data.users, existing.id):
            raise ConstraintError("At least one user must keep the can_edit permission")

        app.store.upsert(Collection.USERS, record)
        console.print(f"[green]{'Updated' if existing is not None else 'Added'}[/green] user {username} ({record['id']})")
        warn_if_unsaved(app, console)


@user_group.command("passwd")
@click.option("--username", "new_username", default=None, help="New username (default: keep the current one)")
@click.option("--password", "new_password", default="", help="New password (default: keep the current one)")
@click.option("--confirm", "confirm_password", default="", help="The new password again")
def user_passwd(new_username: str | None, new_password: str, confirm_password: str) -> None:
    """Change your own username and/or password. Needs no permission."""
    from sampro.core.exceptions import ConstraintError, PermissionDeniedError

    with reported_errors():
        if confirm_password and not new_password:
            raise ConstraintError("A confirmation was given without a new password")
        if new_password and not confirm_password:
            confirm_password = click.prompt("Confirm new password", hide_input=True, default="", show_default=False)
        if new_password != confirm_password:
            raise ConstraintError("Passwords do not match")
        if not new_username and not new_password:
            raise click.UsageError("Nothing to change; pass --username and/or --password")

        app = open_app()
        current = app.user()
        if current is None:
            raise PermissionDeniedError("Not logged in. Run 'sampro login' first.")
        stored = app.store.get(Collection.USERS, current.id)
        if stored is None:
            raise PermissionDeniedError("The logged-in user no longer exists. Run 'sampro login' again.")

        changes: dict[str, str] = {}
        if new_username:
            changes["username"] = new_username
        if new_password:
            changes["password"] = new_password
        updated = stored.model_copy(update=changes)
        app.store.upsert(Collection.USERS, updated)
        app.session.login(updated)
        console.print(f"[green]Credentials updated[/green] for {updated.username}")
        warn_if_unsaved(app, console)


@user_group.command("delete")
@click.argument("user_id")
@click.option("--yes", is_flag=True, default=False, help="Do not ask for confirmation")
def user_delete(user_id: str, yes: bool) -> None:
    """Delete a user. The last remaining user cannot be deleted."""
    with reported_errors():
        app = open_app()
        app.require("can_delete")
        if app.store.get(Collection.USERS, user_id) is None:
            console.print(f"No user with id {user_id}.")
            return
        if not yes:
            click.confirm(f"Delete user {user_id}?", abort=True)
        app.store.delete(Collection.USERS, user_id)
        console.print(f"[green]Deleted[/green] user {user_id}")
        warn_if_unsaved(app, console)


def _others_can_edit(users: list[User], user_id: str) -> bool:
    return any(u.permissions.can_edit for u in users if u.id != user_id)
