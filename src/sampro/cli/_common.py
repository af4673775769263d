"""Shared CLI plumbing: opening the store, session, and error reporting."""

from __future__ import annotations

import sys
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from rich.console import Console

from sampro.core.config import SamProConfig, load_config
from sampro.core.constants import ExitCode
from sampro.core.exceptions import (
    AuthenticationError,
    ConfigError,
    ConstraintError,
    ImportRejectedError,
    PermissionDeniedError,
    SamProError,
    StorageError,
)
from sampro.core.log import configure_logging
from sampro.core.models import User
from sampro.core.session import Session, require_permission
from sampro.core.store import DataStore, FileStorage

err_console = Console(stderr=True)

_EXIT_CODES: list[tuple[type[SamProError], ExitCode]] = [
    (ConfigError, ExitCode.CONFIG_ERROR),
    (StorageError, ExitCode.STORAGE_ERROR),
    (AuthenticationError, ExitCode.AUTH_ERROR),
    (PermissionDeniedError, ExitCode.PERMISSION_ERROR),
    (ConstraintError, ExitCode.CONSTRAINT_ERROR),
    (ImportRejectedError, ExitCode.IMPORT_ERROR),
]


@dataclass
class App:
    config: SamProConfig
    store: DataStore
    session: Session

    def user(self) -> User | None:
        if self.store.read_only:
            # The in-memory document is the seed; keep the stored session as is
            return self.session.current_user()
        return self.session.refresh(self.store.data)

    def require(self, permission: str) -> User:
        return require_permission(self.user(), permission)


def open_app() -> App:
    """Load config, set up logging, migrate and open the document store."""
    config = load_config()
    configure_logging(config.logging)
    store = DataStore.open(FileStorage(config.data_dir))
    if store.read_only:
        err_console.print(
            f"[yellow]Warning:[/yellow] {config.data_dir} holds a document that could not be read. "
            "It was left untouched and changes are disabled until it is fixed or a backup is imported."
        )
    session = Session(FileStorage(config.session_dir))
    return App(config=config, store=store, session=session)


@contextmanager
def reported_errors() -> Iterator[None]:
    """Turn SAM Pro errors into a red message and a matching exit code."""
    try:
        yield
    except SamProError as exc:
        code = next((c for t, c in _EXIT_CODES if isinstance(exc, t)), ExitCode.ERROR)
        err_console.print(f"[red]Error:[/red] {exc}")
        sys.exit(int(code))


def warn_if_unsaved(app: App, console: Console) -> None:
    if not app.store.last_write_ok:
        console.print(
            "[yellow]Warning:[/yellow] the change is active but could not be saved to "
            f"{app.config.data_dir}. See the log for details."
        )
