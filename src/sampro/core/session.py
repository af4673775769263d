"""
Login session and permission checks.

Credentials are compared in plaintext against the users in the document; this
is a convenience gate for a single-tenant install, not a security boundary.
The logged-in user is kept, without its password, under the ``current-user``
key of a session storage that is cleared on logout.
"""

from __future__ import annotations

import json
import logging

from sampro.core.constants import CURRENT_USER_KEY
from sampro.core.exceptions import PermissionDeniedError, StorageError
from sampro.core.models import PERMISSION_NAMES, AppData, User
from sampro.core.store.persistent import load
from sampro.core.store.storage import Storage

logger = logging.getLogger(__name__)


def authenticate(data: AppData, username: str, password: str) -> User | None:
    """Return the user whose username and password both match, else None."""
    for user in data.users:
        if user.username == username:
            if user.password is not None and user.password == password:
                return user
            return None
    return None


def require_permission(user: User | None, permission: str) -> User:
    """Return *user* if it holds *permission*, else raise :class:`PermissionDeniedError`."""
    if permission not in PERMISSION_NAMES:
        raise ValueError(f"Unknown permission {permission!r}; expected one of {PERMISSION_NAMES}")
    if user is None:
        raise PermissionDeniedError("Not logged in. Run 'sampro login' first.")
    if not getattr(user.permissions, permission):
        raise PermissionDeniedError(f"User {user.username!r} lacks the {permission!r} permission")
    return user


class Session:
    """The current user, persisted in session storage."""

    def __init__(self, storage: Storage) -> None:
        self.storage = storage
        self._user: User | None = load(storage, CURRENT_USER_KEY, None, User.model_validate)

    def current_user(self) -> User | None:
        return self._user

    def login(self, user: User) -> User:
        """Remember *user* (minus password). Storage failures are logged, not raised."""
        stored = user.without_password()
        try:
            self.storage.set_item(CURRENT_USER_KEY, json.dumps(_dump(stored), ensure_ascii=False))
        except StorageError as exc:
            logger.error("Cannot save session: %s", exc)
        self._user = stored
        return stored

    def logout(self) -> None:
        try:
            self.storage.remove_item(CURRENT_USER_KEY)
        except StorageError as exc:
            logger.error("Cannot clear session: %s", exc)
        finally:
            self._user = None

    def refresh(self, data: AppData) -> User | None:
        """Re-read the session user from *data*; drops the session if the user is gone."""
        if self._user is None:
            return None
        for user in data.users:
            if user.id == self._user.id:
                return self.login(user)
        self.logout()
        return None


def _dump(user: User) -> dict[str, object]:
    return user.model_dump(mode="json", by_alias=True, exclude_none=True)
