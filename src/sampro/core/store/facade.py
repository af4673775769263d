"""
Data access facade — the only way to change the SAM Pro document.

Usage::

    store = DataStore.open(FileStorage(data_dir))   # migrates, then loads
    store.upsert(Collection.COLORS, {"id": store.next_master_id(Collection.COLORS), "name": "Green"})
    store.delete(Collection.DAILY_REPORTS, "DR-1718000000000")

Every mutation builds a new ``AppData`` snapshot, writes it through to storage
and returns it.  Snapshots are frozen; callers never edit them in place.
"""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from sampro.core.constants import APP_DATA_KEY, ID_PAD_WIDTH
from sampro.core.exceptions import ConstraintError, StorageError
from sampro.core.models import MASTER_PREFIXES, AppData, Collection, DocumentModel, User, seed_document
from sampro.core.store.migrations import run_pre_boot_migration
from sampro.core.store.persistent import PersistentValue, store
from sampro.core.store.storage import Storage

logger = logging.getLogger(__name__)

_LEADING_DIGITS = re.compile(r"\s*(\d+)")


# ---------------------------------------------------------------------------
# Identifiers
# ---------------------------------------------------------------------------


def next_id(prefix: str, ids: Iterable[str]) -> str:
    """Next sequential id: ``{C001, C002, C005}`` → ``C006``; none → ``C001``."""
    numbers: list[int] = []
    for record_id in ids:
        if not record_id.startswith(prefix):
            continue
        match = _LEADING_DIGITS.match(record_id[len(prefix) :])
        if match:
            numbers.append(int(match.group(1)))
    highest = max(numbers, default=0)
    return f"{prefix}{highest + 1:0{ID_PAD_WIDTH}d}"


def timestamp_id(prefix: str) -> str:
    """Id for reports and users: prefix plus epoch milliseconds."""
    return f"{prefix}{time.time_ns() // 1_000_000}"


# ---------------------------------------------------------------------------
# Facade
# ---------------------------------------------------------------------------


class DataStore:
    """Typed CRUD over the persisted ``AppData`` document."""

    def __init__(self, storage: Storage, key: str = APP_DATA_KEY) -> None:
        self._cell: PersistentValue[AppData] = PersistentValue(
            storage,
            key,
            seed_document(),
            decode=AppData.model_validate,
            encode=AppData.to_document,
        )

    @classmethod
    def open(cls, storage: Storage, key: str = APP_DATA_KEY) -> DataStore:
        """Run the pre-boot migration, load the document, seed it on first run."""
        run_pre_boot_migration(storage, key)
        first_run = _is_absent(storage, key)
        data_store = cls(storage, key)
        if first_run:
            logger.info("No stored document under %r, writing seed data", key)
            store(storage, key, data_store.data, AppData.to_document)
        return data_store

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def data(self) -> AppData:
        """Current snapshot."""
        return self._cell.get()

    @property
    def last_write_ok(self) -> bool:
        return self._cell.last_write_ok

    @property
    def read_only(self) -> bool:
        """True when the stored document could not be decoded; mutations are refused."""
        return self._cell.read_only

    def get(self, collection: Collection, record_id: str) -> Any | None:
        for record in self.data.records(collection):
            if record.id == record_id:
                return record
        return None

    def next_master_id(self, collection: Collection) -> str:
        prefix = MASTER_PREFIXES.get(collection)
        if prefix is None:
            raise ValueError(f"{collection.value} is not a master collection")
        return next_id(prefix, (r.id for r in self.data.records(collection)))

    def subscribe(self, callback: Callable[[AppData], None]) -> Callable[[], None]:
        return self._cell.subscribe(callback)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def upsert(self, collection: Collection, record: DocumentModel | Mapping[str, Any]) -> AppData:
        """Replace the record with the same id in place, or append it."""
        record = _coerce(collection, record)
        if not getattr(record, "id", ""):
            raise ConstraintError(f"Cannot save into {collection.value}: record id is required")

        current = self.data
        records = list(current.records(collection))
        index = next((i for i, r in enumerate(records) if r.id == record.id), None)

        if collection is Collection.USERS:
            record = self._check_user(records, record, index)

        if index is None:
            records.append(record)
        else:
            records[index] = record
        return self._cell.set(current.with_records(collection, records))

    def delete(self, collection: Collection, record_id: str) -> AppData:
        """Remove the record with *record_id*; a missing id changes nothing."""
        current = self.data
        records = current.records(collection)
        remaining = [r for r in records if r.id != record_id]
        if len(remaining) == len(records):
            return current
        if collection is Collection.USERS and not remaining:
            raise ConstraintError("Cannot delete the last remaining user")
        return self._cell.set(current.with_records(collection, remaining))

    def replace(self, data: AppData) -> AppData:
        """Swap in a whole new document (backup import).

        This is the one write allowed on a read-only store: it replaces the
        undecodable stored document on purpose.
        """
        if not data.users:
            raise ConstraintError("A document must contain at least one user")
        return self._cell.set(data, force=True)

    def update_settings(self, **changes: Any) -> AppData:
        current = self.data
        settings = current.settings.model_copy(update=changes)
        return self._cell.set(current.model_copy(update={"settings": settings}))

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _check_user(records: list[User], user: User, index: int | None) -> User:
        for other in records:
            if other.username == user.username and other.id != user.id:
                raise ConstraintError(f"Username {user.username!r} is already taken")
        if index is not None and user.password is None:
            # Leaving the password out of an edit keeps the stored one
            user = user.model_copy(update={"password": records[index].password})
        return user


def _coerce(collection: Collection, record: DocumentModel | Mapping[str, Any]) -> Any:
    record_type = collection.record_type
    if isinstance(record, record_type):
        return record
    if isinstance(record, Mapping):
        try:
            return record_type.model_validate(dict(record))
        except ValueError as exc:
            raise ConstraintError(f"Invalid {collection.value} record: {exc}") from exc
    raise TypeError(f"Expected {record_type.__name__} or mapping, got {type(record).__name__}")


def _is_absent(storage: Storage, key: str) -> bool:
    try:
        return storage.get_item(key) is None
    except StorageError as exc:
        logger.error("Cannot check for stored document %r: %s", key, exc)
        return False
