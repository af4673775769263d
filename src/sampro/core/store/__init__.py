"""Local document store: storage backends, migration engine, persistent value, facade."""

from sampro.core.store.facade import DataStore, next_id, timestamp_id
from sampro.core.store.migrations import (
    CURRENT_SCHEMA_VERSION,
    detect_version,
    migrate_document,
    needs_migration,
    run_pre_boot_migration,
)
from sampro.core.store.persistent import PersistentValue, load, store
from sampro.core.store.storage import FileStorage, MemoryStorage, Storage

__all__ = [
    "CURRENT_SCHEMA_VERSION",
    "DataStore",
    "FileStorage",
    "MemoryStorage",
    "PersistentValue",
    "Storage",
    "detect_version",
    "load",
    "migrate_document",
    "needs_migration",
    "next_id",
    "run_pre_boot_migration",
    "store",
    "timestamp_id",
]
