"""
Durable key/value storage backends.

A backend stores one text blob per key.  ``FileStorage`` keeps each key in its
own ``<key>.json`` file inside a directory and replaces files atomically, so a
reader never observes a half-written document.  ``MemoryStorage`` is a
process-local dict used for tests and throwaway sessions.

Backends raise :class:`StorageError`; the persistence layer above decides
whether a failure is reported or propagated.
"""

from __future__ import annotations

import contextlib
import os
from abc import ABC, abstractmethod
from pathlib import Path

from sampro.core.constants import STORAGE_SUFFIX
from sampro.core.exceptions import StorageError


class Storage(ABC):
    """Abstract key/value text store."""

    @abstractmethod
    def get_item(self, key: str) -> str | None:
        """Return the text stored under *key*, or None if absent."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store *value* under *key*, replacing any previous value."""

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Delete *key*; deleting a missing key is a no-op."""


class FileStorage(Storage):
    """One file per key under *directory*."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def path_for(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise StorageError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}{STORAGE_SUFFIX}"

    def get_item(self, key: str) -> str | None:
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageError(f"Cannot read {path}: {exc}") from exc

    def set_item(self, key: str, value: str) -> None:
        path = self.path_for(key)
        tmp_path = path.with_suffix(".tmp")
        try:
            self.directory.mkdir(mode=0o700, parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(value)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
        except OSError as exc:
            with contextlib.suppress(OSError):
                tmp_path.unlink(missing_ok=True)
            raise StorageError(f"Cannot write {path}: {exc}") from exc

    def remove_item(self, key: str) -> None:
        path = self.path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Cannot remove {path}: {exc}") from exc

    def __repr__(self) -> str:
        return f"FileStorage({str(self.directory)!r})"


class MemoryStorage(Storage):
    """Dict-backed storage; contents vanish with the process."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._items)
