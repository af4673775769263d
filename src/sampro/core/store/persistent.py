"""
Values synced with durable storage.

``load`` and ``store`` are the two primitives; ``PersistentValue`` combines
them into a write-through cell::

    cell = PersistentValue(storage, "app-data", seed, decode=..., encode=...)
    cell.set(lambda old: old.with_records(...))   # stored before returning
    cell.get()

Reads never fail: a missing, unreadable or unparsable value falls back to the
caller's default and nothing is written.  Writes never raise: a failed write is
logged and the in-memory value remains the source of truth for the session.
A value that parses but does not decode is kept on disk and locks the cell
against writes (see :class:`PersistentValue`).
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any, Generic, TypeVar

from sampro.core.exceptions import InvalidDocumentError, StorageError
from sampro.core.store.storage import Storage

logger = logging.getLogger(__name__)

T = TypeVar("T")

_UNSET: Any = object()


def load(
    storage: Storage,
    key: str,
    fallback: T,
    decode: Callable[[Any], T] | None = None,
) -> T:
    """Return the value stored under *key*, or *fallback* if there is none usable."""
    try:
        raw = storage.get_item(key)
    except StorageError as exc:
        logger.error("Cannot read %r, using fallback: %s", key, exc)
        return fallback

    if raw is None:
        return fallback

    try:
        value = json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.error("Stored value %r is not valid JSON, using fallback: %s", key, exc)
        return fallback

    if decode is None:
        return value
    try:
        return decode(value)
    except (ValueError, TypeError) as exc:
        logger.error("Stored value %r has an unexpected shape, using fallback: %s", key, exc)
        return fallback


def store(
    storage: Storage,
    key: str,
    value: Any,
    encode: Callable[[Any], Any] | None = None,
) -> bool:
    """Serialize *value* under *key*. Returns False (and logs) on failure."""
    try:
        payload = encode(value) if encode is not None else value
        storage.set_item(key, json.dumps(payload, ensure_ascii=False))
    except (StorageError, TypeError, ValueError) as exc:
        logger.error("Cannot persist %r, keeping in-memory value: %s", key, exc)
        return False
    return True


class PersistentValue(Generic[T]):
    """
    In-memory value mirrored to one storage key.

    Every :meth:`set` performs exactly one :func:`store` before returning, so
    the next :meth:`get` always observes a value that has been handed to
    storage.  Subscribers are called after the write when the new value is a
    different object from the old one.

    A stored value that parses as JSON but is rejected by *decode* is never
    overwritten implicitly: :attr:`read_only` is set, :meth:`get` serves the
    fallback and :meth:`set` raises :class:`InvalidDocumentError` unless
    called with ``force=True``.
    """

    def __init__(
        self,
        storage: Storage,
        key: str,
        fallback: T,
        decode: Callable[[Any], T] | None = None,
        encode: Callable[[T], Any] | None = None,
    ) -> None:
        self.storage = storage
        self.key = key
        self._encode = encode
        self._subscribers: list[Callable[[T], None]] = []
        self.last_write_ok = True
        self.read_only = False
        self._value: T = self._read(fallback, decode)

    def _read(self, fallback: T, decode: Callable[[Any], T] | None) -> T:
        raw = load(self.storage, self.key, _UNSET)
        if raw is _UNSET:
            return fallback
        if decode is None:
            return raw
        try:
            return decode(raw)
        except (ValueError, TypeError) as exc:
            logger.error(
                "Stored value %r does not match the expected shape; keeping it and refusing writes: %s",
                self.key,
                exc,
            )
            self.read_only = True
            return fallback

    def get(self) -> T:
        return self._value

    def set(self, value: T | Callable[[T], T], force: bool = False) -> T:
        """Replace the value (or apply an updater to it) and write it through.

        ``force=True`` overwrites a stored value that could not be decoded.
        """
        if self.read_only and not force:
            raise InvalidDocumentError(
                f"Stored {self.key!r} could not be read and was left untouched; "
                "fix or restore it before making changes"
            )
        old = self._value
        new = value(old) if callable(value) else value
        self._value = new
        self.last_write_ok = store(self.storage, self.key, new, self._encode)
        if self.last_write_ok:
            self.read_only = False
        if new is not old:
            self._notify(new)
        return new

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """Register *callback*; returns a function that unregisters it."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self, value: T) -> None:
        for callback in list(self._subscribers):
            try:
                callback(value)
            except Exception as exc:  # noqa: BLE001
                logger.error("Subscriber %r failed for %r: %s", callback, self.key, exc)
