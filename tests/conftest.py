"""Shared fixtures: storage backends and sample documents."""

from __future__ import annotations

import copy
import json
from typing import Any

import pytest

from sampro.core.constants import APP_DATA_KEY
from sampro.core.exceptions import StorageError
from sampro.core.store.storage import MemoryStorage

LEGACY_DOCUMENT: dict[str, Any] = {
    "fabrics": [{"id": "F1", "name": "Denim"}],
    "dailyReports": [
        {"id": "D1", "fabricId": "F1", "materialTypeId": "MT1", "quantityUsed": 5},
    ],
}


class RecordingStorage(MemoryStorage):
    """MemoryStorage that counts writes."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        super().__init__(initial)
        self.writes: list[str] = []

    def set_item(self, key: str, value: str) -> None:
        self.writes.append(key)
        super().set_item(key, value)


class FailingStorage(MemoryStorage):
    """Reads work; every write raises, like a full or read-only disk."""

    def set_item(self, key: str, value: str) -> None:
        raise StorageError("quota exceeded")

    def remove_item(self, key: str) -> None:
        raise StorageError("storage disabled")


@pytest.fixture
def legacy_document() -> dict[str, Any]:
    return copy.deepcopy(LEGACY_DOCUMENT)


@pytest.fixture
def storage() -> RecordingStorage:
    return RecordingStorage()


@pytest.fixture
def legacy_storage(legacy_document: dict[str, Any]) -> RecordingStorage:
    return RecordingStorage({APP_DATA_KEY: json.dumps(legacy_document)})


@pytest.fixture
def failing_storage() -> FailingStorage:
    return FailingStorage()
