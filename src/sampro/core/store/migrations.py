"""
Document schema migration: shape detection and upgrade chain.

Documents carry no version stamp.  The version is read off the document's
shape by :func:`detect_version`:

  v0  legacy "fabric" documents — a top-level ``fabrics`` array and daily
      reports with a flat ``fabricId`` / ``materialTypeId`` / ``quantityUsed``
  v1  current — ``items`` and ``itemId`` plus an embedded ``materialsUsed`` list

:func:`run_pre_boot_migration` is called once per process, before anything
loads the document.  It rewrites a stale stored document in place and never
raises: on any failure the stored bytes are left exactly as they were.
"""

from __future__ import annotations

import copy
import json
import logging
from collections.abc import Callable
from typing import Any

from sampro.core.constants import APP_DATA_KEY
from sampro.core.exceptions import MigrationError
from sampro.core.store.storage import Storage

logger = logging.getLogger(__name__)

CURRENT_SCHEMA_VERSION = 1

LEGACY_COLLECTION = "fabrics"
LEGACY_REPORT_FIELDS = ("fabricId", "materialTypeId", "quantityUsed")

Document = dict[str, Any]

# Registry of migration functions: from_version -> callable(doc) -> doc
_MIGRATIONS: dict[int, Callable[[Document], Document]] = {}


def _register(from_ver: int) -> Callable[..., Any]:
    """Decorator to register a migration step."""

    def decorator(fn: Callable[[Document], Document]) -> Callable[[Document], Document]:
        _MIGRATIONS[from_ver] = fn
        return fn

    return decorator


# ---------------------------------------------------------------------------
# Detection
# ---------------------------------------------------------------------------


def needs_migration(doc: Any) -> bool:
    """True if *doc* still has the legacy fabric shape."""
    if not isinstance(doc, dict):
        return False
    if LEGACY_COLLECTION in doc:
        return True
    reports = doc.get("dailyReports")
    if isinstance(reports, list) and reports:
        first = reports[0]
        if isinstance(first, dict) and any(f in first for f in LEGACY_REPORT_FIELDS):
            return True
    return False


def detect_version(doc: Any) -> int:
    """Return the schema version implied by the shape of *doc*."""
    return 0 if needs_migration(doc) else CURRENT_SCHEMA_VERSION


# ---------------------------------------------------------------------------
# Steps
# ---------------------------------------------------------------------------


def _is_current_report(report: Document) -> bool:
    return bool(report.get("itemId")) and isinstance(report.get("materialsUsed"), list)


def _migrate_report(report: Document) -> Document:
    if _is_current_report(report):
        return report

    new_report = dict(report)

    if "fabricId" in new_report:
        new_report["itemId"] = new_report.pop("fabricId")

    if "materialTypeId" in new_report and "quantityUsed" in new_report:
        new_report["materialsUsed"] = [
            {
                "materialTypeId": new_report["materialTypeId"],
                "quantityUsed": new_report["quantityUsed"],
            }
        ]
    elif not new_report.get("materialsUsed"):
        new_report["materialsUsed"] = []

    new_report.pop("materialTypeId", None)
    new_report.pop("quantityUsed", None)
    return new_report


@_register(0)
def _migrate_v0_to_v1(doc: Document) -> Document:
    """v0 -> v1: fabrics become items; flat material fields become ``materialsUsed``.

    Reports that already have the v1 shape are returned untouched, which keeps
    the step safe to apply to a half-migrated document.
    """
    # An empty or null legacy collection carries nothing; drop it so it cannot
    # clobber the items list.
    legacy = doc.pop(LEGACY_COLLECTION, None)
    if legacy:
        doc["items"] = legacy

    reports = doc.get("dailyReports")
    if isinstance(reports, list):
        doc["dailyReports"] = [
            _migrate_report(r) if isinstance(r, dict) else r for r in reports
        ]
    return doc


# ---------------------------------------------------------------------------
# Upgrade chain
# ---------------------------------------------------------------------------


def upgrade_document(doc: Document, from_version: int, to_version: int) -> Document:
    """Apply sequential migration steps from *from_version* to *to_version*.

    Raises :class:`MigrationError` if any step in the chain is missing or
    a downgrade is attempted.
    """
    if from_version == to_version:
        return doc
    if from_version > to_version:
        raise MigrationError(f"Cannot downgrade document from v{from_version} to v{to_version}")

    current = from_version
    while current < to_version:
        migrator = _MIGRATIONS.get(current)
        if migrator is None:
            raise MigrationError(f"No migration path from document v{current} to v{current + 1}")
        doc = migrator(doc)
        current += 1

    return doc


def migrate_document(doc: Document) -> Document:
    """Return an upgraded deep copy of *doc*; *doc* itself is not modified."""
    version = detect_version(doc)
    return upgrade_document(copy.deepcopy(doc), version, CURRENT_SCHEMA_VERSION)


# ---------------------------------------------------------------------------
# Pre-boot entry point
# ---------------------------------------------------------------------------


def pending_migration(storage: Storage, key: str = APP_DATA_KEY) -> int | None:
    """Return the stored document's version if it needs upgrading, else None.

    Unreadable or unparsable documents report None; there is nothing to migrate.
    """
    try:
        raw = storage.get_item(key)
        if raw is None:
            return None
        version = detect_version(json.loads(raw))
    except Exception as exc:  # noqa: BLE001
        logger.warning("Cannot inspect %r for migration: %s", key, exc)
        return None
    return version if version < CURRENT_SCHEMA_VERSION else None


def run_pre_boot_migration(storage: Storage, key: str = APP_DATA_KEY) -> None:
    """Upgrade the document stored under *key* if it has a legacy shape.

    The upgraded document is written back in a single ``set_item`` call, so
    the stored value is either the untouched original or fully migrated.
    """
    try:
        raw = storage.get_item(key)
        if raw is None:
            return

        stored = json.loads(raw)
        if not needs_migration(stored):
            return

        logger.info("Legacy document detected under %r, migrating to v%d", key, CURRENT_SCHEMA_VERSION)
        migrated = migrate_document(stored)
        storage.set_item(key, json.dumps(migrated, ensure_ascii=False))
        logger.info("Migration of %r complete", key)
    except Exception:  # noqa: BLE001
        logger.exception("Document migration failed; stored data left unchanged")
