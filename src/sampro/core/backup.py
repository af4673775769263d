"""Full-document backup export and import."""

from __future__ import annotations

import json
import logging
from datetime import date
from pathlib import Path

from sampro.core.constants import BACKUP_PREFIX
from sampro.core.exceptions import ImportRejectedError
from sampro.core.models import AppData
from sampro.core.store.migrations import migrate_document, needs_migration

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ("settings", "users", "dailyReports")


def backup_filename(day: date | None = None) -> str:
    return f"{BACKUP_PREFIX}{(day or date.today()).isoformat()}.json"


def export_backup(data: AppData, directory: Path, day: date | None = None) -> Path:
    """Write the whole document as pretty-printed JSON and return the file path."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / backup_filename(day)
    path.write_text(json.dumps(data.to_document(), ensure_ascii=False, indent=2), encoding="utf-8")
    logger.info("Backup written to %s", path)
    return path


def read_backup(path: Path) -> AppData:
    """Parse and validate a backup file.

    Raises :class:`ImportRejectedError` when the file is unreadable, is not
    JSON, or lacks any of ``settings``, ``users`` and ``dailyReports``.
    Nothing is written; the caller decides whether to replace its document.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ImportRejectedError(f"Cannot read {path}: {exc}") from exc

    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ImportRejectedError(f"{path.name} is not a valid JSON file: {exc}") from exc

    if not isinstance(payload, dict):
        raise ImportRejectedError(f"{path.name} is not a SAM Pro export")
    missing = [k for k in REQUIRED_KEYS if payload.get(k) is None]
    if missing:
        raise ImportRejectedError(
            f"{path.name} is not a SAM Pro export (missing: {', '.join(missing)})"
        )
    if not payload["users"]:
        raise ImportRejectedError(f"{path.name} contains no users")

    if needs_migration(payload):
        logger.info("Backup %s has the legacy layout, upgrading it", path.name)
        payload = migrate_document(payload)

    try:
        return AppData.model_validate(payload)
    except ValueError as exc:
        raise ImportRejectedError(f"{path.name} has invalid records: {exc}") from exc
