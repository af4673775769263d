"""SAM Pro constants: filesystem layout, storage keys, and id prefixes."""

from __future__ import annotations

from enum import IntEnum

# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------


class ExitCode(IntEnum):
    SUCCESS = 0
    ERROR = 1
    CONFIG_ERROR = 2
    STORAGE_ERROR = 3
    AUTH_ERROR = 4
    PERMISSION_ERROR = 5
    CONSTRAINT_ERROR = 6
    IMPORT_ERROR = 7


# ---------------------------------------------------------------------------
# Filesystem layout
# ---------------------------------------------------------------------------

SAMPRO_DIR_NAME = ".sampro"
CONFIG_FILENAME = "config.toml"
SESSION_DIR_NAME = "session"
STORAGE_SUFFIX = ".json"

# ---------------------------------------------------------------------------
# Storage keys
# ---------------------------------------------------------------------------

APP_DATA_KEY = "app-data"
CURRENT_USER_KEY = "current-user"

BACKUP_PREFIX = "sampro-backup-"
SPREADSHEET_SUFFIX = ".xls"

# ---------------------------------------------------------------------------
# Identifiers
# ---------------------------------------------------------------------------

ID_PAD_WIDTH = 3
REPORT_ID_PREFIX = "DR-"
USER_ID_PREFIX = "U-"

# Shown wherever a foreign key no longer resolves to a master record
UNSPECIFIED_LABEL = "غير محدد"
