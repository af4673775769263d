"""SAM Pro exception hierarchy."""

from __future__ import annotations


class SamProError(Exception):
    """Base exception for all SAM Pro errors."""


class ConfigError(SamProError):
    """Raised when the configuration is invalid or cannot be read."""


class ConfigNotFoundError(ConfigError):
    """Raised when the configuration file does not exist."""


class StorageError(SamProError):
    """Raised when durable storage cannot be read or written."""


class MigrationError(SamProError):
    """Raised when a stored document cannot be upgraded."""


class ConstraintError(SamProError):
    """Raised when a mutation would break a document invariant."""


class ImportRejectedError(SamProError):
    """Raised when a backup file is not a valid SAM Pro export."""


class AuthenticationError(SamProError):
    """Raised when a username/password pair does not match any user."""


class PermissionDeniedError(SamProError):
    """Raised when the current user lacks the permission for an action."""


class InvalidDocumentError(StorageError):
    """Raised on a write to a stored value that parsed but did not match its model.

    The stored bytes are kept so nothing the user entered is overwritten.
    """
