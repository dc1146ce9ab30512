"""Exception hierarchy shared by the storage layer and its boundaries."""

from __future__ import annotations

__all__ = [
    "BackendError",
    "DialogCancelledError",
    "LockError",
    "NotFoundError",
    "QueryError",
    "RowDecodeError",
    "StorageError",
    "StorageInitError",
    "ValidationError",
]


class BackendError(RuntimeError):
    """Base class for failures reported to callers of the backend."""


class StorageError(BackendError):
    """Raised when the embedded asset store cannot complete an operation."""


class StorageInitError(StorageError):
    """Raised when the data directory or database file cannot be opened."""


class LockError(StorageError):
    """Raised when exclusive access to the shared connection cannot be granted."""


class QueryError(StorageError):
    """Raised when a statement cannot be prepared or executed."""


class ValidationError(StorageError, ValueError):
    """Raised when an asset payload is rejected before any write happens."""


class NotFoundError(StorageError, LookupError):
    """Raised when a delete targets an identifier that has no row."""


class RowDecodeError(StorageError):
    """Raised when a stored JSON column cannot be decoded."""


class DialogCancelledError(BackendError):
    """Raised when the user dismisses a save-file dialog."""
