"""Plain file helpers used by the desktop shell to persist generated output."""

from __future__ import annotations

import logging
from os import PathLike
from pathlib import Path

from .utils.paths import resolve_path

__all__ = ["ensure_directory", "read_file", "save_file"]

logger = logging.getLogger(__name__)


def save_file(path: str | PathLike[str], data: bytes) -> Path:
    """Write *data* to *path*, creating missing parent directories."""

    target = resolve_path(path, empty_error="File path cannot be empty")
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(bytes(data))
    logger.debug("Wrote %d bytes to %s", len(data), target)
    return target


def read_file(path: str | PathLike[str]) -> bytes:
    """Return the contents of *path*."""

    target = resolve_path(path, empty_error="File path cannot be empty")
    if not target.exists():
        raise FileNotFoundError(f"File does not exist: {path}")
    return target.read_bytes()


def ensure_directory(path: str | PathLike[str]) -> Path:
    """Create *path* and any missing parents."""

    target = resolve_path(path, empty_error="Directory path cannot be empty")
    target.mkdir(parents=True, exist_ok=True)
    return target
