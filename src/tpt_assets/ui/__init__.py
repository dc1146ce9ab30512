"""Qt-facing boundaries of the asset editor backend."""

from __future__ import annotations

from .dialogs import FileDialogs, FileFilter, SaveFileOptions

__all__ = ["FileDialogs", "FileFilter", "SaveFileOptions"]
