"""Top-level package for the TPT asset editor backend.

The package bundles the SQLite-backed asset store, the settings table layered
over the same connection, and the thin file, dialog and generation boundaries
the desktop shell calls into.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
