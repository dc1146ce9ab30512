"""Table definitions and engine helpers for the asset editor database."""

from .models import (
    MEMORY_DATABASE_URL,
    Base,
    assets_table,
    database_url,
    get_engine,
    metadata,
    settings_table,
)

__all__ = [
    "Base",
    "MEMORY_DATABASE_URL",
    "assets_table",
    "database_url",
    "get_engine",
    "metadata",
    "settings_table",
]
