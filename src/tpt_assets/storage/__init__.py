"""SQLite-backed persistence for generated assets and application settings."""

from .codec import AssetRecord
from .database import SQLiteStorage
from .query import AssetFilters, build_asset_query
from .repository import AssetRepository
from .settings import SettingsStore

__all__ = [
    "AssetFilters",
    "AssetRecord",
    "AssetRepository",
    "SQLiteStorage",
    "SettingsStore",
    "build_asset_query",
]
