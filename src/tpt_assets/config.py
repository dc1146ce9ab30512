"""Configuration helpers for the TPT asset editor backend."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .utils.paths import resolve_path

__all__ = [
    "AppConfig",
    "DATA_DIR_ENV_VAR",
    "DATABASE_FILENAME",
    "DEFAULT_DATA_DIR",
    "configure",
    "get_config",
]

DATA_DIR_ENV_VAR: Final[str] = "TPT_ASSETS_DATA_DIR"
"""Environment variable that overrides the default data directory."""

DEFAULT_DATA_DIR: Final[Path] = Path.home() / ".tpt-asset-editor"
"""Default per-user directory holding the application's private data."""

DATABASE_FILENAME: Final[str] = "tpt_assets.db"
"""Fixed name of the SQLite database file inside the data directory."""


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Runtime configuration for the asset editor backend."""

    data_dir: Path

    def __post_init__(self) -> None:
        normalized = resolve_path(self.data_dir)
        object.__setattr__(self, "data_dir", normalized)

    @property
    def database_path(self) -> Path:
        """Return the location of the SQLite database file."""

        return self.data_dir / DATABASE_FILENAME


_CONFIG: AppConfig | None = None


def get_config() -> AppConfig:
    """Return the cached :class:`AppConfig` instance."""

    global _CONFIG
    if _CONFIG is None:
        _CONFIG = _build_config()
    return _CONFIG


def configure(*, data_dir: str | Path | None = None) -> AppConfig:
    """Rebuild the global configuration with optional overrides."""

    global _CONFIG
    _CONFIG = _build_config(data_dir=data_dir)
    return _CONFIG


def _build_config(*, data_dir: str | Path | None = None) -> AppConfig:
    if data_dir is not None:
        normalized = resolve_path(
            data_dir,
            empty_error="Data directory overrides cannot be empty",
        )
        return AppConfig(data_dir=normalized)

    env_value = os.environ.get(DATA_DIR_ENV_VAR)
    if env_value:
        normalized = resolve_path(
            env_value,
            empty_error="Data directory overrides cannot be empty",
        )
        return AppConfig(data_dir=normalized)

    return AppConfig(data_dir=DEFAULT_DATA_DIR)
