"""Assemble the backend object graph used by the desktop shell."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .commands import CommandRouter
from .config import AppConfig, get_config
from .storage.database import SQLiteStorage
from .storage.repository import AssetRepository
from .storage.settings import SettingsStore

if TYPE_CHECKING:
    from .ui.dialogs import FileDialogs

__all__ = ["Backend", "create_backend"]

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Backend:
    """Long-lived services shared by every command for the life of the process."""

    config: AppConfig
    storage: SQLiteStorage
    assets: AssetRepository
    settings: SettingsStore
    commands: CommandRouter

    def close(self) -> None:
        self.commands.shutdown()
        self.storage.close()


def create_backend(
    config: AppConfig | None = None,
    *,
    dialogs: FileDialogs | None = None,
) -> Backend:
    """Open the database in the configured data directory and wire services.

    :class:`~tpt_assets.errors.StorageInitError` propagates unchanged; the
    shell is expected to abort startup when it is raised.
    """

    active_config = config or get_config()
    logger.info("Initialising backend in %s", active_config.data_dir)

    storage = SQLiteStorage.open(active_config.data_dir)
    assets = AssetRepository(storage)
    settings = SettingsStore(storage)

    if dialogs is None:
        from .ui.dialogs import FileDialogs

        dialogs = FileDialogs()

    commands = CommandRouter(assets=assets, settings=settings, dialogs=dialogs)
    return Backend(
        config=active_config,
        storage=storage,
        assets=assets,
        settings=settings,
        commands=commands,
    )
