"""Pytest configuration helpers for tpt_assets tests."""

from __future__ import annotations

import os
import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

try:  # pragma: no cover - dependency availability varies between environments
    from PySide6.QtWidgets import QApplication
except ImportError:  # pragma: no cover - used when Qt is unavailable
    QApplication = None  # type: ignore[assignment]

# Ensure the source directory is importable without requiring an editable install.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))


class TickingClock:
    """Deterministic clock that advances by a fixed step on every call."""

    def __init__(self, start: datetime | None = None, step: timedelta | None = None) -> None:
        self.current = start or datetime(2024, 1, 1, tzinfo=UTC)
        self.step = step or timedelta(seconds=1)

    def __call__(self) -> datetime:
        value = self.current
        self.current += self.step
        return value


@pytest.fixture(autouse=True)
def reset_app_config(tmp_path: Path):
    """Ensure each test runs against an isolated data directory."""

    from tpt_assets.config import configure

    configure(data_dir=tmp_path / "app-data")
    yield
    configure(data_dir=None)


@pytest.fixture()
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture()
def storage():
    """Provide an in-memory storage that is closed after the test."""

    from tpt_assets.storage import SQLiteStorage

    instance = SQLiteStorage(":memory:")
    yield instance
    instance.close()


@pytest.fixture()
def repository(storage, clock):
    from tpt_assets.storage import AssetRepository

    return AssetRepository(storage, clock=clock)


@pytest.fixture()
def settings_store(storage, clock):
    from tpt_assets.storage import SettingsStore

    return SettingsStore(storage, clock=clock)


@pytest.fixture(scope="session")
def qapp():
    """Provide a ``QApplication`` instance for UI-oriented tests."""

    if QApplication is None:
        pytest.skip("PySide6 is unavailable in this environment")

    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    yield app
