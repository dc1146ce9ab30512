"""Key/value settings persisted alongside assets in the same database."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.exc import SQLAlchemyError

from ..db.models import settings_table
from ..errors import QueryError, ValidationError
from .database import SQLiteStorage
from .repository import format_timestamp

__all__ = ["SettingsStore"]

logger = logging.getLogger(__name__)

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SettingsStore:
    """Last-write-wins string settings with typed convenience accessors.

    Values are stored verbatim; callers that need structure either encode it
    themselves or use :meth:`get_json`/:meth:`set_json`.
    """

    def __init__(
        self,
        storage: SQLiteStorage,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._storage = storage
        self._clock = clock

    def get(self, key: str) -> str | None:
        """Return the value stored for *key*, or ``None`` if it was never set."""

        statement = select(settings_table.c.value).where(settings_table.c.key == key)
        with self._storage.exclusive() as connection:
            try:
                value = connection.execute(statement).scalar_one_or_none()
            except SQLAlchemyError as exc:
                raise QueryError(f"Database error: {exc}") from exc
        return value

    def set(self, key: str, value: str) -> None:
        """Store *value* under *key*, replacing any previous value."""

        if not isinstance(value, str):
            raise ValidationError("Setting values must be strings")

        with self._storage.exclusive() as connection:
            statement = insert(settings_table).values(
                key=key,
                value=value,
                updated_at=format_timestamp(self._clock()),
            )
            statement = statement.on_conflict_do_update(
                index_elements=[settings_table.c.key],
                set_={
                    "value": statement.excluded.value,
                    "updated_at": statement.excluded.updated_at,
                },
            )
            try:
                connection.execute(statement)
            except SQLAlchemyError as exc:
                raise QueryError(f"Failed to save setting: {exc}") from exc

    # ------------------------------------------------------------------
    # Typed helpers
    # ------------------------------------------------------------------
    def get_bool(self, key: str, default: bool = False) -> bool:
        raw = self.get(key)
        if raw is None:
            return default
        normalized = raw.strip().lower()
        if normalized in _TRUE_VALUES:
            return True
        if normalized in _FALSE_VALUES:
            return False
        return default

    def get_int(self, key: str, default: int = 0) -> int:
        raw = self.get(key)
        if raw is None:
            return default
        try:
            return int(raw.strip())
        except ValueError:
            return default

    def get_json(self, key: str, default: Any = None) -> Any:
        """Return the JSON value stored under *key*.

        Unparsable text is treated like a missing key and yields *default*.
        """

        raw = self.get(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Setting %s does not hold valid JSON", key)
            return default

    def set_json(self, key: str, value: Any) -> None:
        self.set(key, json.dumps(value))
