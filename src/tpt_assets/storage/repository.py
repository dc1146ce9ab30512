"""Repository for generated assets stored in the ``assets`` table."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.exc import SQLAlchemyError

from ..db.models import assets_table
from ..errors import NotFoundError, QueryError
from .codec import AssetRecord, record_from_payload, record_to_values, row_to_record
from .database import SQLiteStorage
from .query import AssetFilters, build_asset_query

__all__ = ["AssetRepository", "format_timestamp"]

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(UTC)


def format_timestamp(moment: datetime) -> str:
    """Return *moment* as RFC 3339 text with a fixed microsecond width."""

    return moment.isoformat(timespec="microseconds")


def _upsert_statement(record: AssetRecord, *, keep_created_at: bool):
    values = record_to_values(record)
    replaced = [column for column in values if column != "id"]
    if keep_created_at:
        replaced.remove("created_at")

    statement = insert(assets_table).values(**values)
    return statement.on_conflict_do_update(
        index_elements=[assets_table.c.id],
        set_={column: statement.excluded[column] for column in replaced},
    )


class AssetRepository:
    """Provide listing, upsert and delete operations for assets."""

    def __init__(
        self,
        storage: SQLiteStorage | None = None,
        *,
        clock: Clock = _utcnow,
    ) -> None:
        self._storage = storage or SQLiteStorage()
        self._clock = clock

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------
    @property
    def storage(self) -> SQLiteStorage:
        """Return the underlying storage engine."""

        return self._storage

    @property
    def database_path(self) -> Path | None:
        """Return the filesystem path to the SQLite database if available."""

        return self._storage.path

    # ------------------------------------------------------------------
    # Asset operations
    # ------------------------------------------------------------------
    def list_assets(
        self,
        filters: AssetFilters | Mapping[str, Any] | None = None,
    ) -> list[AssetRecord]:
        """Return assets matching *filters*, most recently updated first."""

        if not isinstance(filters, AssetFilters):
            filters = AssetFilters.from_mapping(filters)
        statement = build_asset_query(filters)

        with self._storage.exclusive() as connection:
            try:
                rows = connection.execute(statement).mappings().all()
            except SQLAlchemyError as exc:
                raise QueryError(f"Query execution error: {exc}") from exc
            return [row_to_record(row) for row in rows]

    def get_asset(self, asset_id: str) -> AssetRecord | None:
        """Return the asset identified by *asset_id* if it exists."""

        statement = select(assets_table).where(assets_table.c.id == asset_id)
        with self._storage.exclusive() as connection:
            try:
                row = connection.execute(statement).mappings().first()
            except SQLAlchemyError as exc:
                raise QueryError(f"Query execution error: {exc}") from exc
            if row is None:
                return None
            return row_to_record(row)

    def save_asset(self, asset: Mapping[str, Any] | AssetRecord) -> str:
        """Insert or fully replace an asset and return its identifier.

        Every column is overwritten, so fields missing from *asset* become
        empty. ``created_at`` comes from the payload when supplied, otherwise
        it is the current time for new rows and left untouched for existing
        ones. ``updated_at`` is always the current time.
        """

        record = record_from_payload(asset)
        explicit_created_at = record.created_at is not None

        with self._storage.exclusive() as connection:
            # Stamp under the lock; updated_at must follow write order.
            now = format_timestamp(self._clock())
            record.created_at = record.created_at or now
            record.updated_at = now
            statement = _upsert_statement(record, keep_created_at=not explicit_created_at)
            try:
                connection.execute(statement)
            except SQLAlchemyError as exc:
                raise QueryError(f"Failed to save asset: {exc}") from exc

        logger.debug("Saved asset %s (%s)", record.id, record.asset_type)
        return record.id

    def delete_asset(self, asset_id: str) -> None:
        """Delete an asset by identifier, failing when nothing matched."""

        statement = delete(assets_table).where(assets_table.c.id == asset_id)
        with self._storage.exclusive() as connection:
            try:
                result = connection.execute(statement)
            except SQLAlchemyError as exc:
                raise QueryError(f"Failed to delete asset: {exc}") from exc
            if result.rowcount == 0:
                raise NotFoundError(f"Asset not found: {asset_id}")

        logger.debug("Deleted asset %s", asset_id)
