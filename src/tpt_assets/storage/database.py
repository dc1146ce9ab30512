"""Connection management for the on-disk SQLite asset store."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.schema import CreateTable

from ..config import DATABASE_FILENAME, get_config
from ..db.models import database_url, get_engine, metadata
from ..errors import LockError, QueryError, StorageInitError
from ..utils.paths import resolve_path

__all__ = ["SQLiteStorage"]

logger = logging.getLogger(__name__)


class SQLiteStorage:
    """Own the single process-wide connection to the asset database.

    Every read or write goes through :meth:`exclusive`, which grants one caller
    at a time access to the shared connection for the duration of a unit of
    work and commits it on success.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        raw_path = path if path is not None else get_config().database_path

        if str(raw_path) == ":memory:":
            self._path: Path | None = None
        else:
            actual_path = Path(raw_path).expanduser()
            try:
                actual_path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise StorageInitError(
                    f"Failed to create app directory {actual_path.parent}: {exc}"
                ) from exc
            self._path = actual_path

        self._engine = get_engine(
            database_url(None if self._path is None else str(self._path))
        )
        try:
            self._connection = self._engine.connect()
            self._initialize_schema()
        except SQLAlchemyError as exc:
            self._engine.dispose()
            raise StorageInitError(f"Failed to open database: {exc}") from exc

        self._lock = threading.Lock()
        self._closed = False
        self._poisoned = False
        logger.info("Opened asset database at %s", self._path or ":memory:")

    @classmethod
    def open(cls, data_dir: str | Path) -> SQLiteStorage:
        """Open (or create) the database file inside *data_dir*."""

        try:
            directory = resolve_path(
                data_dir,
                empty_error="Data directory cannot be empty",
            )
        except ValueError as exc:
            raise StorageInitError(str(exc)) from exc
        return cls(directory / DATABASE_FILENAME)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    @property
    def path(self) -> Path | None:
        """Return the filesystem location for the database if persisted."""

        return self._path

    @property
    def closed(self) -> bool:
        return self._closed

    @contextmanager
    def exclusive(self) -> Iterator[Connection]:
        """Yield the shared connection while holding the storage lock.

        The unit of work is committed when the block exits normally and rolled
        back when it raises. A block interrupted by anything other than an
        :class:`Exception` leaves the connection in an unknown state, so the
        handle refuses further work with :class:`~tpt_assets.errors.LockError`.
        """

        with self._lock:
            self._ensure_usable()
            try:
                yield self._connection
            except Exception:
                self._connection.rollback()
                raise
            except BaseException:
                self._poisoned = True
                logger.error("Unit of work interrupted; asset database handle poisoned")
                raise
            try:
                self._connection.commit()
            except SQLAlchemyError as exc:
                raise QueryError(f"Failed to commit transaction: {exc}") from exc

    def close(self) -> None:
        """Release the connection. Later calls to :meth:`exclusive` fail."""

        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._connection.close()
            self._engine.dispose()
        logger.info("Closed asset database at %s", self._path or ":memory:")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _ensure_usable(self) -> None:
        if self._closed:
            raise LockError("Database lock error: storage has been closed")
        if self._poisoned:
            raise LockError("Database lock error: lock poisoned by an interrupted operation")

    def _initialize_schema(self) -> None:
        """Create the tables that do not exist yet."""

        for table in metadata.sorted_tables:
            self._connection.execute(CreateTable(table, if_not_exists=True))
        self._connection.commit()
