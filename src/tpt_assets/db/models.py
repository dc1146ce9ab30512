"""Database schema definitions for the TPT asset editor.

The schema is intentionally flat:

* :data:`assets_table` – one generated artifact. ``config`` and ``metadata`` hold
  JSON text written by :mod:`tpt_assets.storage.codec`; timestamps are RFC 3339
  strings so the ``updated_at`` column sorts chronologically as text.
* :data:`settings_table` – a last-write-wins key/value pair.

Alongside the tables the module provides :func:`get_engine`, which builds a
SQLite engine backed by exactly one DBAPI connection that may be shared across
threads. Callers are expected to serialize access themselves (see
:class:`tpt_assets.storage.database.SQLiteStorage`).
"""
from __future__ import annotations

from typing import Any

from sqlalchemy import Column, Integer, Table, Text, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

MEMORY_DATABASE_URL = "sqlite+pysqlite://"
"""Connection string for a private in-memory database."""


class Base(DeclarativeBase):
    """Declarative base owning the metadata for every table in the schema."""


metadata = Base.metadata
"""Shared metadata object used for idempotent table creation."""


def database_url(path: str | None) -> str:
    """Return the SQLAlchemy URL for a database file, or in-memory when ``None``."""

    if path is None or path == ":memory:":
        return MEMORY_DATABASE_URL
    return f"sqlite+pysqlite:///{path}"


def get_engine(url: str = MEMORY_DATABASE_URL, **kwargs: Any) -> Engine:
    """Return an engine whose pool holds a single thread-shareable connection.

    Parameters
    ----------
    url:
        SQLite database URL. Defaults to a private in-memory database.
    **kwargs:
        Additional keyword arguments forwarded to :func:`sqlalchemy.create_engine`.
    """

    connect_args = dict(kwargs.pop("connect_args", {}))
    connect_args.setdefault("check_same_thread", False)
    return create_engine(
        url,
        poolclass=StaticPool,
        connect_args=connect_args,
        **kwargs,
    )


assets_table = Table(
    "assets",
    metadata,
    Column("id", Text(), primary_key=True),
    Column("asset_type", Text(), nullable=False),
    Column("name", Text(), nullable=False),
    Column("config", Text()),
    Column("metadata", Text()),
    Column("file_path", Text()),
    Column("file_size", Integer()),
    Column("quality_score", Integer()),
    Column("created_at", Text(), nullable=False),
    Column("updated_at", Text(), nullable=False),
)
"""Generated assets keyed by an opaque string identifier."""


settings_table = Table(
    "settings",
    metadata,
    Column("key", Text(), primary_key=True),
    Column("value", Text(), nullable=False),
    Column("updated_at", Text(), nullable=False),
)
"""Application settings stored as plain string values."""


__all__ = [
    "Base",
    "MEMORY_DATABASE_URL",
    "assets_table",
    "database_url",
    "get_engine",
    "metadata",
    "settings_table",
]
