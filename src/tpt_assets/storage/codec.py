"""Conversion between ``assets`` rows and in-memory asset records.

``config`` and ``metadata`` are opaque, caller-owned JSON values. They are
stored as JSON text; a value that cannot be encoded is written as empty text
and a column that cannot be decoded is read back as absent. Both cases are
logged rather than raised.
"""

from __future__ import annotations

import json
import logging
import uuid
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any

from ..errors import RowDecodeError, ValidationError

__all__ = [
    "AssetRecord",
    "decode_json",
    "encode_json",
    "record_from_payload",
    "record_to_values",
    "row_to_record",
]

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AssetRecord:
    """In-memory representation of an asset persisted in SQLite."""

    id: str
    asset_type: str
    name: str
    config: Any = None
    metadata: Any = None
    file_path: str | None = None
    file_size: int | None = None
    quality_score: int | None = None
    created_at: str | None = None
    updated_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-shaped form handed to command callers."""

        return asdict(self)


def encode_json(value: Any, *, field: str = "value") -> str | None:
    """Serialize *value* to JSON text, or ``None`` when it is absent.

    Values the :mod:`json` module rejects are stored as empty text.
    """

    if value is None:
        return None
    try:
        return json.dumps(value)
    except (TypeError, ValueError, RecursionError) as exc:
        logger.warning("Could not serialize asset %s; storing empty text: %s", field, exc)
        return ""


def decode_json(payload: str | None) -> Any:
    """Parse stored JSON text, raising :class:`RowDecodeError` when unreadable."""

    if not payload:
        return None
    try:
        return json.loads(payload)
    except (RecursionError, json.JSONDecodeError) as exc:
        raise RowDecodeError(f"Stored JSON is unreadable: {exc}") from exc


def _decode_column(row: Mapping[str, Any], column: str) -> Any:
    try:
        return decode_json(row[column])
    except RowDecodeError as exc:
        logger.warning("Dropping %s of asset %s: %s", column, row["id"], exc)
        return None


def row_to_record(row: Mapping[str, Any]) -> AssetRecord:
    """Build an :class:`AssetRecord` from a mapping of ``assets`` columns."""

    return AssetRecord(
        id=str(row["id"]),
        asset_type=str(row["asset_type"]),
        name=str(row["name"]),
        config=_decode_column(row, "config"),
        metadata=_decode_column(row, "metadata"),
        file_path=row["file_path"],
        file_size=row["file_size"],
        quality_score=row["quality_score"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def record_from_payload(payload: Mapping[str, Any] | AssetRecord) -> AssetRecord:
    """Validate a caller payload and return it as an :class:`AssetRecord`.

    A missing ``id`` is replaced with a random UUID. Timestamps are copied
    through untouched; the repository decides their final values.
    """

    if isinstance(payload, AssetRecord):
        payload = payload.to_dict()
    if not isinstance(payload, Mapping):
        raise ValidationError("Asset payload must be an object")

    return AssetRecord(
        id=_coerce_id(payload.get("id")),
        asset_type=_require_text(payload, "asset_type"),
        name=_require_text(payload, "name"),
        config=payload.get("config"),
        metadata=payload.get("metadata"),
        file_path=_optional_text(payload, "file_path"),
        file_size=_optional_count(payload, "file_size"),
        quality_score=_optional_count(payload, "quality_score"),
        created_at=_optional_text(payload, "created_at") or None,
        updated_at=_optional_text(payload, "updated_at") or None,
    )


def record_to_values(record: AssetRecord) -> dict[str, Any]:
    """Return the column values written for *record*."""

    return {
        "id": record.id,
        "asset_type": record.asset_type,
        "name": record.name,
        "config": encode_json(record.config, field="config"),
        "metadata": encode_json(record.metadata, field="metadata"),
        "file_path": record.file_path,
        "file_size": record.file_size,
        "quality_score": record.quality_score,
        "created_at": record.created_at,
        "updated_at": record.updated_at,
    }


def _coerce_id(value: Any) -> str:
    if value is None:
        return str(uuid.uuid4())
    if not isinstance(value, str):
        raise ValidationError("Asset id must be a string")
    return value


def _require_text(payload: Mapping[str, Any], key: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"Missing {key}")
    return value


def _optional_text(payload: Mapping[str, Any], key: str) -> str | None:
    value = payload.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string")
    return value


def _optional_count(payload: Mapping[str, Any], key: str) -> int | None:
    value = payload.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ValidationError(f"{key} must be a non-negative integer")
    return value
