"""Filter parsing and statement building for asset listings."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from sqlalchemy import Select, and_, literal_column, select
from sqlalchemy.sql.elements import ColumnElement

from ..db.models import assets_table
from ..errors import ValidationError

__all__ = ["AssetFilters", "build_asset_query"]


@dataclass(frozen=True, slots=True)
class AssetFilters:
    """Optional predicates applied when listing assets.

    ``asset_type`` matches exactly, ``search`` matches a substring of the
    asset name and ``limit`` caps the number of rows. Predicates combine with
    ``AND``.
    """

    asset_type: str | None = None
    search: str | None = None
    limit: int | None = None

    def __post_init__(self) -> None:
        if self.asset_type is not None and not isinstance(self.asset_type, str):
            raise ValidationError("Filter 'type' must be a string")
        if self.search is not None and not isinstance(self.search, str):
            raise ValidationError("Filter 'search' must be a string")
        if self.limit is not None and (
            isinstance(self.limit, bool)
            or not isinstance(self.limit, int)
            or self.limit < 0
        ):
            raise ValidationError("Filter 'limit' must be a non-negative integer")

    @classmethod
    def from_mapping(cls, filters: Mapping[str, Any] | None) -> AssetFilters:
        """Parse the ``{type, search, limit}`` object sent by callers."""

        if filters is None:
            return cls()
        if not isinstance(filters, Mapping):
            raise ValidationError("Asset filters must be an object")
        return cls(
            asset_type=filters.get("type"),
            search=filters.get("search"),
            limit=filters.get("limit"),
        )

    def clauses(self) -> list[ColumnElement[bool]]:
        """Return the bound predicate clauses for the active filters."""

        columns = assets_table.c
        clauses: list[ColumnElement[bool]] = []
        if self.asset_type is not None:
            clauses.append(columns.asset_type == self.asset_type)
        if self.search is not None:
            clauses.append(columns.name.contains(self.search, autoescape=True))
        return clauses


def build_asset_query(filters: AssetFilters | None = None) -> Select:
    """Return a ``SELECT`` over ``assets`` honouring *filters*.

    Rows are ordered by ``updated_at`` descending, most recently written
    first, with ``rowid`` breaking ties. Filter values are always bound
    parameters.
    """

    active = filters or AssetFilters()
    statement = select(assets_table)
    clauses = active.clauses()
    if clauses:
        statement = statement.where(and_(*clauses))
    statement = statement.order_by(
        assets_table.c.updated_at.desc(),
        literal_column("assets.rowid").desc(),
    )
    if active.limit is not None:
        statement = statement.limit(active.limit)
    return statement
