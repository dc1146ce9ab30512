"""Tests covering the SQLite-backed asset repository."""

from __future__ import annotations

import logging
import threading
import uuid
from datetime import UTC, datetime

import pytest
from sqlalchemy import text

from tpt_assets.errors import NotFoundError, QueryError, ValidationError
from tpt_assets.storage import AssetFilters, AssetRecord, AssetRepository, SQLiteStorage


def _save(repository: AssetRepository, name: str, asset_type: str = "sprite", **extra) -> str:
    return repository.save_asset({"asset_type": asset_type, "name": name, **extra})


def test_saved_asset_is_listed_once(repository: AssetRepository) -> None:
    asset_id = _save(repository, "Hero")

    listing = repository.list_assets()

    assert [record.id for record in listing] == [asset_id]
    assert uuid.UUID(asset_id)
    record = listing[0]
    assert record.asset_type == "sprite"
    assert record.name == "Hero"
    assert record.created_at <= record.updated_at


def test_caller_supplied_id_is_kept(repository: AssetRepository) -> None:
    assert _save(repository, "Tree", id="tree-01") == "tree-01"
    assert repository.get_asset("tree-01").name == "Tree"
    assert repository.get_asset("missing") is None


def test_upsert_replaces_every_field(repository: AssetRepository) -> None:
    _save(
        repository,
        "Old name",
        id="asset-1",
        config={"seed": 1},
        metadata={"version": "1.0.0"},
        file_path="/tmp/old.png",
        file_size=1024,
        quality_score=7,
    )

    repository.save_asset({"id": "asset-1", "asset_type": "tile", "name": "New name"})

    listing = repository.list_assets()
    assert len(listing) == 1
    record = listing[0]
    assert record.asset_type == "tile"
    assert record.name == "New name"
    assert record.config is None
    assert record.metadata is None
    assert record.file_path is None
    assert record.file_size is None
    assert record.quality_score is None


def test_upsert_preserves_created_at_unless_overridden(repository: AssetRepository) -> None:
    _save(repository, "Versioned", id="v")
    original = repository.get_asset("v")

    _save(repository, "Versioned again", id="v")
    updated = repository.get_asset("v")

    assert updated.created_at == original.created_at
    assert updated.updated_at > original.updated_at

    _save(repository, "Imported", id="v", created_at="2020-05-01T12:00:00+00:00")
    imported = repository.get_asset("v")
    assert imported.created_at == "2020-05-01T12:00:00+00:00"
    assert imported.updated_at > updated.updated_at


def test_new_asset_uses_supplied_created_at(repository: AssetRepository) -> None:
    _save(repository, "Import", id="imp", created_at="2019-01-01T00:00:00Z")

    assert repository.get_asset("imp").created_at == "2019-01-01T00:00:00Z"


def test_updated_at_is_always_now(repository: AssetRepository) -> None:
    _save(repository, "Clocked", id="c", updated_at="1999-01-01T00:00:00+00:00")

    assert repository.get_asset("c").updated_at == "2024-01-01T00:00:00.000000+00:00"


def test_delete_removes_asset(repository: AssetRepository) -> None:
    keep = _save(repository, "Keep")
    drop = _save(repository, "Drop")

    repository.delete_asset(drop)

    assert [record.id for record in repository.list_assets()] == [keep]


def test_delete_missing_asset_raises(repository: AssetRepository) -> None:
    with pytest.raises(NotFoundError, match="Asset not found"):
        repository.delete_asset("does-not-exist")


def test_type_filter_returns_matching_rows_newest_first(repository: AssetRepository) -> None:
    first = _save(repository, "Slime", asset_type="monster")
    _save(repository, "Sword", asset_type="item")
    second = _save(repository, "Bat", asset_type="monster")

    listing = repository.list_assets({"type": "monster"})

    assert [record.id for record in listing] == [second, first]
    assert all(record.asset_type == "monster" for record in listing)


def test_search_filter_matches_name_substring(repository: AssetRepository) -> None:
    _save(repository, "Firefly")
    _save(repository, "campfire")
    _save(repository, "Water drop")

    names = {record.name for record in repository.list_assets({"search": "fire"})}

    assert names == {"Firefly", "campfire"}


def test_search_treats_wildcards_literally(repository: AssetRepository) -> None:
    _save(repository, "100% opacity")
    _save(repository, "plain_tile")
    _save(repository, "plain tile")

    assert [r.name for r in repository.list_assets({"search": "%"})] == ["100% opacity"]
    assert [r.name for r in repository.list_assets({"search": "_"})] == ["plain_tile"]


def test_filters_combine_with_and(repository: AssetRepository) -> None:
    _save(repository, "Fire sprite", asset_type="sprite")
    expected = _save(repository, "Fire sound", asset_type="sfx")
    _save(repository, "Rain sound", asset_type="sfx")

    listing = repository.list_assets(AssetFilters(asset_type="sfx", search="Fire"))

    assert [record.id for record in listing] == [expected]


def test_limit_returns_most_recent_rows(repository: AssetRepository) -> None:
    ids = [_save(repository, f"Asset {index}") for index in range(5)]

    listing = repository.list_assets({"limit": 2})

    assert [record.id for record in listing] == [ids[4], ids[3]]
    assert repository.list_assets({"limit": 0}) == []


def test_resaving_moves_asset_to_front(repository: AssetRepository) -> None:
    older = _save(repository, "Older", id="older")
    _save(repository, "Newer", id="newer")

    _save(repository, "Older", id=older)

    assert [record.id for record in repository.list_assets()] == ["older", "newer"]


@pytest.mark.parametrize("limit", [-1, "2", 1.5, True])
def test_invalid_limit_is_rejected(repository: AssetRepository, limit) -> None:
    with pytest.raises(ValidationError, match="limit"):
        repository.list_assets({"limit": limit})


def test_no_match_returns_empty_list(repository: AssetRepository) -> None:
    _save(repository, "Only")

    assert repository.list_assets({"type": "music"}) == []


def test_config_round_trips_as_structured_value(repository: AssetRepository) -> None:
    asset_id = _save(
        repository,
        "Dunes",
        config={"seed": 42, "biome": "desert"},
        metadata={"generator": "terrain", "timing_ms": 12.5, "tags": ["sand", None]},
    )

    record = repository.get_asset(asset_id)

    assert record.config == {"biome": "desert", "seed": 42}
    assert record.metadata == {"generator": "terrain", "timing_ms": 12.5, "tags": ["sand", None]}


def test_scalar_json_values_round_trip(repository: AssetRepository) -> None:
    asset_id = _save(repository, "Scalars", config=[1, 2, 3], metadata="note")

    record = repository.get_asset(asset_id)

    assert record.config == [1, 2, 3]
    assert record.metadata == "note"


def test_unserializable_config_is_stored_as_absent(repository: AssetRepository) -> None:
    asset_id = _save(repository, "Odd", config={"values": {1, 2}})

    assert repository.get_asset(asset_id).config is None


def test_unreadable_json_degrades_to_absent(
    repository: AssetRepository,
    storage: SQLiteStorage,
    caplog: pytest.LogCaptureFixture,
) -> None:
    with storage.exclusive() as connection:
        connection.execute(
            text(
                "INSERT INTO assets(id, asset_type, name, config, metadata, created_at, updated_at)"
                " VALUES ('broken', 'sprite', 'Broken', '{not json', '[1, 2]', 't', 't')"
            )
        )

    with caplog.at_level(logging.WARNING, logger="tpt_assets.storage.codec"):
        listing = repository.list_assets()

    assert listing[0].config is None
    assert listing[0].metadata == [1, 2]
    assert "broken" in caplog.text


def test_accepts_asset_records(repository: AssetRepository) -> None:
    record = AssetRecord(id="rec", asset_type="model", name="Ship", file_size=10)

    assert repository.save_asset(record) == "rec"
    assert repository.get_asset("rec").file_size == 10


@pytest.mark.parametrize(
    "payload",
    [
        {"name": "No type"},
        {"asset_type": "sprite"},
        {"asset_type": "", "name": "Blank type"},
        {"asset_type": "sprite", "name": "   "},
        {"asset_type": "sprite", "name": "Negative", "file_size": -1},
        {"asset_type": "sprite", "name": "Bool", "quality_score": True},
        {"asset_type": "sprite", "name": "Bad id", "id": 12},
    ],
)
def test_invalid_payloads_are_rejected_before_writing(
    repository: AssetRepository, payload
) -> None:
    with pytest.raises(ValidationError):
        repository.save_asset(payload)

    assert repository.list_assets() == []


def test_query_failures_raise_query_error(
    repository: AssetRepository, storage: SQLiteStorage
) -> None:
    with storage.exclusive() as connection:
        connection.execute(text("DROP TABLE assets"))

    with pytest.raises(QueryError):
        repository.list_assets()
    with pytest.raises(QueryError):
        _save(repository, "Lost")


def test_concurrent_saves_are_not_lost(storage: SQLiteStorage) -> None:
    repository = AssetRepository(storage)
    barrier = threading.Barrier(2)
    errors: list[BaseException] = []

    def save_many(prefix: str) -> None:
        try:
            barrier.wait(5)
            for index in range(25):
                _save(repository, f"{prefix}-{index}", id=f"{prefix}-{index}")
        except BaseException as exc:  # pragma: no cover - surfaced below
            errors.append(exc)

    workers = [threading.Thread(target=save_many, args=(prefix,)) for prefix in ("a", "b")]
    for worker in workers:
        worker.start()
    for worker in workers:
        worker.join(timeout=10)

    assert errors == []
    ids = {record.id for record in repository.list_assets()}
    assert len(ids) == 50
    assert {"a-0", "a-24", "b-0", "b-24"}.issubset(ids)


def test_database_path_reports_storage_location(tmp_path) -> None:
    storage = SQLiteStorage.open(tmp_path)
    try:
        assert AssetRepository(storage).database_path == storage.path
    finally:
        storage.close()


def test_racing_saves_of_one_id_keep_timestamps_ordered(storage: SQLiteStorage, clock) -> None:
    rivals: list[threading.Thread] = []

    def contended_clock():
        # The first stamp lets a second writer of the same id queue up.
        if not rivals:
            rival = threading.Thread(
                target=repository.save_asset,
                args=({"id": "x", "asset_type": "tile", "name": "second"},),
            )
            rivals.append(rival)
            rival.start()
            rival.join(timeout=0.2)
        return clock()

    repository = AssetRepository(storage, clock=contended_clock)
    repository.save_asset({"id": "x", "asset_type": "tile", "name": "first"})
    first = repository.get_asset("x")
    rivals[0].join(timeout=5)

    record = repository.get_asset("x")
    assert record.name == "second"
    assert record.created_at <= record.updated_at
    assert record.updated_at >= first.updated_at


def test_caller_id_is_stored_verbatim(repository: AssetRepository) -> None:
    assert _save(repository, "Tile", id=" tile-1 ") == " tile-1 "
    assert repository.get_asset("tile-1") is None

    repository.delete_asset(" tile-1 ")

    assert repository.list_assets() == []


def test_equal_timestamps_list_latest_insert_first(storage: SQLiteStorage) -> None:
    frozen = datetime(2024, 1, 1, tzinfo=UTC)
    repository = AssetRepository(storage, clock=lambda: frozen)
    ids = [_save(repository, f"Asset {index}", id=f"a{index}") for index in range(4)]

    assert [record.id for record in repository.list_assets()] == ids[::-1]
    assert [record.id for record in repository.list_assets({"limit": 2})] == ["a3", "a2"]
