"""Unit tests for the reading store."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

import pytest

from datastore.reading_store import ReadingStore
from models.errors import StoreError
from models.records import Reading

BASE = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def _reading(minutes: int, sequence_number: int, is_valid: bool = True) -> Reading:
    return Reading(
        timestamp=BASE + timedelta(minutes=minutes),
        particle_count=900.0,
        pm25=15.0,
        hcho=12.0,
        co2=620.0,
        temperature=21.5,
        humidity=48.0,
        voc=120.0,
        sequence_number=sequence_number,
        is_valid=is_valid,
    )


def test_put_assigns_increasing_ids() -> None:
    store = ReadingStore()

    first = store.put(_reading(0, 1))
    second = store.put(_reading(1, 2))

    assert (first.id, second.id) == (1, 2)
    assert store.count() == 2


def test_empty_store_queries() -> None:
    store = ReadingStore()

    assert store.latest() is None
    assert store.latest_valid_sequence() == 0
    assert store.query() == []


def test_query_filters_orders_and_limits() -> None:
    store = ReadingStore()
    for minutes in (0, 10, 20, 30):
        store.put(_reading(minutes, minutes + 1))

    ascending = store.query(since=BASE + timedelta(minutes=10))
    newest = store.query(limit=2, newest_first=True)

    assert [r.sequence_number for r in ascending] == [11, 21, 31]
    assert [r.sequence_number for r in newest] == [31, 21]


def test_latest_and_valid_sequence() -> None:
    store = ReadingStore()
    store.put(_reading(0, 7))
    store.put(_reading(1, 3, is_valid=False))

    latest = store.latest()
    assert latest is not None
    assert latest.sequence_number == 3
    assert store.latest_valid_sequence() == 7


def test_put_persists_to_disk_and_reloads(tmp_path) -> None:
    path = tmp_path / "readings.jsonl"
    store = ReadingStore(persistence_path=path)
    stored = store.put(_reading(0, 1))
    store.put(_reading(5, 2))

    assert len(path.read_text().splitlines()) == 2

    reloaded = ReadingStore(persistence_path=path)
    assert reloaded.count() == 2
    assert reloaded.query()[0] == stored
    assert reloaded.put(_reading(10, 3)).id == 3


def test_corrupt_lines_are_skipped(tmp_path, caplog) -> None:
    path = tmp_path / "readings.jsonl"
    ReadingStore(persistence_path=path).put(_reading(0, 1))
    with path.open("a", encoding="utf-8") as handle:
        handle.write("{not json\n")

    with caplog.at_level(logging.WARNING):
        reloaded = ReadingStore(persistence_path=path)

    assert reloaded.count() == 1
    assert any(getattr(record, "row_number", None) == 2 for record in caplog.records)


def test_persist_failure_raises_store_error(tmp_path) -> None:
    path = tmp_path / "readings.jsonl"
    store = ReadingStore(persistence_path=path)
    path.mkdir()

    with pytest.raises(StoreError):
        store.put(_reading(0, 1))
    assert store.count() == 0


def test_undecodable_bytes_are_skipped(tmp_path, caplog) -> None:
    path = tmp_path / "readings.jsonl"
    ReadingStore(persistence_path=path).put(_reading(0, 1))
    with path.open("ab") as handle:
        handle.write(b"\xff\xfe garbage\n")

    with caplog.at_level(logging.WARNING):
        reloaded = ReadingStore(persistence_path=path)

    assert reloaded.count() == 1
    assert reloaded.put(_reading(1, 2)).id == 2
    assert any(getattr(record, "row_number", None) == 2 for record in caplog.records)
