import sqlite3

import pytest

from sleep_system.core.entries import derive_entry


def _night(date, bedtime="22:30", waketime="06:30", **events):
    return derive_entry({"date": date, "bedtime": bedtime, "waketime": waketime, **events})


def test_empty_store(store):
    assert store.list_entries() == []
    assert store.find_by_date("2024-05-01") is None
    assert store.last_entries() == []


def test_upsert_round_trips_json_columns(store):
    entry = _night("2024-05-01", caffeine=[{"time": "15:00", "mg": 120}])
    assert store.upsert_entry(entry) == "2024-05-01"
    assert store.find_by_date("2024-05-01") == entry


def test_upsert_replaces_same_date(store):
    store.upsert_entry(_night("2024-05-01"))
    store.upsert_entry(_night("2024-05-01", bedtime="00:30", waketime="05:30"))
    entries = store.list_entries()
    assert len(entries) == 1
    assert entries[0]["bedtime"] == "00:30"
    assert entries[0]["sleepDuration"] == 300


def test_entries_ordered_by_date(store):
    for date in ("2024-05-03", "2024-05-01", "2024-05-02"):
        store.upsert_entry(_night(date))
    assert [e["date"] for e in store.list_entries()] == ["2024-05-01", "2024-05-02", "2024-05-03"]
    assert [e["date"] for e in store.last_entries(2)] == ["2024-05-02", "2024-05-03"]


def test_quality_score_constraint(store):
    entry = _night("2024-05-01")
    entry["qualityScore"] = 140
    with pytest.raises(sqlite3.IntegrityError):
        store.upsert_entry(entry)
    assert store.list_entries() == []


def test_reset_deletes_everything(store):
    store.upsert_entry(_night("2024-05-01"))
    store.upsert_entry(_night("2024-05-02"))
    assert store.reset_entries() == 2
    assert store.list_entries() == []
