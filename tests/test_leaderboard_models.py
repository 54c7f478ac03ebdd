"""Tests for leaderboard entries and ranking."""

from skiracer.leaderboard.models import (
    LeaderboardEntry,
    ScoreKind,
    insert_entry,
    parse_entries,
    rank_of,
)


def time_entry(name, value):
    return LeaderboardEntry(name=name, kind=ScoreKind.TIME, value=value)


def distance_entry(name, value):
    return LeaderboardEntry(name=name, kind=ScoreKind.DISTANCE, value=value)


def test_times_rank_above_distances():
    entries = parse_entries([
        {"name": "CRASH", "kind": "distance", "value": 1400.0},
        {"name": "SLOW", "kind": "time", "value": 95.5},
        {"name": "FAST", "kind": "time", "value": 71.2},
        {"name": "SHORT", "kind": "distance", "value": 120.0},
    ])
    assert [e.name for e in entries] == ["FAST", "SLOW", "CRASH", "SHORT"]


def test_legacy_time_record():
    entry = LeaderboardEntry.from_record({"name": "OLD", "time": "82.1"})
    assert entry == time_entry("OLD", 82.1)


def test_legacy_distance_record():
    entry = LeaderboardEntry.from_record({"name": "OLD", "distance": 300})
    assert entry == distance_entry("OLD", 300.0)


def test_missing_name_defaults():
    entry = LeaderboardEntry.from_record({"kind": "time", "value": 60})
    assert entry.name == "???"


def test_unknown_kind_treated_as_time():
    entry = LeaderboardEntry.from_record({"name": "X", "kind": "style", "value": 3})
    assert entry.kind == ScoreKind.TIME


def test_records_without_value_are_dropped():
    assert LeaderboardEntry.from_record({"name": "X", "kind": "time"}) is None
    assert LeaderboardEntry.from_record({"name": "X", "value": "fast"}) is None
    assert LeaderboardEntry.from_record("not a record") is None
    assert parse_entries([{"name": "X"}, {"name": "Y", "value": 10}]) == [time_entry("Y", 10.0)]


def test_parse_truncates():
    records = [{"name": f"P{i}", "kind": "time", "value": i} for i in range(60)]
    entries = parse_entries(records, limit=50)
    assert len(entries) == 50
    assert entries[-1].name == "P49"


def test_record_shape():
    assert distance_entry("AB", 12.5).to_record() == {"name": "AB", "kind": "distance", "value": 12.5}


class TestInsertEntry:
    def test_rank_of_inserted(self):
        board = [time_entry("A", 60.0), time_entry("B", 80.0)]
        merged, rank = insert_entry(board, time_entry("C", 70.0))
        assert [e.name for e in merged] == ["A", "C", "B"]
        assert rank == 2

    def test_ties_keep_earlier_entries_ahead(self):
        board = [time_entry("A", 60.0)]
        _, rank = insert_entry(board, time_entry("B", 60.0))
        assert rank == 2

    def test_missing_the_cut(self):
        board = [time_entry(f"P{i}", float(i)) for i in range(3)]
        merged, rank = insert_entry(board, distance_entry("LATE", 10.0), limit=3)
        assert rank is None
        assert len(merged) == 3


def test_rank_of():
    board = [time_entry("A", 60.0), distance_entry("B", 10.0)]
    assert rank_of(board, distance_entry("B", 10.0)) == 2
    assert rank_of(board, distance_entry("C", 10.0)) is None
