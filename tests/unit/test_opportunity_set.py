"""
Unit tests for OpportunitySet and snapshot helpers.

Tests upsert ordering, capacity eviction, bulk initialization, diffs
and board statistics.
"""

import pytest

from arbfeed.core.types import ArbitrageOpportunity
from arbfeed.store.opportunities import (
    OpportunitySet,
    high_profit_only,
    snapshot_diff,
    summarize,
)


def _ids(opportunities) -> list[str]:
    return [o.id for o in opportunities]


class TestUpsert:
    """Tests for insert-or-replace-and-promote."""

    def test_insert_into_empty(self, make_opportunity) -> None:
        """Test first insert."""
        store = OpportunitySet()
        store.upsert(make_opportunity("a"))

        assert len(store) == 1
        assert "a" in store
        assert store.update_count == 1

    def test_new_entries_go_to_front(self, make_opportunity) -> None:
        """Test most recent first ordering."""
        store = OpportunitySet()
        for oid in ("a", "b", "c"):
            store.upsert(make_opportunity(oid))

        assert _ids(store.snapshot()) == ["c", "b", "a"]

    def test_update_promotes_and_replaces(self, make_opportunity) -> None:
        """Test that an update moves the entry to the front with new fields."""
        store = OpportunitySet()
        for oid in ("a", "b", "c"):
            store.upsert(make_opportunity(oid))

        updated = make_opportunity("a", home_odds=2.05, away_odds=2.05)
        store.upsert(updated)

        assert _ids(store.snapshot()) == ["a", "c", "b"]
        assert len(store) == 3
        assert store.get("a") == updated
        assert store.get("a").home_odds == 2.05

    def test_identical_upsert_is_idempotent(self, make_opportunity) -> None:
        """Test that repeating the same upsert leaves the same ordering."""
        store = OpportunitySet()
        store.upsert(make_opportunity("a"))
        store.upsert(make_opportunity("b"))

        store.upsert(make_opportunity("b"))
        first = store.snapshot()
        store.upsert(make_opportunity("b"))

        assert store.snapshot() == first
        assert _ids(first) == ["b", "a"]

    def test_ids_are_unique(self, make_opportunity) -> None:
        """Test that no id appears twice."""
        store = OpportunitySet()
        for oid in ("a", "b", "a", "c", "b", "a"):
            store.upsert(make_opportunity(oid))

        ids = _ids(store.snapshot())
        assert len(ids) == len(set(ids))
        assert store.ids == frozenset({"a", "b", "c"})


class TestCapacity:
    """Tests for tail eviction."""

    def test_default_capacity(self) -> None:
        """Test default bound."""
        assert OpportunitySet().capacity == 50

    def test_evicts_oldest(self, make_opportunity) -> None:
        """Test that the tail entry is dropped past capacity."""
        store = OpportunitySet(capacity=3)
        for oid in ("a", "b", "c", "d"):
            store.upsert(make_opportunity(oid))

        assert _ids(store.snapshot()) == ["d", "c", "b"]
        assert store.get("a") is None

    def test_fifty_one_distinct(self, make_opportunity) -> None:
        """Test 51 distinct upserts keep the latest 50."""
        store = OpportunitySet()
        for i in range(51):
            store.upsert(make_opportunity(f"opp-{i}"))

        assert len(store) == 50
        assert "opp-0" not in store
        assert store.snapshot()[0].id == "opp-50"

    def test_promoted_entry_survives_eviction(self, make_opportunity) -> None:
        """Test that updating an old entry protects it from eviction."""
        store = OpportunitySet(capacity=3)
        for oid in ("a", "b", "c"):
            store.upsert(make_opportunity(oid))

        store.upsert(make_opportunity("a"))
        store.upsert(make_opportunity("d"))

        assert _ids(store.snapshot()) == ["d", "a", "c"]

    def test_eviction_callback(self, make_opportunity) -> None:
        """Test that evicted entries are reported."""
        evicted: list[ArbitrageOpportunity] = []
        store = OpportunitySet(capacity=2)
        store.register_eviction_callback(evicted.append)

        for oid in ("a", "b", "c"):
            store.upsert(make_opportunity(oid))

        assert _ids(evicted) == ["a"]

    def test_invalid_capacity(self) -> None:
        """Test that capacity must be positive."""
        with pytest.raises(ValueError):
            OpportunitySet(capacity=0)


class TestInitializeFrom:
    """Tests for bulk loading."""

    def test_preserves_server_order(self, make_opportunity) -> None:
        """Test that the snapshot order is kept."""
        store = OpportunitySet()
        store.initialize_from([make_opportunity(oid) for oid in ("x", "y", "z")])

        assert _ids(store.snapshot()) == ["x", "y", "z"]
        assert store.update_count == 0

    def test_replaces_existing(self, make_opportunity) -> None:
        """Test that prior contents are discarded."""
        store = OpportunitySet()
        store.upsert(make_opportunity("old"))
        store.initialize_from([make_opportunity("new")])

        assert _ids(store.snapshot()) == ["new"]

    def test_deduplicates_keeping_first(self, make_opportunity) -> None:
        """Test that repeated ids keep their first occurrence."""
        first = make_opportunity("a", home_odds=2.10, away_odds=2.10)
        store = OpportunitySet()
        store.initialize_from([first, make_opportunity("b"), make_opportunity("a")])

        assert _ids(store.snapshot()) == ["a", "b"]
        assert store.get("a") == first

    def test_caps_at_capacity(self, make_opportunity) -> None:
        """Test that an oversized snapshot is truncated."""
        store = OpportunitySet(capacity=2)
        store.initialize_from([make_opportunity(oid) for oid in ("a", "b", "c")])

        assert _ids(store.snapshot()) == ["a", "b"]

    def test_empty_snapshot(self) -> None:
        """Test loading nothing."""
        store = OpportunitySet()
        store.initialize_from([])

        assert len(store) == 0
        assert store.snapshot() == ()


class TestSnapshots:
    """Tests for immutable snapshots and diffs."""

    def test_snapshot_is_immutable(self, make_opportunity) -> None:
        """Test that later upserts do not change an earlier snapshot."""
        store = OpportunitySet()
        store.upsert(make_opportunity("a"))
        before = store.snapshot()

        store.upsert(make_opportunity("b"))

        assert _ids(before) == ["a"]
        assert isinstance(before, tuple)

    def test_diff_new_id(self, make_opportunity) -> None:
        """Test that a new id shows up in the diff."""
        store = OpportunitySet()
        store.upsert(make_opportunity("a"))
        previous = store.snapshot()
        store.upsert(make_opportunity("b"))

        assert _ids(snapshot_diff(previous, store.snapshot())) == ["b"]

    def test_diff_ignores_updates(self, make_opportunity) -> None:
        """Test that updating a known id yields an empty diff."""
        store = OpportunitySet()
        store.upsert(make_opportunity("a"))
        store.upsert(make_opportunity("b"))
        previous = store.snapshot()
        store.upsert(make_opportunity("a", home_odds=2.3, away_odds=1.9))

        assert snapshot_diff(previous, store.snapshot()) == []

    def test_diff_follows_current_order(self, make_opportunity) -> None:
        """Test diff ordering."""
        previous = (make_opportunity("a"),)
        current = tuple(make_opportunity(oid) for oid in ("c", "a", "b"))

        assert _ids(snapshot_diff(previous, current)) == ["c", "b"]

    def test_diff_from_empty(self, make_opportunity) -> None:
        """Test that everything is new against an empty snapshot."""
        current = tuple(make_opportunity(oid) for oid in ("a", "b"))

        assert _ids(snapshot_diff((), current)) == ["a", "b"]


class TestBoardStats:
    """Tests for board aggregates and filters."""

    def test_empty_board(self) -> None:
        """Test zeroed stats."""
        stats = summarize(())

        assert stats.total == 0
        assert stats.average_profit == 0.0
        assert stats.high_profit == 0

    def test_summary(self, make_opportunity) -> None:
        """Test totals, average and high-profit count."""
        board = [
            make_opportunity("a", profit_percent=1.0, sport="soccer_epl"),
            make_opportunity("b", profit_percent=2.0),
            make_opportunity("c", profit_percent=3.0),
        ]

        stats = summarize(board)

        assert stats.total == 3
        assert stats.average_profit == pytest.approx(2.0)
        assert stats.high_profit == 2
        assert stats.best_profit == 3.0
        assert stats.sports == frozenset({"soccer_epl", "basketball_nba"})

    def test_high_profit_filter(self, make_opportunity) -> None:
        """Test the high-profit view keeps order and the boundary."""
        board = [
            make_opportunity("a", profit_percent=2.5),
            make_opportunity("b", profit_percent=1.99),
            make_opportunity("c", profit_percent=2.0),
        ]

        assert _ids(high_profit_only(board)) == ["a", "c"]
        assert _ids(high_profit_only(board, threshold=3.0)) == []
