"""
Opportunity board storage.

Keeps the current opportunities ordered most-recently-updated first,
one entry per id, bounded in size. Entries leave only by eviction from
the tail; expiry is a display concern and never deletes anything, since
the server may still move an expired entry to executed.
"""

from collections.abc import Callable, Iterable, Iterator, Sequence

from arbfeed.config.constants import HIGH_PROFIT_THRESHOLD_PCT, OPPORTUNITY_CAPACITY
from arbfeed.core.types import ArbitrageOpportunity, BoardStats


# Immutable view handed out to readers
Snapshot = tuple[ArbitrageOpportunity, ...]

# Type alias for eviction callbacks
EvictionCallback = Callable[[ArbitrageOpportunity], None]


class OpportunitySet:
    """
    Ordered, deduplicated, capacity-bounded set of opportunities.

    Features:
    - Upsert promotes the entry to the front with the new fields
    - Tail eviction beyond capacity
    - Immutable tuple snapshots for diffing and display
    - O(1) id lookup
    """

    __slots__ = ("_entries", "_index", "_capacity", "_update_count", "_callbacks")

    def __init__(self, capacity: int = OPPORTUNITY_CAPACITY) -> None:
        """
        Initialize an empty set.

        Args:
            capacity: Maximum number of entries kept.
        """
        if capacity < 1:
            raise ValueError(f"Capacity must be positive: {capacity}")

        self._capacity = capacity
        self._entries: Snapshot = ()
        self._index: dict[str, ArbitrageOpportunity] = {}
        self._update_count = 0
        self._callbacks: list[EvictionCallback] = []

    def register_eviction_callback(self, callback: EvictionCallback) -> None:
        """
        Register a callback for entries dropped by the capacity bound.

        Args:
            callback: Function called with each evicted opportunity.
        """
        self._callbacks.append(callback)

    def upsert(self, opportunity: ArbitrageOpportunity) -> None:
        """
        Insert or replace an opportunity and move it to the front.

        Args:
            opportunity: Validated opportunity. An existing entry with the
                same id is replaced wholesale.
        """
        rest = [o for o in self._entries if o.id != opportunity.id]
        entries = [opportunity, *rest]

        evicted = entries[self._capacity :]
        del entries[self._capacity :]

        self._commit(tuple(entries))
        self._update_count += 1

        for old in evicted:
            self._notify_evicted(old)

    def initialize_from(self, opportunities: Iterable[ArbitrageOpportunity]) -> None:
        """
        Replace the whole set with a bulk snapshot.

        Server order is kept. Repeated ids keep their first occurrence, and
        anything beyond capacity is dropped.

        Args:
            opportunities: Snapshot from the retrieval endpoint.
        """
        seen: set[str] = set()
        entries: list[ArbitrageOpportunity] = []

        for opportunity in opportunities:
            if opportunity.id in seen:
                continue
            seen.add(opportunity.id)
            entries.append(opportunity)
            if len(entries) == self._capacity:
                break

        self._commit(tuple(entries))

    def _commit(self, entries: Snapshot) -> None:
        """Swap in a new immutable ordering and rebuild the id index."""
        self._entries = entries
        self._index = {o.id: o for o in entries}

    def _notify_evicted(self, opportunity: ArbitrageOpportunity) -> None:
        """Notify eviction callbacks."""
        for callback in self._callbacks:
            callback(opportunity)

    def snapshot(self) -> Snapshot:
        """
        Get the current ordering.

        The returned tuple never changes; later upserts produce a new one.
        """
        return self._entries

    def get(self, opportunity_id: str) -> ArbitrageOpportunity | None:
        """
        Get an opportunity by id.

        O(1) lookup time.
        """
        return self._index.get(opportunity_id)

    def clear(self) -> None:
        """Remove all entries."""
        self._commit(())

    @property
    def capacity(self) -> int:
        """Get the capacity bound."""
        return self._capacity

    @property
    def update_count(self) -> int:
        """Get total number of upserts applied."""
        return self._update_count

    @property
    def ids(self) -> frozenset[str]:
        """Get all ids currently held."""
        return frozenset(self._index)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, opportunity_id: object) -> bool:
        return opportunity_id in self._index

    def __iter__(self) -> Iterator[ArbitrageOpportunity]:
        return iter(self._entries)


def snapshot_diff(
    previous: Sequence[ArbitrageOpportunity],
    current: Sequence[ArbitrageOpportunity],
) -> list[ArbitrageOpportunity]:
    """
    Get entries of `current` whose id is absent from `previous`.

    Uses an id set, so the cost is O(len(previous) + len(current)).
    Order follows `current`.

    Args:
        previous: Earlier snapshot.
        current: Later snapshot.

    Returns:
        Newly-seen opportunities.
    """
    known = {o.id for o in previous}
    return [o for o in current if o.id not in known]


def high_profit_only(
    snapshot: Sequence[ArbitrageOpportunity],
    threshold: float = HIGH_PROFIT_THRESHOLD_PCT,
) -> list[ArbitrageOpportunity]:
    """Filter a snapshot to opportunities at or above `threshold` percent."""
    return [o for o in snapshot if o.profit_percent >= threshold]


def summarize(
    snapshot: Sequence[ArbitrageOpportunity],
    high_profit_threshold: float = HIGH_PROFIT_THRESHOLD_PCT,
) -> BoardStats:
    """
    Compute aggregate board figures.

    Args:
        snapshot: Opportunities to summarize.
        high_profit_threshold: Profit percent counted as high profit.

    Returns:
        BoardStats (all zero for an empty board).
    """
    if not snapshot:
        return BoardStats()

    profits = [o.profit_percent for o in snapshot]

    return BoardStats(
        total=len(snapshot),
        average_profit=sum(profits) / len(profits),
        high_profit=sum(1 for p in profits if p >= high_profit_threshold),
        best_profit=max(profits),
        sports=frozenset(o.sport for o in snapshot),
    )
