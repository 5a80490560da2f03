"""Distinct counts per group key.

The approximate form of

    SELECT key, COUNT(DISTINCT element) FROM stream GROUP BY key

Each key gets its own LogLogBeta counter the first time it is seen, all
built with the same error and seed, so two GroupedCardinality objects
with matching settings can be merged key by key (for example one per
partition of a table).
"""

from __future__ import annotations

from typing import Any, Hashable, Iterator

from loglogbeta.counter import LogLogBeta
from loglogbeta.digest import DEFAULT_SEED, DigestSource
from loglogbeta.errors import MergeError
from loglogbeta.precision import precision_for_error


class GroupedCardinality:
    """One LogLogBeta counter per group key.

    Parameters:
        error: Target relative error for every per-key counter.
        seed: Digest seed shared by every per-key counter.

    Memory grows with the number of keys, not with the number of
    elements: each key costs 2**p bytes of registers.
    """

    def __init__(self, error: float = 0.01, seed: int = DEFAULT_SEED) -> None:
        # Validate up front so bad settings fail here, not on first add()
        precision_for_error(error)
        self._digest = DigestSource(seed)
        self._error = error
        self._seed = seed
        self._counters: dict[Hashable, LogLogBeta] = {}
        self._entries_processed = 0

    @property
    def error(self) -> float:
        return self._error

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def entries_processed(self) -> int:
        """Number of add() calls so far, duplicates included."""
        return self._entries_processed

    def add(self, key: Hashable, element: Any) -> None:
        """Record element under key."""
        counter = self._counters.get(key)
        if counter is None:
            counter = LogLogBeta(error=self._error, digest=self._digest)
            self._counters[key] = counter
        counter.insert(element)
        self._entries_processed += 1

    def estimate(self, key: Hashable) -> float:
        """Estimated distinct elements seen under key; 0.0 if never seen."""
        counter = self._counters.get(key)
        if counter is None:
            return 0.0
        return counter.estimate()

    def counter(self, key: Hashable) -> LogLogBeta | None:
        """The live counter for key, or None."""
        return self._counters.get(key)

    def keys(self) -> Iterator[Hashable]:
        return iter(self._counters)

    def totals(self) -> dict[Hashable, float]:
        """Estimate for every key seen so far."""
        return {key: counter.estimate() for key, counter in self._counters.items()}

    def merge_update(self, other: GroupedCardinality) -> None:
        """Fold other's per-key counters into this one.

        Keys only present in other are copied in. Raises MergeError,
        before touching anything, if the two were built with different
        error or seed.
        """
        if not isinstance(other, GroupedCardinality):
            raise MergeError(
                f"can only merge GroupedCardinality, got {type(other).__name__}"
            )
        if precision_for_error(self._error) != precision_for_error(other._error):
            raise MergeError(
                f"cannot merge groups with different error: "
                f"{self._error} vs {other._error}"
            )
        if self._seed != other._seed:
            raise MergeError(
                f"cannot merge groups with different seed: {self._seed} vs {other._seed}"
            )
        for key, theirs in other._counters.items():
            mine = self._counters.get(key)
            if mine is None:
                self._counters[key] = theirs.copy()
            else:
                mine.merge_update(theirs)
        self._entries_processed += other._entries_processed

    def memory_report(self) -> dict[str, int]:
        """Approximate register memory across all keys."""
        total = sum(c.memory_bytes() for c in self._counters.values())
        return {
            "keys": len(self._counters),
            "register_bytes": total,
        }

    def __len__(self) -> int:
        return len(self._counters)

    def __contains__(self, key: object) -> bool:
        return key in self._counters
