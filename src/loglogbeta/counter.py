"""LogLog-Beta distinct counter.

Answers "how many distinct elements have gone by?" with memory fixed at
construction: one byte per register, 2**p registers, where p is picked
from the requested relative error. For error=0.05 that is 512 bytes
whether the stream holds a thousand elements or a billion.

A counter is a plain mutable value with no locking. To count from
several threads or processes, give each worker its own counter built
with the same error and seed, then combine them with merge_all() once
ingestion is done. Merging is an element-wise maximum, so the order in
which shards are combined does not matter.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable

from loglogbeta.digest import DEFAULT_SEED, DigestSource
from loglogbeta.errors import ConfigurationError, MergeError
from loglogbeta.estimator import estimate_cardinality
from loglogbeta.precision import (
    alpha_for_precision,
    precision_for_error,
    standard_error,
)
from loglogbeta.registers import RegisterArray

log = logging.getLogger(__name__)

Digest = Callable[[Any], int]

_MISSING = object()


class LogLogBeta:
    """Cardinality estimator using the LogLog-Beta formula.

    Parameters:
        error: Target relative standard error, in (0, 1). 0.02 gives
            4096 registers (4 KB) and ~1.6% error.
        seed: Key for the default BLAKE2b digest. Counters can only be
            merged when they were built with the same seed.
        digest: Optional replacement digest, any callable mapping an
            element to an unsigned 64-bit int. Equal elements must get
            equal digests. Mutually exclusive with seed.

    Raises ConfigurationError for a bad error rate or seed; nothing is
    allocated in that case.
    """

    def __init__(
        self,
        error: float = 0.02,
        seed: int | None = None,
        digest: Digest | None = None,
    ) -> None:
        p = precision_for_error(error)
        if digest is None:
            digest = DigestSource(DEFAULT_SEED if seed is None else seed)
        elif seed is not None:
            raise ConfigurationError("pass either seed or digest, not both")
        elif not callable(digest):
            raise ConfigurationError(
                f"digest must be callable, got {type(digest).__name__}"
            )
        self._error = float(error)
        self._digest = digest
        self._alpha = alpha_for_precision(p)
        self._registers = RegisterArray(p)
        log.debug(
            "created LogLogBeta error=%s precision=%d buckets=%d digest=%r",
            error, p, self._registers.bucket_count, digest,
        )

    @property
    def error(self) -> float:
        """Relative error the counter was asked for."""
        return self._error

    @property
    def precision(self) -> int:
        return self._registers.precision

    @property
    def bucket_count(self) -> int:
        return self._registers.bucket_count

    @property
    def alpha(self) -> float:
        return self._alpha

    @property
    def digest(self) -> Digest:
        return self._digest

    @property
    def seed(self) -> int | None:
        """Seed of the default digest, or None for a custom digest."""
        if isinstance(self._digest, DigestSource):
            return self._digest.seed
        return None

    @property
    def registers(self) -> tuple[int, ...]:
        """Snapshot of the register values."""
        return self._registers.values()

    def insert(self, element: Any) -> None:
        """Add an element to the counter.

        Raises InternalInvariantError if the digest breaks its contract;
        the counter is unchanged in that case.
        """
        self._registers.observe(self._digest(element))

    def update(self, elements: Iterable[Any]) -> None:
        """Insert every element of an iterable."""
        observe = self._registers.observe
        digest = self._digest
        for element in elements:
            observe(digest(element))

    def estimate(self) -> float:
        """Estimated number of distinct elements inserted so far."""
        return estimate_cardinality(self._registers, self._alpha)

    def is_empty(self) -> bool:
        return self._registers.zero_count() == self._registers.bucket_count

    def merge(self, other: LogLogBeta) -> LogLogBeta:
        """Return a new counter for the union of both streams.

        Raises MergeError if the counters were built with different
        precisions or digests. Neither counter is modified.
        """
        self._check_mergeable(other)
        merged = self.copy()
        merged._registers.max_update(other._registers)
        log.debug("merged two counters at precision %d", self.precision)
        return merged

    def merge_update(self, other: LogLogBeta) -> None:
        """Fold other into this counter in place (union).

        Same checks as merge(). Nothing is modified if they fail.
        """
        self._check_mergeable(other)
        self._registers.max_update(other._registers)
        log.debug("merged counter in place at precision %d", self.precision)

    def _check_mergeable(self, other: object) -> None:
        if not isinstance(other, LogLogBeta):
            raise MergeError(
                f"can only merge LogLogBeta counters, got {type(other).__name__}"
            )
        if self.precision != other.precision:
            raise MergeError(
                f"cannot merge counters with different precision: "
                f"{self.precision} vs {other.precision}"
            )
        if self._digest != other._digest:
            raise MergeError(
                f"cannot merge counters with different digests: "
                f"{self._digest!r} vs {other._digest!r}"
            )

    def copy(self) -> LogLogBeta:
        """Independent counter with the same configuration and registers."""
        clone = LogLogBeta.__new__(LogLogBeta)
        clone._error = self._error
        clone._digest = self._digest
        clone._alpha = self._alpha
        clone._registers = self._registers.copy()
        return clone

    def memory_bytes(self) -> int:
        """Bytes used by the registers."""
        return self._registers.memory_bytes()

    def standard_error(self) -> float:
        """Theoretical standard error for this precision."""
        return standard_error(self.precision)

    def __or__(self, other: object) -> LogLogBeta:
        if not isinstance(other, LogLogBeta):
            return NotImplemented
        return self.merge(other)

    def __ior__(self, other: object) -> LogLogBeta:
        if not isinstance(other, LogLogBeta):
            return NotImplemented
        self.merge_update(other)
        return self

    def __len__(self) -> int:
        return int(round(self.estimate()))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, LogLogBeta):
            return NotImplemented
        return self._digest == other._digest and self._registers == other._registers

    def __repr__(self) -> str:
        return (
            f"LogLogBeta(error={self._error}, precision={self.precision}, "
            f"digest={self._digest!r})"
        )


def create(error: float, seed: int = DEFAULT_SEED) -> LogLogBeta:
    """Build an empty counter for the given relative error."""
    return LogLogBeta(error=error, seed=seed)


def insert(counter: LogLogBeta, element: Any) -> None:
    counter.insert(element)


def estimate(counter: LogLogBeta) -> float:
    return counter.estimate()


def merge(a: LogLogBeta, b: LogLogBeta) -> LogLogBeta:
    """Union of two counters as a new counter. See LogLogBeta.merge()."""
    if not isinstance(a, LogLogBeta):
        raise MergeError(f"can only merge LogLogBeta counters, got {type(a).__name__}")
    return a.merge(b)


def merge_all(counters: Iterable[LogLogBeta]) -> LogLogBeta:
    """Combine any number of shard counters into one new counter.

    Raises MergeError for an empty iterable or any incompatible counter.
    None of the inputs is modified.
    """
    it = iter(counters)
    first = next(it, _MISSING)
    if first is _MISSING:
        raise MergeError("merge_all() needs at least one counter")
    if not isinstance(first, LogLogBeta):
        raise MergeError(
            f"can only merge LogLogBeta counters, got {type(first).__name__}"
        )
    result = first.copy()
    shards = 1
    for counter in it:
        result.merge_update(counter)
        shards += 1
    log.debug("combined %d shard counters", shards)
    return result
