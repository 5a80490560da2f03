"""Register array and the rho statistic.

A 64-bit digest x is split in two:

    j = x & (m - 1)     low p bits, picks the register
    w = x >> p          high 64 - p bits, the remainder

rho(w) is the 1-indexed position of the first set bit of w, counted
from the most significant end of its (64 - p)-bit window. Half of all
remainders have rho 1, a quarter rho 2, and so on, so the largest rho a
register has seen says roughly how many distinct digests landed in it.
A zero remainder gives the maximum, 64 - p + 1.

That bound is at most 61 for p >= 4, so every register fits in one
unsigned byte and the array is stored as array("B").
"""

from __future__ import annotations

import array
import logging
from typing import Iterator

from loglogbeta.digest import DIGEST_BITS
from loglogbeta.errors import InternalInvariantError

log = logging.getLogger(__name__)

_DIGEST_LIMIT = 1 << DIGEST_BITS


def rho(w: int, max_width: int) -> int:
    """1 + the number of leading zeros of w in a max_width-bit window.

    Raises InternalInvariantError if w does not fit the window, which
    would otherwise yield a rank of zero or less.
    """
    rank = max_width - w.bit_length() + 1
    if w < 0 or rank <= 0:
        raise InternalInvariantError(w, max_width, "remainder overflows its window")
    return rank


class RegisterArray:
    """2**p byte-sized registers holding the maximum rho seen per bucket."""

    def __init__(self, precision: int) -> None:
        self._p = precision
        self._m = 1 << precision
        self._width = DIGEST_BITS - precision
        self._registers = array.array("B", bytes(self._m))

    @property
    def precision(self) -> int:
        return self._p

    @property
    def bucket_count(self) -> int:
        return self._m

    @property
    def max_rank(self) -> int:
        """Largest value any register can hold."""
        return self._width + 1

    def observe(self, x: int) -> None:
        """Fold one 64-bit digest into its register.

        The digest is checked before anything is written, so a bad
        digest leaves the array exactly as it was.
        """
        if isinstance(x, bool) or not isinstance(x, int) or not (0 <= x < _DIGEST_LIMIT):
            log.warning("digest outside the 64-bit range: %r", x)
            raise InternalInvariantError(x, self._width, "digest is not an unsigned 64-bit int")
        j = x & (self._m - 1)
        # x < 2**64 so the remainder always fits the window
        rank = rho(x >> self._p, self._width)
        if rank > self._registers[j]:
            self._registers[j] = rank

    def zero_count(self) -> int:
        """Number of registers never touched."""
        return self._registers.count(0)

    def inverse_sum(self) -> float:
        """Sum of 2**-r over all registers."""
        return sum(2.0 ** -r for r in self._registers)

    def max_update(self, other: RegisterArray) -> None:
        """Replace each register with the larger of itself and other's.

        Callers check that precisions match before calling.
        """
        mine = self._registers
        theirs = other._registers
        for i in range(self._m):
            if theirs[i] > mine[i]:
                mine[i] = theirs[i]

    def copy(self) -> RegisterArray:
        clone = RegisterArray.__new__(RegisterArray)
        clone._p = self._p
        clone._m = self._m
        clone._width = self._width
        clone._registers = array.array("B", self._registers)
        return clone

    def values(self) -> tuple[int, ...]:
        """Snapshot of the register values."""
        return tuple(self._registers)

    def memory_bytes(self) -> int:
        return self._registers.itemsize * self._m

    def __len__(self) -> int:
        return self._m

    def __getitem__(self, index: int) -> int:
        return self._registers[index]

    def __iter__(self) -> Iterator[int]:
        return iter(self._registers)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RegisterArray):
            return NotImplemented
        return self._p == other._p and self._registers == other._registers
