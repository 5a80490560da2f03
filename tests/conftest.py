"""Shared fixtures for the counter tests."""
from __future__ import annotations

from typing import Any, Callable, Iterable

import pytest

from loglogbeta import LogLogBeta


# Fixed seed so accuracy numbers are reproducible across runs
SEED = 42

# error=0.05 -> precision 9, 512 registers, 55-bit remainder window
ERROR = 0.05


def identity(x: int) -> int:
    """Digest that passes ints through, for placing values in known registers."""
    return x


@pytest.fixture
def counter() -> LogLogBeta:
    return LogLogBeta(error=ERROR, seed=SEED)


@pytest.fixture
def raw_counter() -> LogLogBeta:
    """Counter whose digest is the element itself (precision 9)."""
    return LogLogBeta(error=ERROR, digest=identity)


@pytest.fixture
def make_counter() -> Callable[..., LogLogBeta]:
    """Factory: build a counter and feed it an iterable of elements."""

    def _make(
        elements: Iterable[Any] = (),
        error: float = ERROR,
        seed: int = SEED,
    ) -> LogLogBeta:
        c = LogLogBeta(error=error, seed=seed)
        c.update(elements)
        return c

    return _make
