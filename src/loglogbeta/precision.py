"""Pick a register count from a target relative error.

The standard error of a LogLog-family estimate with m registers is about
1.04 / sqrt(m). Solving for m and rounding up to a power of two gives

    p = ceil(log2((1.04 / error) ** 2)),   m = 2 ** p

so the counter is always at least as accurate as requested. The alpha
constant scales the harmonic mean of the registers and depends only on p.

Typical targets:
    error=0.05  -> p=9,  512 registers,   ~4.6% error
    error=0.02  -> p=12, 4096 registers,  ~1.6% error
    error=0.01  -> p=14, 16384 registers, ~0.8% error
"""

from __future__ import annotations

import math
import numbers

from loglogbeta.errors import ConfigurationError

MIN_PRECISION = 4
# 2**30 registers is already a gigabyte of storage.
MAX_PRECISION = 30

_SMALL_ALPHA = {4: 0.674, 5: 0.697, 6: 0.709}


def precision_for_error(error: float) -> int:
    """Return the precision p needed for the requested relative error.

    Raises ConfigurationError if error is not a real number in (0, 1),
    or if it implies a precision outside [MIN_PRECISION, MAX_PRECISION].
    """
    if isinstance(error, bool) or not isinstance(error, numbers.Real):
        raise ConfigurationError(
            f"error must be a real number, got {type(error).__name__}"
        )
    # Written this way round so NaN fails too
    if not (0.0 < error < 1.0):
        raise ConfigurationError(f"error must be in (0, 1), got {error}")
    try:
        p = math.ceil(math.log2((1.04 / error) ** 2))
    except OverflowError:
        raise ConfigurationError(
            f"error {error} is too small; the maximum precision is {MAX_PRECISION}"
        ) from None
    if p > MAX_PRECISION:
        raise ConfigurationError(
            f"error {error} needs precision {p} (2**{p} registers); "
            f"the maximum is {MAX_PRECISION}"
        )
    if p < MIN_PRECISION:
        raise ConfigurationError(
            f"error {error} needs precision {p}; the minimum is "
            f"{MIN_PRECISION} (error must be below "
            f"{standard_error(MIN_PRECISION - 1):.4f})"
        )
    return p


def alpha_for_precision(p: int) -> float:
    """Bias-correction constant for 2**p registers."""
    if p in _SMALL_ALPHA:
        return _SMALL_ALPHA[p]
    return 0.7213 / (1.0 + 1.079 / (1 << p))


def standard_error(p: int) -> float:
    """Theoretical relative standard error delivered by precision p."""
    return 1.04 / math.sqrt(1 << p)
