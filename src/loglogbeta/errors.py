"""Exceptions raised by the cardinality counter.

Each one subclasses the builtin a caller would already expect for that
kind of failure, so ``except ValueError`` around construction or merge
keeps working for code that does not know about this package.
"""
from __future__ import annotations


class LogLogBetaError(Exception):
    """Base class for every error this package raises."""


class ConfigurationError(LogLogBetaError, ValueError):
    """Raised when a counter cannot be built from the given parameters.

    Covers error rates outside (0, 1), rates that imply a precision
    outside the supported range, and seeds outside the 64-bit range.
    Raised before any register storage is allocated.
    """


class MergeError(LogLogBetaError, ValueError):
    """Raised when two counters cannot be combined.

    Neither operand is modified when this is raised.
    """


class InternalInvariantError(LogLogBetaError, RuntimeError):
    """Raised when a digest produces a rho statistic outside its range.

    This points at a digest function that broke its contract (a value
    wider than 64 bits, a negative value, a non-int) rather than at
    anything in the input stream. The counter is left as it was before
    the offending insert, so callers can log it and keep going.
    """

    def __init__(self, value: object, max_width: int, reason: str) -> None:
        self.value = value
        self.max_width = max_width
        super().__init__(f"{reason}: value={value!r}, max_width={max_width}")
