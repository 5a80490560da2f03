"""Bounded-memory distinct counting with LogLog-Beta.

Public API:
    LogLogBeta: the counter (insert, estimate, merge)
    create, insert, estimate, merge, merge_all: function-style API
    DigestSource: seeded 64-bit digest used by default
    GroupedCardinality: one counter per group key
    ConfigurationError, MergeError, InternalInvariantError: errors
"""

from loglogbeta.counter import (
    LogLogBeta,
    create,
    estimate,
    insert,
    merge,
    merge_all,
)
from loglogbeta.digest import DigestSource
from loglogbeta.errors import (
    ConfigurationError,
    InternalInvariantError,
    LogLogBetaError,
    MergeError,
)
from loglogbeta.grouped import GroupedCardinality

__all__ = [
    "ConfigurationError",
    "DigestSource",
    "GroupedCardinality",
    "InternalInvariantError",
    "LogLogBeta",
    "LogLogBetaError",
    "MergeError",
    "create",
    "estimate",
    "insert",
    "merge",
    "merge_all",
]
