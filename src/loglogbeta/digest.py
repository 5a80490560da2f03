"""Seeded 64-bit digests for arbitrary elements.

The counter only needs one thing from a digest: equal elements map to
equal 64-bit values, and distinct elements spread uniformly over the
64-bit space. DigestSource gets there in two steps.

First the element is canonicalized into bytes. Every value is written
as a one-byte type tag, a 4-byte big-endian length and the payload, so
the string "1", the int 1, the float 1.0 and True all produce different
byte strings, and tuples of values cannot be confused with one another
by shifting bytes between fields.

Then the bytes go through keyed BLAKE2b with an 8-byte digest. The key
is the seed packed as a big-endian uint64. The seed is fixed when the
DigestSource is built and carried on every counter that uses it, which
is what lets two counters built with the same seed be merged.
"""

from __future__ import annotations

import hashlib
import struct
import uuid
from dataclasses import dataclass, field
from typing import Any

from loglogbeta.errors import ConfigurationError

DEFAULT_SEED = 0
DIGEST_BITS = 64

_TAG_BYTES = b"b"
_TAG_STR = b"s"
_TAG_BOOL = b"?"
_TAG_INT = b"i"
_TAG_FLOAT = b"f"
_TAG_NONE = b"n"
_TAG_UUID = b"u"
_TAG_TUPLE = b"t"


def _lp(tag: bytes, data: bytes) -> bytes:
    """Tag and length-prefix a payload (4-byte big-endian length)."""
    return tag + struct.pack("!I", len(data)) + data


def canonical_bytes(element: Any) -> bytes:
    """Return the deterministic byte form of an element.

    Supported: bytes-like, str, bool, int, float, None, uuid.UUID and
    tuples of supported values. Anything else raises TypeError, because
    there is no stable byte form to fall back on (repr() of arbitrary
    objects can embed memory addresses).
    """
    # bool before int: True must not collide with 1
    if isinstance(element, bool):
        return _lp(_TAG_BOOL, b"\x01" if element else b"\x00")
    if isinstance(element, int):
        length = (element.bit_length() + 8) // 8
        return _lp(_TAG_INT, element.to_bytes(length, "big", signed=True))
    if isinstance(element, str):
        return _lp(_TAG_STR, element.encode("utf-8"))
    if isinstance(element, (bytes, bytearray, memoryview)):
        return _lp(_TAG_BYTES, bytes(element))
    if isinstance(element, float):
        # -0.0 == 0.0, so they share a digest
        return _lp(_TAG_FLOAT, struct.pack("!d", element + 0.0))
    if element is None:
        return _lp(_TAG_NONE, b"")
    if isinstance(element, uuid.UUID):
        return _lp(_TAG_UUID, element.bytes)
    if isinstance(element, tuple):
        return _lp(_TAG_TUPLE, b"".join(canonical_bytes(item) for item in element))
    raise TypeError(
        f"cannot digest element of type {type(element).__name__}; "
        f"pass a digest function that handles it"
    )


@dataclass(frozen=True)
class DigestSource:
    """Keyed BLAKE2b digest of canonicalized elements.

    Two DigestSource objects compare equal when their seeds are equal,
    which is the condition for their digests to agree on every element.
    """

    seed: int = DEFAULT_SEED
    _base: Any = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if isinstance(self.seed, bool) or not isinstance(self.seed, int):
            raise ConfigurationError(
                f"seed must be an int, got {type(self.seed).__name__}"
            )
        if not (0 <= self.seed < 1 << DIGEST_BITS):
            raise ConfigurationError(f"seed must be in [0, 2**64), got {self.seed}")
        key = struct.pack("!Q", self.seed)
        # Keyed state is set up once; each digest copies it.
        object.__setattr__(
            self, "_base", hashlib.blake2b(digest_size=DIGEST_BITS // 8, key=key)
        )

    def __call__(self, element: Any) -> int:
        """Digest an element to an unsigned 64-bit int."""
        h = self._base.copy()
        h.update(canonical_bytes(element))
        return int.from_bytes(h.digest(), "big")
