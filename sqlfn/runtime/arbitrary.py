"""Deterministic arbitrary-value generator.

``Unstructured`` consumes a fixed byte sequence and decodes typed values from
it through :meth:`Unstructured.arbitrary`.  The same bytes always produce the
same values, so generated tests are reproducible without any external seed.
Once the bytes run out every primitive returns its zero value (``0``,
``0.0``, ``False``, empty string/bytes) instead of failing.
"""
from __future__ import annotations

import random
import struct
from typing import Any

from sqlfn.runtime.types import ColumnType

#: Bytes used by every generated test entry point.
RAW_TEST_DATA: bytes = bytes([1, 2, 3])


class Unstructured:
    """Byte-consuming decoder of typed values.

    Args:
        data: The raw bytes to decode from.
    """

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._pos = 0

    @classmethod
    def from_seed(cls, seed: int, size: int = 256) -> Unstructured:
        """Build a source of ``size`` pseudo-random bytes derived from ``seed``."""
        return cls(random.Random(seed).randbytes(size))

    @property
    def remaining(self) -> int:
        """Number of bytes not yet consumed."""
        return len(self._data) - self._pos

    def arbitrary(self, column_type: ColumnType) -> Any:
        """Decode the next value of ``column_type``."""
        return column_type.synthesize(self)

    # ------------------------------------------------------------------
    # Primitives
    # ------------------------------------------------------------------

    def take(self, size: int) -> bytes:
        """Consume up to ``size`` bytes (fewer when the input is exhausted)."""
        chunk = self._data[self._pos : self._pos + size]
        self._pos += len(chunk)
        return chunk

    def _fixed(self, size: int) -> bytes:
        return self.take(size).ljust(size, b"\0")

    def int32(self) -> int:
        """Signed 32-bit little-endian integer."""
        return int.from_bytes(self._fixed(4), "little", signed=True)

    def float64(self) -> float:
        """IEEE-754 double, little-endian."""
        return struct.unpack("<d", self._fixed(8))[0]

    def boolean(self) -> bool:
        """Low bit of the next byte."""
        return bool(self._fixed(1)[0] & 1)

    def length(self) -> int:
        """Length prefix bounded by the bytes left after reading it."""
        if self.remaining == 0:
            return 0
        prefix = self.take(1)[0]
        return prefix % (self.remaining + 1)

    def byte_string(self) -> bytes:
        """Length-prefixed byte string; always a new ``bytes`` object."""
        return bytes(self.take(self.length()))

    def text(self) -> str:
        """Length-prefixed UTF-8 text; undecodable bytes are dropped."""
        return self.take(self.length()).decode("utf-8", errors="ignore")
