"""Runtime column types used by generated modules.

A column type knows two things: how to check and convert a value the driver
returned (``decode``), and how to synthesize a value of its type from an
:class:`~sqlfn.runtime.arbitrary.Unstructured` byte source (``synthesize``).
Generated modules reference the constants below, e.g.
``OUTPUTS_get_pet = (_t.INT, _t.optional(_t.BYTES))``.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from sqlfn.errors import DecodeError

if TYPE_CHECKING:
    from sqlfn.runtime.arbitrary import Unstructured


class ColumnType(ABC):
    """Base class for runtime column types."""

    #: DSL spelling used in error messages.
    name: str = ""

    @abstractmethod
    def convert(self, value: Any) -> Any:
        """Return ``value`` converted to this type, or raise ``TypeError``."""

    @abstractmethod
    def synthesize(self, source: Unstructured) -> Any:
        """Return a value of this type decoded from ``source``."""

    def decode(self, value: Any, column: int) -> Any:
        """Decode one column value.

        Args:
            value: Value returned by the driver.
            column: 0-based column index, for the error message.

        Raises:
            DecodeError: If ``value`` does not fit this type.
        """
        try:
            return self.convert(value)
        except TypeError as exc:
            raise DecodeError(column, self.name, value) from exc

    def __repr__(self) -> str:
        return f"<ColumnType {self.name}>"


class _IntType(ColumnType):
    name = "int"

    def convert(self, value: Any) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(value)
        return value

    def synthesize(self, source: Unstructured) -> int:
        return source.int32()


class _FloatType(ColumnType):
    name = "float"

    def convert(self, value: Any) -> float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(value)
        return float(value)

    def synthesize(self, source: Unstructured) -> float:
        return source.float64()


class _BoolType(ColumnType):
    name = "bool"

    def convert(self, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        # SQLite stores booleans as integers.
        if isinstance(value, int) and value in (0, 1):
            return bool(value)
        raise TypeError(value)

    def synthesize(self, source: Unstructured) -> bool:
        return source.boolean()


class _StrType(ColumnType):
    name = "str"

    def convert(self, value: Any) -> str:
        if not isinstance(value, str):
            raise TypeError(value)
        return value

    def synthesize(self, source: Unstructured) -> str:
        return source.text()


class _BytesType(ColumnType):
    name = "bytes"

    def convert(self, value: Any) -> bytes:
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise TypeError(value)
        return bytes(value)

    def synthesize(self, source: Unstructured) -> bytes:
        return source.byte_string()


class OptionalType(ColumnType):
    """``Optional[T]``: ``None`` or a value of ``inner``."""

    def __init__(self, inner: ColumnType) -> None:
        self.inner = inner
        self.name = f"Optional[{inner.name}]"

    def convert(self, value: Any) -> Any:
        if value is None:
            return None
        return self.inner.convert(value)

    def synthesize(self, source: Unstructured) -> Any:
        if source.boolean():
            return self.inner.synthesize(source)
        return None

    def __eq__(self, other: object) -> bool:
        return isinstance(other, OptionalType) and other.inner == self.inner

    def __hash__(self) -> int:
        return hash(("Optional", self.inner))


INT: ColumnType = _IntType()
FLOAT: ColumnType = _FloatType()
BOOL: ColumnType = _BoolType()
STR: ColumnType = _StrType()
BYTES: ColumnType = _BytesType()


def optional(inner: ColumnType) -> OptionalType:
    """Build the ``Optional[inner]`` column type."""
    return OptionalType(inner)


def decode_row(row: Sequence[Any], types: Sequence[ColumnType]) -> tuple[Any, ...]:
    """Decode ``row`` positionally against the declared output ``types``.

    Each column is decoded independently; the first failing column raises.

    Raises:
        DecodeError: If a column is missing or does not match its type.
    """
    if len(row) < len(types):
        raise DecodeError(
            len(row),
            types[len(row)].name,
            None,
            reason=f"row has {len(row)} columns, {len(types)} declared",
        )
    return tuple(t.decode(row[i], i) for i, t in enumerate(types))
