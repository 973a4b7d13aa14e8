"""Unit tests for the runtime support package."""
from __future__ import annotations

import logging

import pytest

from sqlfn.errors import DecodeError, NoRowsError, TooManyRowsError
from sqlfn.runtime import types as t
from sqlfn.runtime.arbitrary import RAW_TEST_DATA, Unstructured
from sqlfn.runtime.cache import Cache
from sqlfn.runtime.results import expect_one, expect_opt
from tests.conftest import FakeClient


# ---------------------------------------------------------------------------
# Column types
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "column_type, value, expected",
    [
        (t.INT, 3, 3),
        (t.FLOAT, 1, 1.0),
        (t.FLOAT, 2.5, 2.5),
        (t.BOOL, True, True),
        (t.BOOL, 0, False),
        (t.STR, "x", "x"),
        (t.BYTES, b"x", b"x"),
        (t.BYTES, bytearray(b"x"), b"x"),
        (t.BYTES, memoryview(b"x"), b"x"),
        (t.optional(t.INT), None, None),
        (t.optional(t.INT), 4, 4),
    ],
)
def test_decode_accepts(column_type, value, expected):
    decoded = column_type.decode(value, 0)
    assert decoded == expected
    assert type(decoded) is type(expected)


@pytest.mark.parametrize(
    "column_type, value",
    [
        (t.INT, True),
        (t.INT, "1"),
        (t.INT, None),
        (t.FLOAT, "1.0"),
        (t.BOOL, 2),
        (t.STR, b"x"),
        (t.BYTES, "x"),
        (t.optional(t.STR), 1),
    ],
)
def test_decode_rejects(column_type, value):
    with pytest.raises(DecodeError) as exc_info:
        column_type.decode(value, 2)
    assert exc_info.value.column == 2
    assert exc_info.value.value == value


def test_decode_row_checks_column_count():
    assert t.decode_row((1, "a"), (t.INT, t.STR)) == (1, "a")
    with pytest.raises(DecodeError, match="1 columns, 2 declared"):
        t.decode_row((1,), (t.INT, t.STR))


def test_optional_equality():
    assert t.optional(t.BYTES) == t.optional(t.BYTES)
    assert t.optional(t.BYTES) != t.optional(t.STR)
    assert t.optional(t.INT).name == "Optional[int]"


# ---------------------------------------------------------------------------
# Unstructured
# ---------------------------------------------------------------------------


def test_raw_test_data():
    assert RAW_TEST_DATA == b"\x01\x02\x03"


def test_int32_is_little_endian_and_zero_padded():
    u = Unstructured(RAW_TEST_DATA)
    assert u.arbitrary(t.INT) == 0x030201
    assert u.remaining == 0
    assert u.arbitrary(t.INT) == 0


def test_int32_is_signed():
    assert Unstructured(b"\xff\xff\xff\xff").int32() == -1


def test_exhausted_input_yields_zero_values():
    u = Unstructured(b"")
    assert u.arbitrary(t.FLOAT) == 0.0
    assert u.arbitrary(t.BOOL) is False
    assert u.arbitrary(t.STR) == ""
    assert u.arbitrary(t.BYTES) == b""
    assert u.arbitrary(t.optional(t.INT)) is None


def test_length_prefixed_values():
    u = Unstructured(b"\x02ab\x01")
    assert u.arbitrary(t.BYTES) == b"ab"
    assert u.arbitrary(t.STR) == ""


def test_optional_gate():
    u = Unstructured(b"\x01\x05\x00\x00\x00\x00")
    assert u.arbitrary(t.optional(t.INT)) == 5
    assert u.arbitrary(t.optional(t.INT)) is None


def test_float64():
    u = Unstructured(bytes.fromhex("000000000000f03f"))
    assert u.arbitrary(t.FLOAT) == 1.0


def test_generation_is_deterministic():
    types = [t.INT, t.STR, t.optional(t.BYTES), t.FLOAT, t.BOOL]
    first = [Unstructured.from_seed(7).arbitrary(ct) for ct in types]
    second = [Unstructured.from_seed(7).arbitrary(ct) for ct in types]
    # repr() so that a NaN float still compares equal
    assert [repr(v) for v in first] == [repr(v) for v in second]
    assert Unstructured.from_seed(7, size=16).remaining == 16


# ---------------------------------------------------------------------------
# Cardinality contracts
# ---------------------------------------------------------------------------


def test_expect_one():
    assert expect_one([(1,)]) == (1,)
    with pytest.raises(NoRowsError):
        expect_one([])
    with pytest.raises(TooManyRowsError) as exc_info:
        expect_one([(1,), (2,)], "SELECT 1")
    assert exc_info.value.count == 2
    assert exc_info.value.sql == "SELECT 1"


def test_expect_opt():
    assert expect_opt([]) is None
    assert expect_opt([(1,)]) == (1,)
    with pytest.raises(TooManyRowsError):
        expect_opt([(1,), (2,), (3,)])


# ---------------------------------------------------------------------------
# Cache
# ---------------------------------------------------------------------------


def test_cache_prepares_once_per_key():
    client = FakeClient()
    cache = Cache()
    a = cache.prepare("SELECT 1", client)
    b = cache.prepare("SELECT 1", client)
    c = cache.prepare("SELECT 2", client)
    assert a is b
    assert a is not c
    assert client.prepared == [("SELECT 1", ()), ("SELECT 2", ())]
    assert len(cache) == 2


def test_cache_keys_include_types():
    client = FakeClient()
    cache = Cache()
    untyped = cache.prepare("SELECT $1", client)
    typed = cache.prepare_typed("SELECT $1", ["int4"], client)
    again = cache.prepare_typed("SELECT $1", ("int4",), client)
    assert untyped is not typed
    assert typed is again
    assert typed.types == ("int4",)
    assert ("SELECT $1", ("int4",)) in cache
    assert client.prepared == [("SELECT $1", ()), ("SELECT $1", ("int4",))]


def test_cache_logs_hits_and_misses(caplog):
    caplog.set_level(logging.DEBUG, logger="sqlfn.runtime.cache")
    client = FakeClient()
    cache = Cache()
    cache.prepare("SELECT 1", client)
    cache.prepare("SELECT 1", client)
    messages = [r.getMessage() for r in caplog.records]
    assert any("miss" in m for m in messages)
    assert any("hit" in m for m in messages)
