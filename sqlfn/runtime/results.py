"""Cardinality helpers shared by generated operations.

``expect_one`` implements the exactly-one contract, ``expect_opt`` the
zero-or-one contract.  Both take the full, already materialized result.
"""
from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

from sqlfn.errors import NoRowsError, TooManyRowsError

T = TypeVar("T")


def expect_one(rows: Sequence[T], sql: str | None = None) -> T:
    """Return the only row of ``rows``.

    Raises:
        NoRowsError: If ``rows`` is empty.
        TooManyRowsError: If ``rows`` holds more than one row.
    """
    if not rows:
        raise NoRowsError(sql)
    if len(rows) > 1:
        raise TooManyRowsError(len(rows), sql)
    return rows[0]


def expect_opt(rows: Sequence[T], sql: str | None = None) -> T | None:
    """Return the only row of ``rows``, or ``None`` when it is empty.

    Raises:
        TooManyRowsError: If ``rows`` holds more than one row.
    """
    if len(rows) > 1:
        raise TooManyRowsError(len(rows), sql)
    return rows[0] if rows else None
