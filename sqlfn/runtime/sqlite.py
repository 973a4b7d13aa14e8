"""Runtime support for modules generated for the embedded SQLite backend.

Generated code binds parameters by name (``{"name": value}``), matching the
``:name`` placeholders SQLite understands natively.  Statement handles come in
two flavours with identical operations:

* :class:`Statement` owns a dedicated cursor; the statement is compiled by
  SQLite on first execution and reused by that cursor afterwards.
* :class:`CachedStatement` runs every call through the connection itself, so
  compiled statements come from the driver's own statement cache
  (``sqlite3.connect(..., cached_statements=N)``).
"""
from __future__ import annotations

import sqlite3
from collections.abc import Callable, Iterator, Mapping, Sequence
from typing import Any, Generic, TypeVar

from sqlfn.errors import ExecuteReturnedRowsError, NoRowsError
from sqlfn.runtime.types import ColumnType, decode_row

T = TypeVar("T")

Params = Mapping[str, Any]


def _as_tuple(*columns: Any) -> tuple[Any, ...]:
    return columns


class Rows(Generic[T]):
    """Lazy, single-pass sequence of mapped rows.

    Rows are fetched one at a time.  Each element is decoded and mapped
    independently: a :class:`~sqlfn.errors.DecodeError` raised for one row
    leaves the cursor on the next row, so calling :func:`next` again resumes.
    The sequence cannot be restarted; iterating it twice yields nothing the
    second time.
    """

    def __init__(
        self,
        cursor: sqlite3.Cursor,
        types: Sequence[ColumnType],
        f: Callable[..., T],
    ) -> None:
        self._cursor = cursor
        self._types = types
        self._map = f
        self._done = False

    def __iter__(self) -> Iterator[T]:
        return self

    def __next__(self) -> T:
        if self._done:
            raise StopIteration
        row = self._cursor.fetchone()
        if row is None:
            self._done = True
            raise StopIteration
        return self._map(*decode_row(row, self._types))


def execute(conn: sqlite3.Connection | sqlite3.Cursor, sql: str, params: Params) -> int:
    """Run a statement that produces no rows and return the changed-row count.

    Raises:
        ExecuteReturnedRowsError: If the statement produced a result set.
        sqlite3.Error: On any driver failure.
    """
    cursor = conn.execute(sql, params)
    if cursor.description is not None:
        raise ExecuteReturnedRowsError(sql)
    return max(cursor.rowcount, 0)


def query_row(
    conn: sqlite3.Connection,
    sql: str,
    params: Params,
    types: Sequence[ColumnType],
    f: Callable[..., T],
) -> T:
    """Run ``sql`` and return its first row mapped through ``f``.

    Raises:
        NoRowsError: If the result is empty.
        DecodeError: If the first row does not match ``types``.
    """
    cursor = conn.execute(sql, params)
    try:
        row = cursor.fetchone()
    finally:
        cursor.close()
    if row is None:
        raise NoRowsError(sql)
    return f(*decode_row(row, types))


class _StatementOps:
    """Operations shared by :class:`Statement` and :class:`CachedStatement`.

    Generated subclasses wrap these with typed, per-query signatures.
    """

    _outputs: Sequence[ColumnType] = ()

    def __init__(self, conn: sqlite3.Connection, sql: str) -> None:
        self.conn = conn
        self.sql = sql

    def _run(self, params: Params) -> sqlite3.Cursor:
        raise NotImplementedError

    def _execute(self, params: Params) -> int:
        cursor = self._run(params)
        if cursor.description is not None:
            raise ExecuteReturnedRowsError(self.sql)
        return max(cursor.rowcount, 0)

    def _query_map(self, params: Params, f: Callable[..., T]) -> Rows[T]:
        return Rows(self._run(params), self._outputs, f)

    def _query(self, params: Params) -> Rows[tuple[Any, ...]]:
        return Rows(self._run(params), self._outputs, _as_tuple)

    def _query_row(self, params: Params, f: Callable[..., T]) -> T:
        for value in self._query_map(params, f):
            return value
        raise NoRowsError(self.sql)


class Statement(_StatementOps):
    """Statement handle owning a dedicated cursor."""

    def __init__(self, conn: sqlite3.Connection, sql: str) -> None:
        super().__init__(conn, sql)
        self._cursor = conn.cursor()

    def _run(self, params: Params) -> sqlite3.Cursor:
        return self._cursor.execute(self.sql, params)

    def close(self) -> None:
        """Release the underlying cursor."""
        self._cursor.close()


class CachedStatement(_StatementOps):
    """Statement handle backed by the connection's statement cache."""

    def _run(self, params: Params) -> sqlite3.Cursor:
        return self.conn.execute(self.sql, params)

    def close(self) -> None:
        """Nothing to release; the connection owns the cached statement."""
