"""Client protocol used by modules generated for the network backend.

Generated functions only rely on the three primitives of
:class:`GenericClient`.  :class:`~sqlfn.runtime.postgres.PgClient` (a direct
connection) and :class:`~sqlfn.runtime.postgres.PgTransaction` (an open
transaction) both implement it, so every generated operation works with
either.
"""
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Protocol, Union


@dataclass(frozen=True)
class PreparedStatement:
    """Opaque handle to a server-side prepared statement.

    Attributes:
        name: Server-side statement name.
        sql: The statement text (``$n`` placeholders).
        types: Declared parameter type names (may be empty).
    """

    name: str
    sql: str
    types: tuple[str, ...] = ()


Statement = Union[str, PreparedStatement]


class GenericClient(Protocol):
    """What generated network-backend code needs from a connection."""

    def prepare(self, sql: str, types: Sequence[str] = ()) -> PreparedStatement:
        """Prepare ``sql`` on the server and return its handle."""
        ...

    def execute(self, statement: Statement, params: Sequence[Any] = ()) -> int:
        """Run ``statement`` and return the affected-row count."""
        ...

    def query(self, statement: Statement, params: Sequence[Any] = ()) -> list[tuple[Any, ...]]:
        """Run ``statement`` and return every row."""
        ...
