"""psycopg adapter implementing :class:`~sqlfn.runtime.client.GenericClient`.

Generated network-backend code carries PostgreSQL's native ``$n``
placeholders.  psycopg binds ``%s`` / ``%(name)s`` placeholders instead, so
unprepared statements are translated on the way out: ``$n`` becomes
``%(pn)s`` and literal ``%`` is doubled.  Quoted strings, quoted identifiers
and dollar-quoted bodies are left alone apart from the ``%`` doubling psycopg
needs everywhere.

Prepared statements are real server-side statements created with
``PREPARE name (types) AS ...`` and run with ``EXECUTE name(...)``.  ``EXECUTE``
is a utility command that cannot take bind parameters, so its arguments are
bound client-side through :class:`psycopg.ClientCursor`.
"""
from __future__ import annotations

import itertools
import logging
import re
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any

import psycopg

from sqlfn.config import PostgresTestSettings
from sqlfn.runtime.client import PreparedStatement, Statement

logger = logging.getLogger(__name__)

_statement_ids = itertools.count(1)

_SQL_TOKEN_RE = re.compile(
    r"""
      (?P<quoted>'(?:[^']|'')*'|"(?:[^"]|"")*")
    | (?P<dollar>\$(?P<tag>[A-Za-z_][A-Za-z0-9_]*|)\$.*?\$(?P=tag)\$)
    | \$(?P<num>[0-9]+)
    | (?P<percent>%)
    """,
    re.VERBOSE | re.DOTALL,
)


def to_pyformat(sql: str, params: Sequence[Any]) -> tuple[str, dict[str, Any] | None]:
    """Translate ``$n`` placeholders to psycopg's ``%(pn)s`` form.

    Args:
        sql: Statement text with ``$n`` placeholders.
        params: Positional parameter values; ``params[0]`` binds ``$1``.

    Returns:
        ``(query, mapping)``.  Without parameters the text is returned
        untouched with ``None``, which psycopg sends verbatim.
    """
    if not params:
        return sql, None

    def replace(match: re.Match[str]) -> str:
        if match.group("num") is not None:
            return f"%(p{match.group('num')})s"
        return match.group(0).replace("%", "%%")

    query = _SQL_TOKEN_RE.sub(replace, sql)
    return query, {f"p{i}": value for i, value in enumerate(params, start=1)}


class _PgExecutor:
    """Shared implementation for connections and transactions."""

    def __init__(self, conn: psycopg.Connection) -> None:
        self._conn = conn

    @property
    def connection(self) -> psycopg.Connection:
        """The underlying psycopg connection."""
        return self._conn

    def prepare(self, sql: str, types: Sequence[str] = ()) -> PreparedStatement:
        name = f"sqlfn_{next(_statement_ids)}"
        type_list = f" ({', '.join(types)})" if types else ""
        with self._conn.cursor() as cur:
            cur.execute(f"PREPARE {name}{type_list} AS {sql}")
        logger.debug("prepared %s: %s", name, sql)
        return PreparedStatement(name=name, sql=sql, types=tuple(types))

    def execute(self, statement: Statement, params: Sequence[Any] = ()) -> int:
        with self._cursor(statement) as cur:
            cur.execute(*self._bind(statement, params))
            return max(cur.rowcount, 0)

    def query(self, statement: Statement, params: Sequence[Any] = ()) -> list[tuple[Any, ...]]:
        with self._cursor(statement) as cur:
            cur.execute(*self._bind(statement, params))
            return cur.fetchall()

    def _cursor(self, statement: Statement) -> psycopg.Cursor:
        if isinstance(statement, PreparedStatement):
            return psycopg.ClientCursor(self._conn)
        return self._conn.cursor()

    @staticmethod
    def _bind(statement: Statement, params: Sequence[Any]) -> tuple[str, Any]:
        if isinstance(statement, PreparedStatement):
            if not params:
                return f"EXECUTE {statement.name}", None
            markers = ", ".join(["%s"] * len(params))
            return f"EXECUTE {statement.name}({markers})", list(params)
        return to_pyformat(statement, params)


class PgTransaction(_PgExecutor):
    """An open transaction; obtained from :meth:`PgClient.transaction`."""

    def __init__(self, conn: psycopg.Connection, transaction: psycopg.Transaction) -> None:
        super().__init__(conn)
        self._transaction = transaction

    def rollback(self) -> None:
        """Roll the transaction back when its block exits."""
        raise psycopg.Rollback(self._transaction)


class PgClient(_PgExecutor):
    """A direct PostgreSQL connection.

    Example::

        with PgClient.connect("dbname=app") as client:
            execute_insert_new_pet(client, 1, "Max", None)
            with client.transaction() as tx:
                rows = queue_get_pet_id_data(tx, "Max")
    """

    @classmethod
    def connect(cls, conninfo: str = "", **kwargs: Any) -> PgClient:
        """Open a connection with :func:`psycopg.connect`.

        The connection is in autocommit mode unless ``autocommit=False`` is
        passed, so each statement outside :meth:`transaction` commits on its
        own and closing the client never discards writes.
        """
        kwargs.setdefault("autocommit", True)
        return cls(psycopg.connect(conninfo, **kwargs))

    @contextmanager
    def transaction(self) -> Iterator[PgTransaction]:
        """Open a transaction; it commits on normal exit and rolls back on error."""
        with self._conn.transaction() as tx:
            yield PgTransaction(self._conn, tx)

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> PgClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


def testing_client(settings: PostgresTestSettings | None = None) -> PgClient:
    """Connect to the PostgreSQL server used by generated tests.

    Connection parameters come from the environment (see
    :meth:`~sqlfn.config.PostgresTestSettings.from_env`).  The connection is in
    autocommit mode so session settings such as ``search_path`` persist.

    Raises:
        ConfigError: If no connection parameters are configured.
        psycopg.Error: If the server cannot be reached.
    """
    settings = settings or PostgresTestSettings.from_env()
    return PgClient.connect(settings.conninfo, autocommit=True)


testing_client.__test__ = False  # type: ignore[attr-defined]
