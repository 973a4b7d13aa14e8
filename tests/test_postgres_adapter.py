"""Unit tests for the psycopg adapter that do not need a server."""
from __future__ import annotations

import pytest

pytest.importorskip("psycopg", reason="psycopg required for the PostgreSQL adapter")

from sqlfn.runtime import postgres as pg_runtime  # noqa: E402
from sqlfn.runtime.client import PreparedStatement  # noqa: E402
from sqlfn.runtime.postgres import _PgExecutor, to_pyformat  # noqa: E402


def test_to_pyformat_positional():
    query, params = to_pyformat("SELECT $1, $2, $1", [10, "x"])
    assert query == "SELECT %(p1)s, %(p2)s, %(p1)s"
    assert params == {"p1": 10, "p2": "x"}


def test_to_pyformat_skips_quoted_regions():
    query, _ = to_pyformat("SELECT '$1', \"$2\", $1 WHERE a LIKE 'x%'", [1])
    assert query == "SELECT '$1', \"$2\", %(p1)s WHERE a LIKE 'x%%'"


def test_to_pyformat_skips_dollar_quoted_bodies():
    query, _ = to_pyformat("SELECT $tag$ $1 $tag$, $$ $2 $$, $1", [1])
    assert query == "SELECT $tag$ $1 $tag$, $$ $2 $$, %(p1)s"


def test_to_pyformat_doubles_percent():
    query, _ = to_pyformat("SELECT 5 % $1", [2])
    assert query == "SELECT 5 %% %(p1)s"


def test_to_pyformat_without_params_is_verbatim():
    assert to_pyformat("SELECT '%'", []) == ("SELECT '%'", None)


def test_bind_prepared_statement():
    stmt = PreparedStatement(name="sqlfn_1", sql="SELECT $1")
    assert _PgExecutor._bind(stmt, (1, "a")) == ("EXECUTE sqlfn_1(%s, %s)", [1, "a"])
    assert _PgExecutor._bind(stmt, ()) == ("EXECUTE sqlfn_1", None)


def test_connect_defaults_to_autocommit(monkeypatch):
    calls = []
    monkeypatch.setattr(
        pg_runtime.psycopg, "connect", lambda conninfo, **kw: calls.append((conninfo, kw)) or object()
    )
    pg_runtime.PgClient.connect("dbname=app")
    pg_runtime.PgClient.connect("dbname=app", autocommit=False, connect_timeout=3)
    assert calls == [
        ("dbname=app", {"autocommit": True}),
        ("dbname=app", {"autocommit": False, "connect_timeout": 3}),
    ]


def test_testing_client_is_not_collected_as_a_test():
    assert pg_runtime.testing_client.__test__ is False
