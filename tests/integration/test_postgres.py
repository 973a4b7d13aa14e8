"""Integration tests: generated network-backend code against a real PostgreSQL.

Uses SQLFN_TEST_POSTGRES_DSN, or SQLFN_TEST_POSTGRES_PORT with optional
SQLFN_TEST_POSTGRES_HOST / SQLFN_TEST_POSTGRES_USER.  Skips all tests if
neither is set or the server cannot be reached.  Every test runs with
``search_path`` set to ``pg_temp`` so tables vanish with the session.
"""
from __future__ import annotations

import pytest

pytest.importorskip("psycopg", reason="psycopg required for Postgres integration tests")

import psycopg  # noqa: E402

import sqlfn  # noqa: E402
from sqlfn.config import PostgresTestSettings  # noqa: E402
from sqlfn.errors import ConfigError, NoRowsError, TooManyRowsError  # noqa: E402
from sqlfn.runtime import postgres as pg_runtime  # noqa: E402
from sqlfn.runtime.cache import Cache  # noqa: E402
from sqlfn.runtime.testing import run_entry_points  # noqa: E402
from tests.fixtures import load_dsl  # noqa: E402


def _settings() -> PostgresTestSettings:
    try:
        return PostgresTestSettings.from_env()
    except ConfigError as e:
        pytest.skip(str(e))


def _connect() -> pg_runtime.PgClient:
    try:
        return pg_runtime.testing_client(_settings())
    except psycopg.OperationalError as e:
        pytest.skip(f"Cannot connect to Postgres: {e}")


@pytest.fixture(scope="module")
def queries():
    return sqlfn.compile_source(load_dsl("pets_pg")).load("pet_queries_pg")


@pytest.fixture()
def client(queries):
    with _connect() as pg:
        pg.execute("SET search_path TO pg_temp")
        queries.execute_create_pet_table(pg)
        yield pg


def test_insert_and_queue(queries, client):
    assert queries.execute_insert_new_pet(client, 1, "Max", None) == 1
    assert queries.execute_insert_new_pet(client, 2, "Rex", b"\x01\x02") == 1

    assert queries.queue_get_pet_id_data(client, "Rex") == [(2, b"\x01\x02")]
    assert queries.queue_one_get_pet_id_data(client, "Max") == (1, None)
    assert queries.queue_opt_get_pet_id_data(client, "nobody") is None
    assert queries.queue_one_get_pet_name(client, 2) == ("Rex",)
    assert queries.queue_one_count_pets(client) == (2,)


def test_cardinality_errors(queries, client):
    queries.execute_insert_new_pet(client, 1, "Max", None)
    queries.execute_insert_new_pet(client, 2, "Max", None)
    with pytest.raises(TooManyRowsError):
        queries.queue_one_get_pet_id_data(client, "Max")
    with pytest.raises(TooManyRowsError):
        queries.queue_opt_get_pet_id_data(client, "Max")
    with pytest.raises(NoRowsError):
        queries.queue_one_get_pet_id_data(client, "nobody")


def test_prepared_statements(queries, client):
    insert = queries.prepare_insert_new_pet(client)
    assert queries.execute_prepared_insert_new_pet(client, insert, 1, "Max", None) == 1
    assert queries.execute_prepared_insert_new_pet(client, insert, 2, "Rex", b"x") == 1

    cache = Cache()
    select = queries.prepare_cached_get_pet_id_data(client, cache)
    assert queries.prepare_cached_get_pet_id_data(client, cache) is select
    assert queries.queue_prepared_get_pet_id_data(client, select, "Rex") == [(2, b"x")]
    assert queries.queue_one_prepared_get_pet_id_data(client, select, "Max") == (1, None)
    assert queries.queue_opt_prepared_get_pet_id_data(client, select, "nobody") is None


def test_transaction_rollback(queries, client):
    with client.transaction() as tx:
        queries.execute_insert_new_pet(tx, 1, "Max", None)
    with client.transaction() as tx:
        queries.execute_insert_new_pet(tx, 2, "Rex", None)
        assert queries.queue_one_count_pets(tx) == (2,)
        tx.rollback()
    assert queries.queue_one_count_pets(client) == (1,)


def test_generated_entry_points():
    _connect().close()
    module = sqlfn.compile_source(load_dsl("pets_pg")).load("pet_queries_pg_auto")
    outcomes = run_entry_points(module)
    assert all(o.passed for o in outcomes), [o.error for o in outcomes if not o.passed]
    assert [o.name for o in outcomes] == [
        "auto_create_pet_table",
        "auto_insert_new_pet",
        "auto_get_pet_id_data",
    ]


def test_pg_client_connect_closes():
    _connect().close()
    with pg_runtime.PgClient.connect(_settings().conninfo) as pg:
        assert pg.query("SELECT 1") == [(1,)]
    assert pg.connection.closed


def test_pg_client_connect_persists_writes():
    _connect().close()
    conninfo = _settings().conninfo
    table = "sqlfn_autocommit_check"
    try:
        with pg_runtime.PgClient.connect(conninfo) as pg:
            pg.execute(f"DROP TABLE IF EXISTS {table}")
            pg.execute(f"CREATE TABLE {table} (id INTEGER PRIMARY KEY)")
            pg.execute(f"INSERT INTO {table} (id) VALUES ($1)", (1,))
            with pg.transaction() as tx:
                tx.execute(f"INSERT INTO {table} (id) VALUES ($1)", (2,))

        with pg_runtime.PgClient.connect(conninfo) as pg:
            assert pg.query(f"SELECT id FROM {table} ORDER BY id") == [(1,), (2,)]
    finally:
        with pg_runtime.PgClient.connect(conninfo) as pg:
            pg.execute(f"DROP TABLE IF EXISTS {table}")


def test_pg_client_connect_can_opt_out_of_autocommit():
    _connect().close()
    with pg_runtime.PgClient.connect(_settings().conninfo, autocommit=False) as pg:
        assert not pg.connection.autocommit
