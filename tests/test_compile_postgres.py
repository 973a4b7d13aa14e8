"""Unit tests for code generated for the network (PostgreSQL) backend.

Generated functions only use the GenericClient protocol, so these tests run
against FakeClient; see tests/integration/test_postgres.py for a live server.
"""
from __future__ import annotations

import pytest

import sqlfn
from sqlfn.config import GeneratorConfig
from sqlfn.errors import DecodeError, NoRowsError, TooManyRowsError, UnmatchedPlaceholderError
from sqlfn.runtime.cache import Cache
from sqlfn.runtime.client import PreparedStatement
from tests.conftest import FakeClient, load_generated
from tests.fixtures import load_dsl


def test_named_sql_is_rewritten(pets_pg):
    assert pets_pg.SQL_insert_new_pet == "INSERT INTO pet (id, name, data) VALUES ($1, $2, $3)"
    assert pets_pg.SQL_get_pet_name == "SELECT name::text FROM pet WHERE id = $1"


def test_unnamed_sql_is_verbatim(pets_pg):
    assert pets_pg.SQL_get_pet_id_data == "SELECT id, data FROM pet WHERE pet.name = $1"


def test_operation_set(pets_pg):
    for prefix in (
        "prepare_",
        "prepare_cached_",
        "execute_",
        "execute_prepared_",
        "from_row_",
        "queue_",
        "queue_prepared_",
        "queue_one_",
        "queue_one_prepared_",
        "queue_opt_",
        "queue_opt_prepared_",
    ):
        assert hasattr(pets_pg, f"{prefix}get_pet_id_data"), prefix

    for prefix in ("from_row_", "queue_", "queue_one_", "queue_opt_prepared_"):
        assert not hasattr(pets_pg, f"{prefix}insert_new_pet"), prefix
    assert hasattr(pets_pg, "execute_prepared_insert_new_pet")
    assert not hasattr(pets_pg, "Statement_get_pet_id_data")
    assert not hasattr(pets_pg, "query_row_get_pet_id_data")


def test_execute_passes_params_in_order(pets_pg):
    client = FakeClient(rowcount=1)
    assert pets_pg.execute_insert_new_pet(client, 7, "Max", b"\x01") == 1
    assert client.executed == [(pets_pg.SQL_insert_new_pet, (7, "Max", b"\x01"))]


def test_execute_without_params(pets_pg):
    client = FakeClient(rowcount=0)
    assert pets_pg.execute_create_pet_table(client) == 0
    assert client.executed == [(pets_pg.SQL_create_pet_table, ())]


def test_prepare_and_execute_prepared(pets_pg):
    client = FakeClient()
    stmt = pets_pg.prepare_insert_new_pet(client)
    assert isinstance(stmt, PreparedStatement)
    assert client.prepared == [(pets_pg.SQL_insert_new_pet, ())]

    pets_pg.execute_prepared_insert_new_pet(client, stmt, 1, "Max", None)
    assert client.executed == [(stmt, (1, "Max", None))]


def test_prepare_cached_prepares_once(pets_pg):
    client = FakeClient()
    cache = Cache()
    first = pets_pg.prepare_cached_get_pet_id_data(client, cache)
    second = pets_pg.prepare_cached_get_pet_id_data(client, cache)
    assert first is second
    assert len(client.prepared) == 1
    assert (pets_pg.SQL_get_pet_id_data, ()) in cache


def test_queue_returns_all_rows(pets_pg):
    client = FakeClient(rows=[(1, None), (2, b"x")])
    assert pets_pg.queue_get_pet_id_data(client, "Max") == [(1, None), (2, b"x")]
    assert client.queried == [(pets_pg.SQL_get_pet_id_data, ("Max",))]


def test_queue_empty(pets_pg):
    assert pets_pg.queue_get_pet_id_data(FakeClient(rows=[]), "Max") == []


@pytest.mark.parametrize(
    "rows, expected",
    [
        ([(1, b"a")], (1, b"a")),
        ([], NoRowsError),
        ([(1, None), (2, None)], TooManyRowsError),
    ],
)
def test_queue_one(pets_pg, rows, expected):
    client = FakeClient(rows=rows)
    if isinstance(expected, type):
        with pytest.raises(expected):
            pets_pg.queue_one_get_pet_id_data(client, "Max")
    else:
        assert pets_pg.queue_one_get_pet_id_data(client, "Max") == expected


@pytest.mark.parametrize(
    "rows, expected",
    [
        ([(1, b"a")], (1, b"a")),
        ([], None),
        ([(1, None), (2, None)], TooManyRowsError),
    ],
)
def test_queue_opt(pets_pg, rows, expected):
    client = FakeClient(rows=rows)
    if isinstance(expected, type):
        with pytest.raises(expected):
            pets_pg.queue_opt_get_pet_id_data(client, "Max")
    else:
        assert pets_pg.queue_opt_get_pet_id_data(client, "Max") == expected


def test_prepared_queue_variants(pets_pg):
    client = FakeClient(rows=[(3, None)])
    stmt = pets_pg.prepare_get_pet_id_data(client)
    assert pets_pg.queue_prepared_get_pet_id_data(client, stmt, "Max") == [(3, None)]
    assert pets_pg.queue_one_prepared_get_pet_id_data(client, stmt, "Max") == (3, None)
    assert pets_pg.queue_opt_prepared_get_pet_id_data(client, stmt, "Max") == (3, None)
    assert all(target is stmt for target, _ in client.queried)


def test_from_row_decodes_by_position(pets_pg):
    assert pets_pg.from_row_get_pet_id_data((5, memoryview(b"z"))) == (5, b"z")
    with pytest.raises(DecodeError) as exc_info:
        pets_pg.from_row_get_pet_id_data((5, "not bytes"))
    assert exc_info.value.column == 1
    with pytest.raises(DecodeError):
        pets_pg.from_row_get_pet_id_data((5,))


def test_decode_error_surfaces_from_queue(pets_pg):
    client = FakeClient(rows=[("one",)])
    with pytest.raises(DecodeError):
        pets_pg.queue_one_count_pets(client)


def test_strict_placeholders():
    text = '#[postgres, named] q(id: int) { "SELECT :idd" }'
    assert load_generated(text).SQL_q == "SELECT :idd"
    with pytest.raises(UnmatchedPlaceholderError):
        sqlfn.compile_source(text, GeneratorConfig(strict_placeholders=True))


def test_mixed_backends_in_one_unit():
    module = load_generated(
        '#[sqlite] local() -> [(int)] { "SELECT 1" }\n'
        '#[postgres] remote() -> [(int)] { "SELECT 1" }'
    )
    assert hasattr(module, "Statement_local")
    assert hasattr(module, "queue_remote")
    assert not hasattr(module, "queue_local")


def test_network_tests_import_psycopg():
    source = sqlfn.compile_source(load_dsl("pets_pg")).source
    assert "import psycopg\n" in source
    assert "except psycopg.Error as exc:" in source
    assert 'client.execute("SET search_path TO pg_temp")' in source
    assert "ExecuteReturnedRowsError" not in source
