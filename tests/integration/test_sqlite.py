"""Integration tests: compile the pet store, write it to disk, import it, run it.

Covers the full build-step path: DSL file → ``python -m sqlfn`` style
compilation → an importable module → real SQLite in-memory databases.
"""
from __future__ import annotations

import importlib.util
import sqlite3

import pytest

import sqlfn
from sqlfn.errors import NoRowsError
from sqlfn.runtime.testing import collect_entry_points
from tests.fixtures import dsl_path


@pytest.fixture(scope="module")
def queries(tmp_path_factory):
    """The pet store module, written to disk and imported like user code."""
    target = tmp_path_factory.mktemp("generated") / "pet_queries.py"
    sqlfn.compile_file(dsl_path("pets")).write(target)
    spec = importlib.util.spec_from_file_location("pet_queries", target)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture()
def db(queries):
    conn = sqlite3.connect(":memory:")
    queries.execute_create_pet_table(conn)
    yield conn
    conn.close()


def test_pet_store_round_trip(queries, db):
    assert queries.query_row_get_pet_count(db, lambda n: n) == 0

    assert queries.execute_insert_new_pet(db, 1, "Max", None) == 1
    assert queries.query_row_get_pet_count(db, lambda n: n) == 1

    stmt = queries.prepare_get_pet_id_data(db)
    assert list(stmt.query_map("Max", lambda pet_id, data: (pet_id, data))) == [(1, None)]
    assert list(stmt.query_map("Rex", lambda pet_id, data: pet_id)) == []
    stmt.close()


def test_blob_data(queries, db):
    queries.execute_insert_new_pet(db, 42, "Rex", b"\x00\xffdata")
    assert queries.query_row_get_pet_id_data(db, "Rex", lambda pet_id, data: data) == b"\x00\xffdata"


def test_delete_then_count(queries, db):
    queries.execute_insert_new_pet(db, 1, "Max", None)
    queries.execute_insert_new_pet(db, 2, "Rex", None)
    assert queries.execute_delete_pets(db) == 2
    assert queries.query_row_get_pet_count(db, lambda n: n) == 0


def test_missing_pet(queries, db):
    with pytest.raises(NoRowsError):
        queries.query_row_get_pet_id_data(db, "nobody", lambda pet_id, data: pet_id)


def test_constraint_violation_is_a_driver_error(queries, db):
    queries.execute_insert_new_pet(db, 1, "Max", None)
    with pytest.raises(sqlite3.IntegrityError):
        queries.execute_insert_new_pet(db, 1, "Max again", None)


def _entry_points():
    generated = sqlfn.compile_file(dsl_path("pets"))
    return collect_entry_points(generated.load("pet_queries_entry_points"))


@pytest.mark.parametrize("entry", _entry_points(), ids=lambda f: f.__name__)
def test_generated_entry_point(entry):
    entry()
