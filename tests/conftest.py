"""Shared pytest fixtures for sqlfn unit and integration tests."""
from __future__ import annotations

import itertools
import sqlite3
from collections.abc import Iterator, Sequence
from types import ModuleType
from typing import Any

import pytest

import sqlfn
from sqlfn.config import GeneratorConfig
from sqlfn.runtime.client import PreparedStatement, Statement
from tests.fixtures import load_dsl

_module_ids = itertools.count(1)


def load_generated(text: str, config: GeneratorConfig | None = None) -> ModuleType:
    """Compile DSL ``text`` and load the result as a fresh module."""
    generated = sqlfn.compile_source(text, config)
    return generated.load(f"sqlfn_test_generated_{next(_module_ids)}")


class FakeClient:
    """In-memory GenericClient that records calls and returns scripted rows."""

    def __init__(self, rows: Sequence[tuple[Any, ...]] = (), rowcount: int = 1) -> None:
        self.rows = list(rows)
        self.rowcount = rowcount
        self.prepared: list[tuple[str, tuple[str, ...]]] = []
        self.executed: list[tuple[Statement, tuple[Any, ...]]] = []
        self.queried: list[tuple[Statement, tuple[Any, ...]]] = []

    def prepare(self, sql: str, types: Sequence[str] = ()) -> PreparedStatement:
        self.prepared.append((sql, tuple(types)))
        return PreparedStatement(name=f"fake_{len(self.prepared)}", sql=sql, types=tuple(types))

    def execute(self, statement: Statement, params: Sequence[Any] = ()) -> int:
        self.executed.append((statement, tuple(params)))
        return self.rowcount

    def query(self, statement: Statement, params: Sequence[Any] = ()) -> list[tuple[Any, ...]]:
        self.queried.append((statement, tuple(params)))
        return list(self.rows)


@pytest.fixture(scope="session")
def pets() -> ModuleType:
    """Generated module for the embedded pet store."""
    return load_generated(load_dsl("pets"))


@pytest.fixture(scope="session")
def pets_pg() -> ModuleType:
    """Generated module for the network pet store."""
    return load_generated(load_dsl("pets_pg"))


@pytest.fixture()
def conn() -> Iterator[sqlite3.Connection]:
    connection = sqlite3.connect(":memory:")
    yield connection
    connection.close()


@pytest.fixture()
def pet_db(pets: ModuleType, conn: sqlite3.Connection) -> sqlite3.Connection:
    """In-memory database with the pet table created."""
    pets.execute_create_pet_table(conn)
    return conn
