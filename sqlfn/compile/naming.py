"""Naming convention for generated identifiers.

Every generated identifier is a fixed role prefix followed by the query name,
so it can be derived from ``(role, query name)`` alone::

    >>> ident(Role.QUEUE_ONE_PREPARED, "get_pet")
    'queue_one_prepared_get_pet'
"""
from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Role of a generated identifier; the value is its prefix."""

    SQL = "SQL_"
    OUTPUTS = "OUTPUTS_"
    PREPARE = "prepare_"
    PREPARE_CACHED = "prepare_cached_"
    EXECUTE = "execute_"
    EXECUTE_PREPARED = "execute_prepared_"
    QUERY_ROW = "query_row_"
    QUEUE = "queue_"
    QUEUE_PREPARED = "queue_prepared_"
    QUEUE_ONE = "queue_one_"
    QUEUE_ONE_PREPARED = "queue_one_prepared_"
    QUEUE_OPT = "queue_opt_"
    QUEUE_OPT_PREPARED = "queue_opt_prepared_"
    FROM_ROW = "from_row_"
    STATEMENT = "Statement_"
    CACHED_STATEMENT = "CachedStatement_"
    STATEMENT_OPS = "_StatementOps_"
    TEST = "auto_"
    TEST_SETUP = "testsetup_"


def ident(role: Role, name: str) -> str:
    """Return the generated identifier for ``name`` in ``role``."""
    return f"{role.value}{name}"
