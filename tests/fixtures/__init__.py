"""Test fixtures: sample query declaration units."""

from __future__ import annotations

from pathlib import Path

_FIXTURES_DIR = Path(__file__).parent


def dsl_path(name: str) -> Path:
    """Return the path of the fixture unit ``<name>.sqlfn``."""
    return _FIXTURES_DIR / f"{name}.sqlfn"


def load_dsl(name: str) -> str:
    """Return the DSL text of the fixture unit ``<name>.sqlfn``.

    Args:
        name: ``'pets'`` (SQLite), ``'pets_pg'`` (PostgreSQL), ``'diamond'``,
            ``'cycle'`` or ``'cycle_log'``.
    """
    return dsl_path(name).read_text()
