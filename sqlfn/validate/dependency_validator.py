"""Test-dependency checks.

Dependencies may be forward references and may form cycles; both are fine
because setup routines guard re-entry at run time.  What cannot work is a
dependency on a query that does not exist, or on one generated for a different
backend (its setup routine expects a different connection type).
"""
from __future__ import annotations

from sqlfn.errors import UnknownDependencyError
from sqlfn.schema.query import CompilationUnit, Query


class DependencyValidator:
    """Validates ``test(with=[...])`` lists against the whole unit."""

    def __init__(self, unit: CompilationUnit) -> None:
        self._unit = unit

    def validate(self, query: Query) -> None:
        for name in query.test_dependencies or ():
            target = self._unit.get_query(name)
            if target is None:
                raise UnknownDependencyError(
                    f"Query '{query.name}' depends on undeclared query '{name}'.",
                    dependency=name,
                    query=query.name,
                    line=query.line,
                )
            if target.kind is not query.kind:
                raise UnknownDependencyError(
                    f"Query '{query.name}' ({query.kind.value}) depends on "
                    f"'{name}' ({target.kind.value}); setup dependencies must "
                    "share a backend.",
                    dependency=name,
                    query=query.name,
                    line=query.line,
                )
