"""Compilation unit validation orchestrator.

``UnitValidator`` is the public entry point.  It runs the focused
sub-validators over every query and raises the first violation.

Sub-validator hierarchy
-----------------------
UnitValidator
  ├── name checks          (this module)              : uniqueness, identifiers
  ├── TypeValidator        (type_validator.py)        : supported types
  └── DependencyValidator  (dependency_validator.py)  : test dependencies
"""
from __future__ import annotations

import keyword

from sqlfn.errors import DuplicateNameError, InvalidIdentifierError
from sqlfn.schema.query import CompilationUnit, Query
from sqlfn.validate.dependency_validator import DependencyValidator
from sqlfn.validate.type_validator import TypeValidator

#: Argument names used by generated functions alongside query parameters.
RESERVED_PARAM_NAMES: frozenset[str] = frozenset(
    {"conn", "client", "stmt", "cache", "f", "self", "cls"}
)


class UnitValidator:
    """Validates a parsed :class:`CompilationUnit` before code generation.

    Raises the first violation as a subclass of
    :class:`~sqlfn.errors.ValidationError`.
    """

    def validate(self, unit: CompilationUnit) -> None:
        """Validate ``unit`` and raise on the first violation found."""
        seen: set[str] = set()
        for query in unit.queries:
            if query.name in seen:
                raise DuplicateNameError("query", query.name, query=query.name, line=query.line)
            seen.add(query.name)

        types = TypeValidator()
        dependencies = DependencyValidator(unit)
        for query in unit.queries:
            self._validate_params(query)
            types.validate(query)
            dependencies.validate(query)

    @staticmethod
    def _validate_params(query: Query) -> None:
        seen: set[str] = set()
        for name in query.param_names:
            if name in seen:
                raise DuplicateNameError("parameter", name, query=query.name, line=query.line)
            seen.add(name)
            if keyword.iskeyword(name):
                raise InvalidIdentifierError(
                    name, "parameter name is a Python keyword", query=query.name, line=query.line
                )
            if name in RESERVED_PARAM_NAMES or name.startswith("_"):
                raise InvalidIdentifierError(
                    name,
                    "parameter name is reserved for generated code",
                    query=query.name,
                    line=query.line,
                )
