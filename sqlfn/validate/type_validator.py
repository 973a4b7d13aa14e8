"""Type checks: every parameter and output type must be a supported DSL type."""
from __future__ import annotations

from sqlfn.errors import UnknownTypeError
from sqlfn.schema.query import Query, TypeRef
from sqlfn.schema.types import SUPPORTED_TYPES, supported_type_names


class TypeValidator:
    """Validates the type expressions of a single query."""

    def validate(self, query: Query) -> None:
        """Raise :class:`UnknownTypeError` for the first unsupported type.

        A generic type with the wrong number of arguments, or a plain type
        given arguments, counts as unknown.
        """
        refs = [p.type for p in query.params] + [o.type for o in query.outputs]
        for ref in refs:
            for node in ref.walk():
                self._check(query, node)

    @staticmethod
    def _check(query: Query, node: TypeRef) -> None:
        info = SUPPORTED_TYPES.get(node.name)
        if info is None or info.arity != len(node.args):
            raise UnknownTypeError(
                str(node), supported_type_names(), query=query.name, line=query.line
            )
