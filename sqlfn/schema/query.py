"""Pydantic models for parsed query declarations.

A compilation unit is an ordered list of :class:`Query` records.  The parser
builds them once; every model is frozen so nothing downstream can alter the
declarations it was handed.  No instance of these models survives into the
generated program.
"""
from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from sqlfn.schema.types import SUPPORTED_TYPES


class BackendKind(str, Enum):
    """Data-access target a query is generated for."""

    EMBEDDED = "sqlite"
    NETWORK = "postgres"

    @classmethod
    def from_token(cls, token: str) -> BackendKind | None:
        """Return the kind spelled ``token`` in an attribute list, or ``None``."""
        for kind in cls:
            if kind.value == token:
                return kind
        return None


class TypeRef(BaseModel):
    """A DSL type expression such as ``int`` or ``Optional[bytes]``.

    Attributes:
        name: Type name.
        args: Type arguments, in order.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    args: tuple[TypeRef, ...] = ()

    def __str__(self) -> str:
        if not self.args:
            return self.name
        return f"{self.name}[{', '.join(str(a) for a in self.args)}]"

    def annotation(self, output: bool = False) -> str:
        """Return the Python annotation for this type.

        Args:
            output: Use the output-column spelling (owned values).
        """
        info = SUPPORTED_TYPES[self.name]
        base = info.output_annotation if output else info.annotation
        if not self.args:
            return base
        return f"{base}[{', '.join(a.annotation(output) for a in self.args)}]"

    def runtime_expr(self, module_alias: str) -> str:
        """Return the expression building the runtime column type.

        Args:
            module_alias: Name under which ``sqlfn.runtime.types`` is imported
                in the generated module.
        """
        info = SUPPORTED_TYPES[self.name]
        if not self.args:
            return f"{module_alias}.{info.runtime}"
        inner = ", ".join(a.runtime_expr(module_alias) for a in self.args)
        return f"{module_alias}.{info.runtime}({inner})"

    def walk(self) -> list[TypeRef]:
        """Return this type and all nested type arguments, outermost first."""
        found = [self]
        for arg in self.args:
            found.extend(arg.walk())
        return found


class Param(BaseModel):
    """A named, typed query parameter."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    type: TypeRef


class Output(BaseModel):
    """One column of the declared output row."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: TypeRef


class Query(BaseModel):
    """A single named query declaration.

    Attributes:
        name: Identifier, unique within the compilation unit.
        kind: Backend the query is generated for.
        named_params: Network backend only: ``sql`` uses ``:name``
            placeholders that must be rewritten to ``$n``.
        params: Ordered parameters.
        outputs: Ordered output columns; empty for statements without rows.
        sql: Raw SQL text.
        test_dependencies: ``None`` when the query has no ``test``
            attribute, otherwise the queries whose setup must run first.
        line: Line of the declaration in the DSL source.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    kind: BackendKind
    named_params: bool = False
    params: tuple[Param, ...] = ()
    outputs: tuple[Output, ...] = ()
    sql: str
    test_dependencies: tuple[str, ...] | None = None
    line: int | None = None

    @property
    def param_names(self) -> list[str]:
        """Returns parameter names in declaration order."""
        return [p.name for p in self.params]

    @property
    def has_outputs(self) -> bool:
        """Whether row-shape operations are generated for this query."""
        return bool(self.outputs)

    @property
    def is_tested(self) -> bool:
        """Whether the query carries a ``test`` attribute."""
        return self.test_dependencies is not None


class CompilationUnit(BaseModel):
    """All query declarations of one DSL source.

    Attributes:
        queries: Declarations in source order.
        source_name: Where the DSL came from (file name or ``'<string>'``).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    queries: tuple[Query, ...] = ()
    source_name: str = "<string>"

    def get_query(self, name: str) -> Query | None:
        """Returns the query called ``name``, or ``None``."""
        for query in self.queries:
            if query.name == name:
                return query
        return None

    @property
    def query_names(self) -> list[str]:
        """Returns all query names in source order."""
        return [q.name for q in self.queries]

    def by_kind(self, kind: BackendKind) -> list[Query]:
        """Returns the queries generated for ``kind``, in source order."""
        return [q for q in self.queries if q.kind is kind]
