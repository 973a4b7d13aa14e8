"""Generator abstractions: GeneratedModule and the BackendGenerator ABC.

The Template Method pattern is used:

- ``BackendGenerator`` defines the per-query emission skeleton (section
  banner, constants, backend operations) and the shared rendering helpers
  (parameter lists, annotations, literals).
- ``SQLiteGenerator`` and ``PostgresGenerator`` override the backend-specific
  steps: imports, the operation set, how SQL text is prepared, and the hooks
  the test resolver needs (connection type, driver error, entry-point body).
"""
from __future__ import annotations

import importlib.abc
import importlib.util
import logging
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from types import CodeType, ModuleType

from sqlfn.compile.emitter import SourceWriter
from sqlfn.compile.naming import Role, ident
from sqlfn.config import GeneratorConfig
from sqlfn.schema.query import BackendKind, Query

logger = logging.getLogger(__name__)

#: Alias of ``sqlfn.runtime.types`` inside generated modules.
TYPES_ALIAS = "_t"


class _SourceLoader(importlib.abc.InspectLoader):
    """Loader that serves one generated module from memory."""

    def __init__(self, source: str, origin: str) -> None:
        self.source = source
        self.origin = origin

    def get_source(self, fullname: str) -> str:
        return self.source

    def get_code(self, fullname: str) -> CodeType:
        return compile(self.source, self.origin, "exec")

    def is_package(self, fullname: str) -> bool:
        return False


@dataclass
class GeneratedModule:
    """The output of a successful compilation.

    Attributes:
        source: Python source text of the generated module.
        source_name: Where the DSL came from.
        queries: Names of the queries emitted, in source order.
        entry_points: Names of the generated test entry points.
        backends: Backend kinds present in the module.
    """

    source: str
    source_name: str = "<string>"
    queries: list[str] = field(default_factory=list)
    entry_points: list[str] = field(default_factory=list)
    backends: list[BackendKind] = field(default_factory=list)

    def load(self, module_name: str = "sqlfn_generated", register: bool = False) -> ModuleType:
        """Import the source as a fresh module object.

        The module is built through :mod:`importlib` with an in-memory loader,
        so it carries ``__spec__`` and a ``__loader__`` whose ``get_source``
        returns the generated text.

        Args:
            module_name: ``__name__`` of the new module.
            register: Also insert the module into ``sys.modules``.  It is
                removed again if executing the source fails.

        Returns:
            The populated module.
        """
        loader = _SourceLoader(self.source, f"<sqlfn:{self.source_name}>")
        spec = importlib.util.spec_from_loader(module_name, loader, origin=loader.origin)
        module = importlib.util.module_from_spec(spec)
        module.__file__ = loader.origin
        if register:
            sys.modules[module_name] = module
        try:
            loader.exec_module(module)
        except BaseException:
            if register:
                sys.modules.pop(module_name, None)
            raise
        return module

    def write(self, path: str | Path) -> Path:
        """Write the source to ``path`` and return it."""
        target = Path(path)
        target.write_text(self.source, encoding="utf-8")
        return target


class BackendGenerator(ABC):
    """Abstract base for per-backend code generators.

    Args:
        config: Options for this compilation run.
    """

    def __init__(self, config: GeneratorConfig | None = None) -> None:
        self.config = config or GeneratorConfig()

    # ------------------------------------------------------------------
    # Backend-specific steps
    # ------------------------------------------------------------------

    @property
    @abstractmethod
    def kind(self) -> BackendKind:
        """The backend kind this generator emits code for."""

    @property
    @abstractmethod
    def connection_arg(self) -> str:
        """Name of the connection argument of generated functions."""

    @property
    @abstractmethod
    def connection_annotation(self) -> str:
        """Annotation of the connection argument."""

    @property
    @abstractmethod
    def driver_error(self) -> str:
        """Expression naming the driver's base exception class."""

    @property
    def tolerated_setup_errors(self) -> list[str]:
        """Exception classes test setup treats as non-fatal."""
        return []

    @abstractmethod
    def imports(self, with_tests: bool) -> list[str]:
        """Return the import lines the generated code needs."""

    @abstractmethod
    def emit_operations(self, query: Query, sql_name: str, w: SourceWriter) -> None:
        """Emit the access API of ``query``."""

    @abstractmethod
    def emit_entry_point_body(self, setup_call: str, w: SourceWriter) -> None:
        """Emit the body of a test entry point.

        ``setup_call`` is a format string with a ``{conn}`` field for the
        connection expression.
        """

    def sql_text(self, query: Query) -> str:
        """Return the SQL text to embed for ``query``."""
        return query.sql

    # ------------------------------------------------------------------
    # Template method
    # ------------------------------------------------------------------

    def emit(self, query: Query, w: SourceWriter) -> None:
        """Emit everything generated for ``query``."""
        logger.debug("emitting %s query %s", self.kind.value, query.name)
        self.emit_banner(query.name, w)

        sql_name = ident(Role.SQL, query.name)
        w.line(f"{sql_name} = {self.literal(self.sql_text(query))}")
        if query.has_outputs:
            w.line(f"{ident(Role.OUTPUTS, query.name)} = {self.outputs_tuple(query)}")
        self.emit_operations(query, sql_name, w)

    # ------------------------------------------------------------------
    # Shared rendering helpers
    # ------------------------------------------------------------------

    @staticmethod
    def emit_banner(title: str, w: SourceWriter) -> None:
        w.blank(2)
        w.line("# " + "-" * 75)
        w.line(f"# {title}")
        w.line("# " + "-" * 75)
        w.blank()

    @staticmethod
    def literal(text: str) -> str:
        """Return a Python literal for ``text``."""
        return repr(text)

    @staticmethod
    def param_decls(query: Query) -> str:
        """Return ``", a: int, b: str"`` (empty when there are no params)."""
        return "".join(f", {p.name}: {p.type.annotation()}" for p in query.params)

    @staticmethod
    def param_tuple(query: Query) -> str:
        """Return the positional parameter tuple expression."""
        names = query.param_names
        if not names:
            return "()"
        if len(names) == 1:
            return f"({names[0]},)"
        return f"({', '.join(names)})"

    @staticmethod
    def param_mapping(query: Query) -> str:
        """Return the named parameter mapping expression."""
        return "{" + ", ".join(f'"{n}": {n}' for n in query.param_names) + "}"

    @staticmethod
    def output_annotations(query: Query) -> list[str]:
        return [o.type.annotation(output=True) for o in query.outputs]

    def row_annotation(self, query: Query) -> str:
        """Return the annotation of one decoded output row."""
        return f"tuple[{', '.join(self.output_annotations(query))}]"

    def mapper_annotation(self, query: Query) -> str:
        """Return the annotation of a row-mapping callable."""
        return f"Callable[[{', '.join(self.output_annotations(query))}], T]"

    def outputs_tuple(self, query: Query) -> str:
        """Return the runtime column-type tuple expression."""
        exprs = [o.type.runtime_expr(TYPES_ALIAS) for o in query.outputs]
        if len(exprs) == 1:
            return f"({exprs[0]},)"
        return f"({', '.join(exprs)})"

    def synthesized_args(self, query: Query, source: str) -> str:
        """Return the argument list synthesizing every parameter from ``source``."""
        return ", ".join(
            f"{source}.arbitrary({p.type.runtime_expr(TYPES_ALIAS)})" for p in query.params
        )
