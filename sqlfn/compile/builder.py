"""ModuleBuilder: turns a validated CompilationUnit into a GeneratedModule."""
from __future__ import annotations

import logging

from sqlfn.compile.base import TYPES_ALIAS, BackendGenerator, GeneratedModule
from sqlfn.compile.emitter import SourceWriter
from sqlfn.compile.registry import GeneratorFactory
from sqlfn.compile.testgen import TestSetupResolver
from sqlfn.config import GeneratorConfig
from sqlfn.schema.query import BackendKind, CompilationUnit

logger = logging.getLogger(__name__)


class ModuleBuilder:
    """Assembles one generated module.

    The module is laid out as: docstring, imports, module globals, one
    section per query in source order, then the test scaffolding.

    Args:
        config: Options for this compilation run.
    """

    def __init__(self, config: GeneratorConfig | None = None) -> None:
        self.config = config or GeneratorConfig()

    def build(self, unit: CompilationUnit) -> GeneratedModule:
        """Generate the module for ``unit``.

        Raises:
            CompilationError: If a query cannot be emitted.
            UnmatchedPlaceholderError: In strict mode, for an unknown ``:name``.
        """
        kinds = [k for k in BackendKind if unit.by_kind(k)]
        generators: dict[BackendKind, BackendGenerator] = {
            kind: GeneratorFactory.create(kind, self.config) for kind in kinds
        }
        with_tests = self.config.emit_tests and bool(TestSetupResolver.setup_targets(unit))

        w = SourceWriter()
        self._emit_header(unit, generators, with_tests, w)
        for query in unit.queries:
            generators[query.kind].emit(query, w)

        entry_points: list[str] = []
        if with_tests:
            entry_points = TestSetupResolver(generators).emit(unit, w)

        logger.info(
            "compiled %d quer%s from %s",
            len(unit.queries),
            "y" if len(unit.queries) == 1 else "ies",
            unit.source_name,
        )
        return GeneratedModule(
            source=w.render(),
            source_name=unit.source_name,
            queries=unit.query_names,
            entry_points=entry_points,
            backends=kinds,
        )

    def _emit_header(
        self,
        unit: CompilationUnit,
        generators: dict[BackendKind, BackendGenerator],
        with_tests: bool,
        w: SourceWriter,
    ) -> None:
        source = unit.source_name.replace("\\", "/")
        doc = f"Generated by sqlfn from {source}. Do not edit."
        if self.config.module_docstring:
            doc = f"{doc}\n\n{self.config.module_docstring.strip()}\n"
        w.line(f'"""{doc}"""')
        w.line("from __future__ import annotations")
        w.blank()

        rt = self.config.runtime_package
        stdlib = ["import logging"]
        third_party: list[str] = []
        local = [f"from {rt} import types as {TYPES_ALIAS}"]
        if with_tests:
            local.append(f"from {rt}.arbitrary import RAW_TEST_DATA, Unstructured")
        for generator in generators.values():
            for line in generator.imports(with_tests):
                if line.startswith("from sqlfn") or line.startswith(f"from {rt}"):
                    local.append(line)
                elif line == "import sqlite3":
                    stdlib.append(line)
                else:
                    third_party.append(line)

        stdlib.append("from collections.abc import Callable, Sequence")
        stdlib.append("from typing import Any, Optional, TypeVar")
        for group in (stdlib, third_party, local):
            if group:
                w.lines(group)
                w.blank()

        w.line("_log = logging.getLogger(__name__)")
        w.blank()
        w.line('T = TypeVar("T")')
