"""Test resolver: setup routines, entry points and the ``AUTO_TESTS`` registry.

For every query flagged ``test`` and every query named in some ``with`` list,
a setup routine is generated::

    def testsetup_<q>(u, visited, conn):
        if "<q>" in visited:
            return
        visited.add("<q>")
        testsetup_<dep>(u, visited, conn)    # each dependency, in order
        execute_<q>(conn, u.arbitrary(...), ...)

The name is added to ``visited`` before the dependencies run, so a diamond
runs its shared root once and a dependency cycle terminates.  Every query
flagged ``test`` also gets a zero-argument ``auto_<q>`` entry point that opens
a fresh connection and calls its setup routine with a new ``visited`` set and
an :class:`~sqlfn.runtime.arbitrary.Unstructured` source over
``RAW_TEST_DATA``.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping

from sqlfn.compile.base import BackendGenerator
from sqlfn.compile.emitter import SourceWriter
from sqlfn.compile.naming import Role, ident
from sqlfn.errors import CompilationError
from sqlfn.runtime.testing import REGISTRY_NAME
from sqlfn.schema.query import BackendKind, CompilationUnit, Query

logger = logging.getLogger(__name__)


class TestSetupResolver:
    """Emits the test scaffolding of a compilation unit.

    Args:
        generators: The generator of every backend kind present in the unit.
    """

    __test__ = False

    def __init__(self, generators: Mapping[BackendKind, BackendGenerator]) -> None:
        self._generators = generators

    @staticmethod
    def setup_targets(unit: CompilationUnit) -> list[Query]:
        """Return the queries that need a setup routine, in source order."""
        referenced: set[str] = set()
        for query in unit.queries:
            referenced.update(query.test_dependencies or ())
        return [q for q in unit.queries if q.is_tested or q.name in referenced]

    def emit(self, unit: CompilationUnit, w: SourceWriter) -> list[str]:
        """Emit setup routines, entry points and the registry.

        Returns:
            Names of the generated entry points, in source order.
        """
        targets = self.setup_targets(unit)
        tested = [q for q in unit.queries if q.is_tested]
        if not targets:
            return []

        BackendGenerator.emit_banner("test setup", w)
        for query in targets:
            self._emit_setup(unit, query, w)

        entry_points: list[str] = []
        BackendGenerator.emit_banner("test entry points", w)
        for query in tested:
            entry_points.append(self._emit_entry_point(query, w))

        w.blank(2)
        with w.block(f"{REGISTRY_NAME}: dict[str, Callable[[], None]] = {{"):
            for name in entry_points:
                w.line(f'"{name}": {name},')
        w.line("}")

        logger.info("generated %d setup routine(s), %d entry point(s)", len(targets), len(tested))
        return entry_points

    def _generator(self, query: Query) -> BackendGenerator:
        generator = self._generators.get(query.kind)
        if generator is None:
            raise CompilationError(f"No generator for backend '{query.kind.value}'.", query=query.name)
        return generator

    def _emit_setup(self, unit: CompilationUnit, query: Query, w: SourceWriter) -> None:
        gen = self._generator(query)
        conn = gen.connection_arg
        name = query.name
        args = gen.synthesized_args(query, "u")
        call_args = f"{conn}, {args}" if args else conn

        w.blank(2)
        with w.block(
            f"def {ident(Role.TEST_SETUP, name)}("
            f"u: Unstructured, visited: set[str], {conn}: {gen.connection_annotation}) -> None:"
        ):
            with w.block(f'if "{name}" in visited:'):
                w.line("return")
            w.line(f'visited.add("{name}")')
            for dep in query.test_dependencies or ():
                if unit.get_query(dep) is None:
                    raise CompilationError(f"Unknown test dependency '{dep}'.", query=name)
                w.line(f"{ident(Role.TEST_SETUP, dep)}(u, visited, {conn})")
            with w.block("try:"):
                w.line(f"{ident(Role.EXECUTE, name)}({call_args})")
            for error in gen.tolerated_setup_errors:
                with w.block(f"except {error}:"):
                    w.line(f'_log.debug("setup of %s returned rows", "{name}")')
            with w.block(f"except {gen.driver_error} as exc:"):
                w.line(f'_log.error("setup of %s failed: %s", "{name}", exc)')
                w.line("raise")

    def _emit_entry_point(self, query: Query, w: SourceWriter) -> str:
        gen = self._generator(query)
        entry = ident(Role.TEST, query.name)
        setup_call = f"{ident(Role.TEST_SETUP, query.name)}(Unstructured(RAW_TEST_DATA), set(), {{conn}})"

        w.blank(2)
        with w.block(f"def {entry}() -> None:"):
            w.docstring(f"Run the setup of ``{query.name}`` against a fresh connection.")
            gen.emit_entry_point_body(setup_call, w)
        return entry
