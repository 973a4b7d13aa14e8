"""SQLiteGenerator: access API for the embedded backend.

Per query the generated module gains::

    SQL_<q>                    statement text (``:name`` placeholders)
    OUTPUTS_<q>                output column types (queries with outputs)
    Statement_<q>              handle with a dedicated cursor
    CachedStatement_<q>        handle backed by the driver statement cache
    prepare_<q>(conn)          -> Statement_<q>
    prepare_cached_<q>(conn)   -> CachedStatement_<q>
    execute_<q>(conn, ...)     -> changed-row count
    query_row_<q>(conn, ..., f)  first row mapped through f (with outputs)

Both handle classes share the typed operations of ``_StatementOps_<q>``:
``execute`` always, plus ``query_map``, ``query_row`` and ``query`` when the
query declares outputs.
"""
from __future__ import annotations

from sqlfn.compile.base import BackendGenerator
from sqlfn.compile.emitter import SourceWriter
from sqlfn.compile.naming import Role, ident
from sqlfn.compile.registry import GeneratorFactory
from sqlfn.schema.query import BackendKind, Query

#: Alias of ``sqlfn.runtime.sqlite`` inside generated modules.
RUNTIME_ALIAS = "_sqlite"


@GeneratorFactory.register(BackendKind.EMBEDDED)
class SQLiteGenerator(BackendGenerator):
    """Generator for queries flagged ``sqlite``."""

    @property
    def kind(self) -> BackendKind:
        return BackendKind.EMBEDDED

    @property
    def connection_arg(self) -> str:
        return "conn"

    @property
    def connection_annotation(self) -> str:
        return "sqlite3.Connection"

    @property
    def driver_error(self) -> str:
        return "sqlite3.Error"

    @property
    def tolerated_setup_errors(self) -> list[str]:
        # Setup runs every tested statement through execute_, including
        # SELECTs; a result set there is expected, not a failure.
        return ["ExecuteReturnedRowsError"]

    def imports(self, with_tests: bool) -> list[str]:
        rt = self.config.runtime_package
        lines = ["import sqlite3", f"from {rt} import sqlite as {RUNTIME_ALIAS}"]
        if with_tests:
            lines.append("from sqlfn.errors import ExecuteReturnedRowsError")
        return lines

    # ------------------------------------------------------------------
    # Access API
    # ------------------------------------------------------------------

    def emit_operations(self, query: Query, sql_name: str, w: SourceWriter) -> None:
        self._emit_statement_classes(query, w)
        self._emit_functions(query, sql_name, w)

    def _emit_statement_classes(self, query: Query, w: SourceWriter) -> None:
        ops = ident(Role.STATEMENT_OPS, query.name)
        decls = self.param_decls(query)
        mapping = self.param_mapping(query)

        w.blank(2)
        with w.block(f"class {ops}:"):
            w.docstring(f"Typed operations of ``{query.name}``.")
            if query.has_outputs:
                w.blank()
                w.line(f"_outputs = {ident(Role.OUTPUTS, query.name)}")
                mapper = self.mapper_annotation(query)
                row = self.row_annotation(query)

                w.blank()
                with w.block(
                    f"def query_map(self{decls}, f: {mapper}) -> {RUNTIME_ALIAS}.Rows[T]:"
                ):
                    w.line(f"return self._query_map({mapping}, f)")
                w.blank()
                with w.block(f"def query_row(self{decls}, f: {mapper}) -> T:"):
                    w.line(f"return self._query_row({mapping}, f)")
                w.blank()
                with w.block(f"def query(self{decls}) -> {RUNTIME_ALIAS}.Rows[{row}]:"):
                    w.line(f"return self._query({mapping})")
            w.blank()
            with w.block(f"def execute(self{decls}) -> int:"):
                w.line(f"return self._execute({mapping})")

        for role, base in (
            (Role.STATEMENT, "Statement"),
            (Role.CACHED_STATEMENT, "CachedStatement"),
        ):
            w.blank(2)
            with w.block(f"class {ident(role, query.name)}({ops}, {RUNTIME_ALIAS}.{base}):"):
                w.docstring(f"{base} handle for ``{query.name}``.")

    def _emit_functions(self, query: Query, sql_name: str, w: SourceWriter) -> None:
        name = query.name
        conn = f"conn: {self.connection_annotation}"
        decls = self.param_decls(query)
        mapping = self.param_mapping(query)

        for role, handle in (
            (Role.PREPARE, Role.STATEMENT),
            (Role.PREPARE_CACHED, Role.CACHED_STATEMENT),
        ):
            handle_cls = ident(handle, name)
            w.blank(2)
            with w.block(f"def {ident(role, name)}({conn}) -> {handle_cls}:"):
                w.line(f"return {handle_cls}(conn, {sql_name})")

        w.blank(2)
        with w.block(f"def {ident(Role.EXECUTE, name)}({conn}{decls}) -> int:"):
            w.docstring(f"Run ``{name}`` and return the number of changed rows.")
            w.line(f"return {RUNTIME_ALIAS}.execute(conn, {sql_name}, {mapping})")

        if query.has_outputs:
            mapper = self.mapper_annotation(query)
            outputs = ident(Role.OUTPUTS, name)
            w.blank(2)
            with w.block(f"def {ident(Role.QUERY_ROW, name)}({conn}{decls}, f: {mapper}) -> T:"):
                w.docstring(f"Return the first row of ``{name}`` mapped through ``f``.")
                w.line(
                    f"return {RUNTIME_ALIAS}.query_row(conn, {sql_name}, {mapping}, {outputs}, f)"
                )

    # ------------------------------------------------------------------
    # Test hooks
    # ------------------------------------------------------------------

    def emit_entry_point_body(self, setup_call: str, w: SourceWriter) -> None:
        w.line('conn = sqlite3.connect(":memory:")')
        with w.block("try:"):
            w.line(setup_call.format(conn="conn"))
        with w.block("finally:"):
            w.line("conn.close()")
