"""PostgresGenerator: access API for the network backend.

Every generated function takes a
:class:`~sqlfn.runtime.client.GenericClient` first, so it works equally on a
direct connection and inside a transaction.  Per query::

    prepare_<q>(client)                     -> PreparedStatement
    prepare_cached_<q>(client, cache)       -> PreparedStatement
    execute_<q>(client, ...)                -> affected-row count
    execute_prepared_<q>(client, stmt, ...) -> affected-row count

and, when the query declares outputs::

    from_row_<q>(row)                        decode one row
    queue_<q> / queue_prepared_<q>           all rows
    queue_one_<q> / queue_one_prepared_<q>   exactly one row
    queue_opt_<q> / queue_opt_prepared_<q>   zero or one row

Queries flagged ``named`` have their ``:name`` placeholders rewritten to
``$n`` before the SQL text is embedded.
"""
from __future__ import annotations

import logging

from sqlfn.compile.base import BackendGenerator
from sqlfn.compile.emitter import SourceWriter
from sqlfn.compile.naming import Role, ident
from sqlfn.compile.registry import GeneratorFactory
from sqlfn.compile.rewriter import rewrite_named_placeholders
from sqlfn.schema.query import BackendKind, Query

logger = logging.getLogger(__name__)

#: Alias of ``sqlfn.runtime.results`` inside generated modules.
RESULTS_ALIAS = "_res"
#: Alias of ``sqlfn.runtime.postgres`` inside generated modules.
DRIVER_ALIAS = "_pg"


@GeneratorFactory.register(BackendKind.NETWORK)
class PostgresGenerator(BackendGenerator):
    """Generator for queries flagged ``postgres``."""

    @property
    def kind(self) -> BackendKind:
        return BackendKind.NETWORK

    @property
    def connection_arg(self) -> str:
        return "client"

    @property
    def connection_annotation(self) -> str:
        return "GenericClient"

    @property
    def driver_error(self) -> str:
        return "psycopg.Error"

    def imports(self, with_tests: bool) -> list[str]:
        rt = self.config.runtime_package
        lines = [
            f"from {rt} import results as {RESULTS_ALIAS}",
            f"from {rt}.cache import Cache",
            f"from {rt}.client import GenericClient, PreparedStatement",
        ]
        if with_tests:
            lines = ["import psycopg", *lines, f"from {rt} import postgres as {DRIVER_ALIAS}"]
        return lines

    def sql_text(self, query: Query) -> str:
        if not query.named_params:
            return query.sql
        rewritten = rewrite_named_placeholders(
            query.sql,
            query.param_names,
            strict=self.config.strict_placeholders,
            query=query.name,
        )
        logger.debug("rewrote named placeholders of %s: %s", query.name, rewritten)
        return rewritten

    # ------------------------------------------------------------------
    # Access API
    # ------------------------------------------------------------------

    def emit_operations(self, query: Query, sql_name: str, w: SourceWriter) -> None:
        name = query.name
        client = f"client: {self.connection_annotation}"
        stmt = "stmt: PreparedStatement"
        decls = self.param_decls(query)
        params = self.param_tuple(query)

        if query.has_outputs:
            w.blank(2)
            with w.block(
                f"def {ident(Role.FROM_ROW, name)}(row: Sequence[Any]) -> {self.row_annotation(query)}:"
            ):
                w.docstring(f"Decode one result row of ``{name}``.")
                w.line(f"return _t.decode_row(row, {ident(Role.OUTPUTS, name)})")

        w.blank(2)
        with w.block(f"def {ident(Role.PREPARE, name)}({client}) -> PreparedStatement:"):
            w.line(f"return client.prepare({sql_name})")

        w.blank(2)
        with w.block(
            f"def {ident(Role.PREPARE_CACHED, name)}({client}, cache: Cache) -> PreparedStatement:"
        ):
            w.line(f"return cache.prepare({sql_name}, client)")

        w.blank(2)
        with w.block(f"def {ident(Role.EXECUTE, name)}({client}{decls}) -> int:"):
            w.docstring(f"Run ``{name}`` and return the number of affected rows.")
            w.line(f"return client.execute({sql_name}, {params})")

        w.blank(2)
        with w.block(f"def {ident(Role.EXECUTE_PREPARED, name)}({client}, {stmt}{decls}) -> int:"):
            w.line(f"return client.execute(stmt, {params})")

        if query.has_outputs:
            self._emit_queue_family(query, sql_name, w)

    def _emit_queue_family(self, query: Query, sql_name: str, w: SourceWriter) -> None:
        name = query.name
        client = f"client: {self.connection_annotation}"
        decls = self.param_decls(query)
        params = self.param_tuple(query)
        row = self.row_annotation(query)
        from_row = ident(Role.FROM_ROW, name)

        variants = (
            (Role.QUEUE, Role.QUEUE_ONE, Role.QUEUE_OPT, "", sql_name),
            (
                Role.QUEUE_PREPARED,
                Role.QUEUE_ONE_PREPARED,
                Role.QUEUE_OPT_PREPARED,
                ", stmt: PreparedStatement",
                "stmt",
            ),
        )
        for many, one, opt, stmt_decl, target in variants:
            head = f"({client}{stmt_decl}{decls})"
            rows = f"client.query({target}, {params})"
            sql_ref = sql_name if target == sql_name else "stmt.sql"

            w.blank(2)
            with w.block(f"def {ident(many, name)}{head} -> list[{row}]:"):
                w.line(f"return [{from_row}(r) for r in {rows}]")

            w.blank(2)
            with w.block(f"def {ident(one, name)}{head} -> {row}:"):
                w.line(f"return {from_row}({RESULTS_ALIAS}.expect_one({rows}, {sql_ref}))")

            w.blank(2)
            with w.block(f"def {ident(opt, name)}{head} -> Optional[{row}]:"):
                w.line(f"row = {RESULTS_ALIAS}.expect_opt({rows}, {sql_ref})")
                w.line(f"return None if row is None else {from_row}(row)")

    # ------------------------------------------------------------------
    # Test hooks
    # ------------------------------------------------------------------

    def emit_entry_point_body(self, setup_call: str, w: SourceWriter) -> None:
        with w.block(f"with {DRIVER_ALIAS}.testing_client() as client:"):
            w.line('client.execute("SET search_path TO pg_temp")')
            w.line(setup_call.format(conn="client"))
