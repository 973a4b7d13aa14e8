"""sqlfn: typed Python access functions compiled from named SQL queries.

Public API
----------
``compile_source``
    Parse, validate and generate a module from DSL text.

``compile_file``
    Same, reading the DSL from a file.

Re-exported types
-----------------
``CompilationUnit``, ``Query``, ``GeneratedModule``, ``GeneratorConfig``,
and all error classes.

Extensibility
-------------
New backends can be registered via::

    from sqlfn.compile.registry import GeneratorFactory

    @GeneratorFactory.register(BackendKind.NETWORK)
    class MyPostgresGenerator(PostgresGenerator):
        ...

After registration, ``compile_source`` uses it for every query of that kind.
"""

from __future__ import annotations

import logging
from pathlib import Path

from sqlfn.compile.base import BackendGenerator, GeneratedModule
from sqlfn.compile.builder import ModuleBuilder
from sqlfn.compile.postgres import PostgresGenerator
from sqlfn.compile.registry import GeneratorFactory
from sqlfn.compile.rewriter import rewrite_named_placeholders
from sqlfn.compile.sqlite import SQLiteGenerator
from sqlfn.config import GeneratorConfig, PostgresTestSettings
from sqlfn.errors import (
    BackendKindError,
    CompilationError,
    ConfigError,
    DecodeError,
    DuplicateNameError,
    ExecuteReturnedRowsError,
    InvalidIdentifierError,
    NoRowsError,
    ParseError,
    QueryResultError,
    SqlFnError,
    TooManyRowsError,
    UnknownAttributeError,
    UnknownDependencyError,
    UnknownTypeError,
    UnmatchedPlaceholderError,
    ValidationError,
)
from sqlfn.parse.parser import QueryParser
from sqlfn.schema.query import BackendKind, CompilationUnit, Output, Param, Query, TypeRef
from sqlfn.validate.validator import UnitValidator

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Register built-in generators with GeneratorFactory
# ---------------------------------------------------------------------------

GeneratorFactory.register_class(BackendKind.EMBEDDED, SQLiteGenerator)
GeneratorFactory.register_class(BackendKind.NETWORK, PostgresGenerator)

__all__ = [
    # Core pipeline
    "compile_source",
    "compile_file",
    "parse_source",
    # Schema types
    "BackendKind",
    "CompilationUnit",
    "Query",
    "Param",
    "Output",
    "TypeRef",
    # Generation
    "BackendGenerator",
    "GeneratedModule",
    "GeneratorConfig",
    "GeneratorFactory",
    "ModuleBuilder",
    "PostgresGenerator",
    "SQLiteGenerator",
    "rewrite_named_placeholders",
    # Runtime configuration
    "PostgresTestSettings",
    # Errors
    "SqlFnError",
    "ParseError",
    "ValidationError",
    "UnknownAttributeError",
    "BackendKindError",
    "DuplicateNameError",
    "UnknownTypeError",
    "UnknownDependencyError",
    "InvalidIdentifierError",
    "UnmatchedPlaceholderError",
    "CompilationError",
    "ConfigError",
    "QueryResultError",
    "NoRowsError",
    "TooManyRowsError",
    "DecodeError",
    "ExecuteReturnedRowsError",
]


def parse_source(text: str, source_name: str = "<string>") -> CompilationUnit:
    """Parse and validate DSL text without generating code.

    Raises:
        ParseError: On a syntax error.
        ValidationError: (or subclass) on a semantic error.
    """
    unit = QueryParser().parse(text, source_name=source_name)
    UnitValidator().validate(unit)
    return unit


def compile_source(
    text: str,
    config: GeneratorConfig | None = None,
    source_name: str = "<string>",
) -> GeneratedModule:
    """Parse, validate and generate the access module for DSL ``text``.

    This is the main entry point::

        generated = sqlfn.compile_source(dsl_text)
        queries = generated.load("queries")
        conn = sqlite3.connect(":memory:")
        queries.execute_create_pet_table(conn)

    Args:
        text: Query declarations.
        config: Generation options; defaults to ``GeneratorConfig()``.
        source_name: Label used in diagnostics and the generated docstring.

    Returns:
        The generated module.

    Raises:
        ParseError: On a syntax error.
        ValidationError: (or subclass) on a semantic error.
        CompilationError: If generation fails.
    """
    # 1. Parse and validate
    unit = parse_source(text, source_name=source_name)

    # 2. Generate - backend resolved per query via GeneratorFactory
    return ModuleBuilder(config).build(unit)


def compile_file(path: str | Path, config: GeneratorConfig | None = None) -> GeneratedModule:
    """Compile the DSL file at ``path``; see :func:`compile_source`."""
    source = Path(path)
    logger.debug("reading %s", source)
    return compile_source(source.read_text(encoding="utf-8"), config, source_name=source.name)
