"""Code generation: per-backend generators, the test resolver and the builder.

Importing this package registers the built-in generators with
:class:`GeneratorFactory`.
"""
from sqlfn.compile.base import BackendGenerator, GeneratedModule
from sqlfn.compile.builder import ModuleBuilder
from sqlfn.compile.postgres import PostgresGenerator
from sqlfn.compile.registry import GeneratorFactory
from sqlfn.compile.rewriter import rewrite_named_placeholders
from sqlfn.compile.sqlite import SQLiteGenerator
from sqlfn.compile.testgen import TestSetupResolver

__all__ = [
    "BackendGenerator",
    "GeneratedModule",
    "GeneratorFactory",
    "ModuleBuilder",
    "PostgresGenerator",
    "SQLiteGenerator",
    "TestSetupResolver",
    "rewrite_named_placeholders",
]
