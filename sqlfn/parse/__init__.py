"""Parsing module for the query declaration DSL."""

from sqlfn.parse.attributes import AttributeResolver, ResolvedAttributes
from sqlfn.parse.lexer import QueryLexer
from sqlfn.parse.parser import DeclSpec, ParamSpec, QueryParser

__all__ = [
    "AttributeResolver",
    "DeclSpec",
    "ParamSpec",
    "QueryLexer",
    "QueryParser",
    "ResolvedAttributes",
]
