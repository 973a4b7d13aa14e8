"""sqlfn schema models: Query, Param, Output, TypeRef, CompilationUnit."""
from sqlfn.schema.query import (
    BackendKind,
    CompilationUnit,
    Output,
    Param,
    Query,
    TypeRef,
)
from sqlfn.schema.types import SUPPORTED_TYPES, TypeInfo, supported_type_names

__all__ = [
    "BackendKind",
    "CompilationUnit",
    "Output",
    "Param",
    "Query",
    "TypeRef",
    "SUPPORTED_TYPES",
    "TypeInfo",
    "supported_type_names",
]
