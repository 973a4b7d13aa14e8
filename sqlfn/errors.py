"""Custom exception hierarchy for sqlfn.

All public errors inherit from :class:`SqlFnError` so callers can catch the
base class for any sqlfn-specific failure.

Compile-time errors (:class:`ParseError`, :class:`ValidationError` and its
subclasses, :class:`CompilationError`) abort the whole compilation unit.
Runtime errors raised by generated code derive from :class:`QueryResultError`;
driver errors (``sqlite3.Error``, ``psycopg.Error``) are never wrapped.
"""
from __future__ import annotations

from typing import Any


class SqlFnError(Exception):
    """Base exception for all sqlfn errors."""


# ---------------------------------------------------------------------------
# Compile-time errors
# ---------------------------------------------------------------------------


class ParseError(SqlFnError):
    """Raised when the DSL text is syntactically malformed.

    Args:
        message: Human-readable description.
        line: 1-based line of the offending token, if known.
        column: 1-based column of the offending token, if known.
    """

    def __init__(
        self,
        message: str,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        if line is not None:
            where = f"line {line}" if column is None else f"line {line}, column {column}"
            message = f"{message} ({where})"
        super().__init__(message)
        self.line = line
        self.column = column


class ValidationError(SqlFnError):
    """Raised when a declaration is well-formed but semantically invalid.

    Args:
        message: Human-readable description.
        code: Machine-readable error code (e.g. ``UNKNOWN_ATTRIBUTE``).
        query: Name of the offending query, if any.
        line: Declaration line of the offending query, if known.
        details: Extra context.
    """

    def __init__(
        self,
        message: str,
        code: str,
        query: str | None = None,
        line: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        if line is not None:
            message = f"{message} (line {line})"
        super().__init__(message)
        self.code = code
        self.query = query
        self.line = line
        self.details: dict[str, Any] = details or {}

    def to_error_response(self) -> dict[str, Any]:
        """Returns a structured error description."""
        return {
            "error": self.code,
            "message": str(self),
            "query": self.query,
            "details": self.details,
        }


class UnknownAttributeError(ValidationError):
    """Raised for an attribute (or ``test`` option) sqlfn does not know."""

    def __init__(
        self, attribute: str, allowed: list[str], query: str | None = None, line: int | None = None
    ) -> None:
        super().__init__(
            f"Unknown attribute '{attribute}'. Supported: {allowed}.",
            code="UNKNOWN_ATTRIBUTE",
            query=query,
            line=line,
            details={"attribute": attribute, "allowed": allowed},
        )


class BackendKindError(ValidationError):
    """Raised when the backend kind is missing, repeated, or misused."""

    def __init__(self, message: str, query: str | None = None, line: int | None = None) -> None:
        super().__init__(message, code="BACKEND_KIND", query=query, line=line)


class DuplicateNameError(ValidationError):
    """Raised when a query or parameter name is declared twice."""

    def __init__(
        self, kind: str, name: str, query: str | None = None, line: int | None = None
    ) -> None:
        super().__init__(
            f"Duplicate {kind} name '{name}'.",
            code="DUPLICATE_NAME",
            query=query,
            line=line,
            details={"kind": kind, "name": name},
        )


class UnknownTypeError(ValidationError):
    """Raised when a parameter or output uses an unsupported type."""

    def __init__(
        self, type_name: str, supported: list[str], query: str | None = None, line: int | None = None
    ) -> None:
        super().__init__(
            f"Unknown type '{type_name}'. Supported: {supported}.",
            code="UNKNOWN_TYPE",
            query=query,
            line=line,
            details={"type": type_name, "supported": supported},
        )


class UnknownDependencyError(ValidationError):
    """Raised when ``test(with=[...])`` names a query that cannot be set up."""

    def __init__(
        self, message: str, dependency: str, query: str | None = None, line: int | None = None
    ) -> None:
        super().__init__(
            message,
            code="UNKNOWN_DEPENDENCY",
            query=query,
            line=line,
            details={"dependency": dependency},
        )


class InvalidIdentifierError(ValidationError):
    """Raised when a name cannot be used as a Python identifier in generated code."""

    def __init__(self, name: str, reason: str, query: str | None = None, line: int | None = None) -> None:
        super().__init__(
            f"'{name}' cannot be used here: {reason}.",
            code="INVALID_IDENTIFIER",
            query=query,
            line=line,
            details={"name": name},
        )


class UnmatchedPlaceholderError(ValidationError):
    """Raised in strict mode when ``:name`` matches no declared parameter."""

    def __init__(self, placeholder: str, params: list[str], query: str | None = None) -> None:
        super().__init__(
            f"Placeholder ':{placeholder}' does not match any declared parameter {params}.",
            code="UNMATCHED_PLACEHOLDER",
            query=query,
            details={"placeholder": placeholder, "params": params},
        )


class CompilationError(SqlFnError):
    """Raised when code generation fails for an unexpected reason.

    Args:
        message: Human-readable description.
        query: The query being emitted when the error occurred.
    """

    def __init__(self, message: str, query: str | None = None) -> None:
        super().__init__(message)
        self.query = query


class ConfigError(SqlFnError):
    """Raised when required environment configuration is missing."""


# ---------------------------------------------------------------------------
# Runtime errors raised by generated code
# ---------------------------------------------------------------------------


class QueryResultError(SqlFnError):
    """Base class for result-shape failures of generated operations."""


class NoRowsError(QueryResultError):
    """Raised when a single-row operation finds no row."""

    def __init__(self, sql: str | None = None) -> None:
        super().__init__("Query returned no rows.")
        self.sql = sql


class TooManyRowsError(QueryResultError):
    """Raised when an at-most-one-row operation finds more than one row."""

    def __init__(self, count: int, sql: str | None = None) -> None:
        super().__init__(f"Query returned {count} rows, expected at most one.")
        self.count = count
        self.sql = sql


class DecodeError(QueryResultError):
    """Raised when a column value does not match its declared output type.

    Args:
        column: 0-based column index.
        expected: The declared type, as written in the DSL.
        value: The offending value.
        reason: Overrides the default description.
    """

    def __init__(self, column: int, expected: str, value: Any, reason: str | None = None) -> None:
        reason = reason or f"cannot decode {type(value).__name__} value {value!r} as {expected}"
        super().__init__(f"Column {column}: {reason}.")
        self.column = column
        self.expected = expected
        self.value = value


class ExecuteReturnedRowsError(QueryResultError):
    """Raised when an ``execute`` operation runs a statement that produced rows."""

    def __init__(self, sql: str | None = None) -> None:
        super().__init__("Execute returned results; use a query operation instead.")
        self.sql = sql
