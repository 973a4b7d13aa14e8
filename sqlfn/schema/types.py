"""Supported DSL type names.

Each entry describes how a DSL type name appears in generated code: the
annotation used for parameters, the annotation used for decoded output
columns, and the :mod:`sqlfn.runtime.types` constant (or constructor, for
generic types) that decodes and synthesizes values of that type.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TypeInfo:
    """Code-generation facts for one DSL type name.

    Attributes:
        name: The DSL spelling (e.g. ``'bytes'``, ``'Optional'``).
        annotation: Python annotation for parameters of this type.
        output_annotation: Python annotation for decoded output columns.
        runtime: Name of the runtime column type in ``sqlfn.runtime.types``.
        arity: Number of type arguments (``0`` for plain types).
    """

    name: str
    annotation: str
    output_annotation: str
    runtime: str
    arity: int = 0


SUPPORTED_TYPES: dict[str, TypeInfo] = {
    info.name: info
    for info in (
        TypeInfo("int", "int", "int", "INT"),
        TypeInfo("float", "float", "float", "FLOAT"),
        TypeInfo("bool", "bool", "bool", "BOOL"),
        TypeInfo("str", "str", "str", "STR"),
        TypeInfo("bytes", "bytes", "bytes", "BYTES"),
        # Borrowed buffer; decoded output and synthesized values are owned bytes.
        TypeInfo("memoryview", "memoryview", "bytes", "BYTES"),
        TypeInfo("Optional", "Optional", "Optional", "optional", arity=1),
    )
}


def supported_type_names() -> list[str]:
    """Return the sorted list of DSL type names."""
    return sorted(SUPPORTED_TYPES)
