"""Semantic validation of parsed compilation units."""
from sqlfn.validate.dependency_validator import DependencyValidator
from sqlfn.validate.type_validator import TypeValidator
from sqlfn.validate.validator import RESERVED_PARAM_NAMES, UnitValidator

__all__ = [
    "DependencyValidator",
    "RESERVED_PARAM_NAMES",
    "TypeValidator",
    "UnitValidator",
]
