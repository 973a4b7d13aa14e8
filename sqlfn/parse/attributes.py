"""Attribute list resolution.

Turns the raw ``#[...]`` list of a declaration into the three facts the
semantic model needs: the backend kind (exactly one), named-placeholder mode
(network backend only), and the optional ``test`` dependency list.  Multiple
``test`` attributes, or several ``with=[...]`` options, accumulate in order.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from sqlfn.errors import BackendKindError, UnknownAttributeError
from sqlfn.schema.query import BackendKind

NAMED_ATTR = "named"
TEST_ATTR = "test"
WITH_OPTION = "with"


@dataclass
class AttrOptionSpec:
    """A ``name=[a, b]`` option inside an attribute's parentheses."""

    name: str
    values: list[str]
    line: int


@dataclass
class AttrSpec:
    """One entry of a ``#[...]`` attribute list."""

    name: str
    line: int
    options: list[AttrOptionSpec] | None = None


@dataclass(frozen=True)
class ResolvedAttributes:
    """Attribute facts for one declaration.

    Attributes:
        kind: Backend kind.
        named_params: Whether ``named`` was given.
        test_dependencies: ``None`` without a ``test`` attribute, otherwise the
            accumulated ``with`` names.
    """

    kind: BackendKind
    named_params: bool = False
    test_dependencies: tuple[str, ...] | None = None


def _allowed_attributes() -> list[str]:
    return [k.value for k in BackendKind] + [NAMED_ATTR, TEST_ATTR]


@dataclass
class _Collector:
    kinds: list[BackendKind] = field(default_factory=list)
    named: bool = False
    tests: list[str] | None = None


class AttributeResolver:
    """Resolves raw attribute lists, raising on the first violation."""

    def resolve(self, query: str, attrs: list[AttrSpec], line: int) -> ResolvedAttributes:
        """Resolve ``attrs`` for the declaration ``query``.

        Args:
            query: Declared query name, for diagnostics.
            attrs: Raw attributes in source order.
            line: Declaration line, for diagnostics.

        Returns:
            :class:`ResolvedAttributes`.

        Raises:
            UnknownAttributeError: For an unknown attribute or ``test`` option,
                or options given to an attribute that takes none.
            BackendKindError: If the backend kind is missing or repeated, or
                ``named`` is used with the embedded backend.
        """
        collected = _Collector()
        for attr in attrs:
            self._apply(query, attr, collected)

        if not collected.kinds:
            raise BackendKindError(
                f"Query '{query}' has no backend kind. Supported: "
                f"{[k.value for k in BackendKind]}.",
                query=query,
                line=line,
            )
        if len(collected.kinds) > 1:
            raise BackendKindError(
                f"Query '{query}' declares more than one backend kind: "
                f"{[k.value for k in collected.kinds]}.",
                query=query,
                line=line,
            )

        kind = collected.kinds[0]
        if collected.named and kind is not BackendKind.NETWORK:
            raise BackendKindError(
                f"Attribute '{NAMED_ATTR}' is only supported for the "
                f"'{BackendKind.NETWORK.value}' backend (query '{query}').",
                query=query,
                line=line,
            )

        tests = tuple(collected.tests) if collected.tests is not None else None
        return ResolvedAttributes(kind=kind, named_params=collected.named, test_dependencies=tests)

    def _apply(self, query: str, attr: AttrSpec, collected: _Collector) -> None:
        kind = BackendKind.from_token(attr.name)
        if kind is not None:
            self._reject_options(query, attr)
            collected.kinds.append(kind)
        elif attr.name == NAMED_ATTR:
            self._reject_options(query, attr)
            collected.named = True
        elif attr.name == TEST_ATTR:
            if collected.tests is None:
                collected.tests = []
            for option in attr.options or []:
                if option.name != WITH_OPTION:
                    raise UnknownAttributeError(
                        f"{TEST_ATTR}({option.name})", [WITH_OPTION], query=query, line=option.line
                    )
                collected.tests.extend(option.values)
        else:
            raise UnknownAttributeError(attr.name, _allowed_attributes(), query=query, line=attr.line)

    @staticmethod
    def _reject_options(query: str, attr: AttrSpec) -> None:
        if attr.options is not None:
            raise UnknownAttributeError(
                f"{attr.name}(...)", _allowed_attributes(), query=query, line=attr.line
            )
