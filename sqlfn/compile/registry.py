"""Generator registry (Open/Closed Principle).

``GeneratorFactory`` maps backend kinds to
:class:`~sqlfn.compile.base.BackendGenerator` classes, so the module builder
never branches on the backend kind itself.

Usage::

    from sqlfn.compile.registry import GeneratorFactory

    @GeneratorFactory.register(BackendKind.EMBEDDED)
    class SQLiteGenerator(BackendGenerator):
        ...
"""
from __future__ import annotations

from collections.abc import Callable
from typing import ClassVar

from sqlfn.compile.base import BackendGenerator
from sqlfn.config import GeneratorConfig
from sqlfn.errors import CompilationError
from sqlfn.schema.query import BackendKind


class GeneratorFactory:
    """Registry mapping backend kinds to :class:`BackendGenerator` classes."""

    _generators: ClassVar[dict[BackendKind, type[BackendGenerator]]] = {}

    @classmethod
    def register(
        cls, kind: BackendKind
    ) -> Callable[[type[BackendGenerator]], type[BackendGenerator]]:
        """Decorator that registers a generator class for ``kind``."""

        def decorator(generator_cls: type[BackendGenerator]) -> type[BackendGenerator]:
            cls._generators[kind] = generator_cls
            return generator_cls

        return decorator

    @classmethod
    def register_class(cls, kind: BackendKind, generator_cls: type[BackendGenerator]) -> None:
        """Register a generator class without using the decorator form."""
        cls._generators[kind] = generator_cls

    @classmethod
    def create(cls, kind: BackendKind, config: GeneratorConfig | None = None) -> BackendGenerator:
        """Instantiate the generator registered for ``kind``.

        Raises:
            CompilationError: If no generator is registered for ``kind``.
        """
        generator_cls = cls._generators.get(kind)
        if generator_cls is None:
            registered = cls.registered_kinds()
            raise CompilationError(
                f"Unsupported backend kind: '{kind.value}'. Registered: {registered}."
            )
        return generator_cls(config)

    @classmethod
    def registered_kinds(cls) -> list[str]:
        """Return the sorted list of registered backend kind tokens."""
        return sorted(k.value for k in cls._generators)
