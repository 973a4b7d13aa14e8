"""Helpers for running the test entry points of generated modules.

Every generated module ends with an ``AUTO_TESTS`` registry mapping entry
point names (``auto_<query>``) to zero-argument callables.  A test harness
discovers and runs them; with pytest::

    import queries_generated
    from sqlfn.runtime.testing import collect_entry_points

    @pytest.mark.parametrize("entry", collect_entry_points(queries_generated))
    def test_generated(entry):
        entry()
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from types import ModuleType

logger = logging.getLogger(__name__)

REGISTRY_NAME = "AUTO_TESTS"

EntryPoint = Callable[[], None]


@dataclass
class TestOutcome:
    """Result of running one entry point.

    Attributes:
        name: Entry point name.
        passed: ``True`` when the entry point returned normally.
        error: The exception it raised, if any.
    """

    __test__ = False

    name: str
    passed: bool
    error: BaseException | None = None


def registry_of(module: ModuleType) -> dict[str, EntryPoint]:
    """Return the ``AUTO_TESTS`` registry of a generated module (may be empty)."""
    return dict(getattr(module, REGISTRY_NAME, {}))


def collect_entry_points(module: ModuleType) -> list[EntryPoint]:
    """Return the registered entry points in declaration order."""
    return list(registry_of(module).values())


def run_entry_points(module: ModuleType) -> list[TestOutcome]:
    """Run every registered entry point and report pass/fail for each.

    Entry points are independent (each opens its own connection), so one
    failure does not stop the others.
    """
    outcomes: list[TestOutcome] = []
    for name, entry in registry_of(module).items():
        try:
            entry()
        except Exception as exc:
            logger.error("%s failed: %s", name, exc)
            outcomes.append(TestOutcome(name=name, passed=False, error=exc))
        else:
            outcomes.append(TestOutcome(name=name, passed=True))
    return outcomes
