"""Indentation-aware source text buffer used by every emitter."""
from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

INDENT = "    "


class SourceWriter:
    """Accumulates Python source lines.

    Example::

        w = SourceWriter()
        with w.block("def f(x):"):
            w.line("return x")
        w.render()  # 'def f(x):\\n    return x\\n'
    """

    def __init__(self) -> None:
        self._lines: list[str] = []
        self._level = 0

    def line(self, text: str = "") -> None:
        """Append ``text`` at the current indentation (blank lines stay empty)."""
        self._lines.append(f"{INDENT * self._level}{text}" if text else "")

    def lines(self, texts: list[str]) -> None:
        for text in texts:
            self.line(text)

    def blank(self, count: int = 1) -> None:
        """Append ``count`` blank lines."""
        self._lines.extend([""] * count)

    def docstring(self, text: str) -> None:
        """Append a one-line docstring."""
        self.line(f'"""{text}"""')

    @contextmanager
    def block(self, header: str) -> Iterator[None]:
        """Append ``header`` and indent everything written inside the block."""
        self.line(header)
        self._level += 1
        try:
            yield
        finally:
            self._level -= 1

    def extend(self, other: SourceWriter) -> None:
        """Append ``other``'s lines, re-indented to the current level."""
        for text in other._lines:
            self.line(text)

    def render(self) -> str:
        """Return the accumulated source with a trailing newline."""
        return "\n".join(self._lines).rstrip("\n") + "\n"
