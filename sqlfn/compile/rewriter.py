"""Named-to-positional placeholder rewriting for the network backend.

``:name`` markers become ``$n``, where ``n`` is the 1-based position of
``name`` among the declared parameters.  A marker is a colon followed by an
identifier; the identifier ends at the first non-identifier character (or
end of text), and that character is kept.

Unknown names are left untouched by default so that backend syntax containing
a colon, such as PostgreSQL's ``::type`` casts, survives.  The cost is that a
misspelt parameter name is not reported; ``strict=True`` reports it instead.
"""
from __future__ import annotations

import re
from collections.abc import Sequence

from sqlfn.errors import UnmatchedPlaceholderError

PLACEHOLDER_RE = re.compile(r":([^\W\d]\w*)")


def rewrite_named_placeholders(
    sql: str,
    param_names: Sequence[str],
    strict: bool = False,
    query: str | None = None,
) -> str:
    """Rewrite ``:name`` placeholders in ``sql`` to ``$n``.

    Args:
        sql: SQL text with named placeholders.
        param_names: Declared parameter names, in order.
        strict: Raise for an unmatched ``:name`` that is not a ``::`` cast.
        query: Query name, for the error message.

    Returns:
        The rewritten SQL text.

    Raises:
        UnmatchedPlaceholderError: In strict mode, for an unmatched name.
    """
    positions: dict[str, int] = {}
    for i, name in enumerate(param_names):
        positions.setdefault(name, i + 1)

    def replace(match: re.Match[str]) -> str:
        name = match.group(1)
        index = positions.get(name)
        if index is not None:
            return f"${index}"
        is_cast = match.start() > 0 and sql[match.start() - 1] == ":"
        if strict and not is_cast:
            raise UnmatchedPlaceholderError(name, list(param_names), query=query)
        return match.group(0)

    return PLACEHOLDER_RE.sub(replace, sql)
