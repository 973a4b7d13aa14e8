"""Prepared-statement cache for the network backend.

The cache maps ``(sql, parameter types)`` to the handle returned by the
client's ``prepare``.  Entries are never evicted, so at most one prepare call
is made per distinct key for the lifetime of the cache.

The cache does no locking.  When one instance is shared between threads,
wrap each call in an external lock::

    with cache_lock:
        stmt = prepare_cached_get_pet(client, cache)
"""
from __future__ import annotations

import logging
from collections.abc import Sequence

from sqlfn.runtime.client import GenericClient, PreparedStatement

logger = logging.getLogger(__name__)

CacheKey = tuple[str, tuple[str, ...]]


class Cache:
    """Caches prepared statements by ``(sql, types)``."""

    def __init__(self) -> None:
        self._map: dict[CacheKey, PreparedStatement] = {}

    def prepare(self, sql: str, client: GenericClient) -> PreparedStatement:
        """Equivalent to ``prepare_typed(sql, (), client)``."""
        return self.prepare_typed(sql, (), client)

    def prepare_typed(
        self, sql: str, types: Sequence[str], client: GenericClient
    ) -> PreparedStatement:
        """Return the cached handle for ``(sql, types)``, preparing it on a miss.

        Args:
            sql: Statement text.
            types: Parameter type names; compared structurally.
            client: Connection used on a cache miss.

        Returns:
            The shared :class:`PreparedStatement` for this key.
        """
        key: CacheKey = (sql, tuple(types))
        stmt = self._map.get(key)
        if stmt is not None:
            logger.debug("prepared statement cache hit: %s", stmt.name)
            return stmt

        stmt = client.prepare(sql, key[1])
        self._map[key] = stmt
        logger.debug("prepared statement cache miss, prepared %s", stmt.name)
        return stmt

    def __len__(self) -> int:
        return len(self._map)

    def __contains__(self, key: object) -> bool:
        return key in self._map
