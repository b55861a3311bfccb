from __future__ import annotations

from collections import OrderedDict
from typing import TYPE_CHECKING

from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Mapping

__all__: list[str] = ["TranslationCache"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class TranslationCache:
    """In-memory cache key -> translated text, the runtime source of truth.

    Entries are kept in recency order. When ``max_size`` is positive the cache holds at most
    that many entries and evicts the least recently used one on overflow; a lookup hit counts
    as a use. A ``max_size`` of zero or less disables the bound.

    Attributes:
        max_size (int): Capacity of the cache, or <= 0 for unbounded.
    """

    def __init__(self, max_size: int = 0) -> None:
        self.max_size: int = max_size
        self._entries: OrderedDict[str, str] = OrderedDict()
        self._evicted: int = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, cache_key: object) -> bool:
        return cache_key in self._entries

    @property
    def evicted(self) -> int:
        """Number of entries dropped by the capacity bound since creation."""
        return self._evicted

    def get(self, cache_key: str) -> str | None:
        """Return the cached translation for ``cache_key``, or None on a miss."""
        value: str | None = self._entries.get(cache_key)
        if value is not None:
            self._entries.move_to_end(cache_key)
        return value

    def set(self, cache_key: str, value: str) -> None:
        """Store ``value`` under ``cache_key`` and apply the capacity bound."""
        self._entries[cache_key] = value
        self._entries.move_to_end(cache_key)
        self._enforce_limit()

    def load(self, entries: Mapping[str, str]) -> int:
        """Bulk insert persisted entries in their stored order.

        Args:
            entries (Mapping[str, str]): Cache key -> translation, oldest first.

        Returns:
            int: Number of entries held after loading.
        """
        for cache_key, value in entries.items():
            self._entries[cache_key] = value
            self._entries.move_to_end(cache_key)
        self._enforce_limit()
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def size(self) -> int:
        return len(self._entries)

    def items(self) -> list[tuple[str, str]]:
        """Return a snapshot of all entries, least recently used first."""
        return list(self._entries.items())

    def _enforce_limit(self) -> None:
        if self.max_size <= 0:
            return
        overflow: int = len(self._entries) - self.max_size
        for _ in range(overflow):
            cache_key, _value = self._entries.popitem(last=False)
            self._evicted += 1
            logger.debug("Evicted least recently used cache entry: %s", cache_key[:16])
