"""Translation cache package.

Provides cache key derivation, the in-memory cache, request coalescing and persistence of
the cache file.
"""

from __future__ import annotations

from core.cache.inflight_manager import PendingRequestRegistry
from core.cache.key_deriver import KeyDeriver
from core.cache.save_scheduler import DebouncedSaver
from core.cache.store import CACHE_FILE_NAME, CacheStore, PersistenceError
from core.cache.translation_cache import TranslationCache

__all__: list[str] = [
    "CACHE_FILE_NAME",
    "CacheStore",
    "DebouncedSaver",
    "KeyDeriver",
    "PendingRequestRegistry",
    "PersistenceError",
    "TranslationCache",
]
