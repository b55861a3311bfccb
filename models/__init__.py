"""Data models for the LLM translator.

This package contains dataclass definitions for configuration, the persisted cache file,
statistics, and translation requests and results.
"""

from __future__ import annotations

from models.cache_models import (
    CACHE_FILE_VERSION,
    CacheRecord,
    LoadedCache,
    PersistedCacheFile,
    TranslationStatistics,
)
from models.config_models import DEFAULT_BLACKLIST, Api, Config, General, Translation
from models.translation_models import BackendRequestConfig, ContextEntry, TranslationReady, TranslatorStatus

__all__: list[str] = [
    "CACHE_FILE_VERSION",
    "DEFAULT_BLACKLIST",
    "Api",
    "BackendRequestConfig",
    "CacheRecord",
    "Config",
    "ContextEntry",
    "General",
    "LoadedCache",
    "PersistedCacheFile",
    "Translation",
    "TranslationReady",
    "TranslationStatistics",
    "TranslatorStatus",
]
