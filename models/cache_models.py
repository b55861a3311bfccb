"""Models for the persisted translation cache.

Defines the statistics counters, the version 2 cache file layout, and the normalized
result of loading a cache file of any supported version.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final

from dataclasses_json import DataClassJsonMixin, LetterCase, dataclass_json

__all__: list[str] = [
    "CACHE_FILE_VERSION",
    "CacheRecord",
    "LoadedCache",
    "PersistedCacheFile",
    "TranslationStatistics",
]

CACHE_FILE_VERSION: Final[int] = 2


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass
class TranslationStatistics(DataClassJsonMixin):
    """Session counters, persisted with the cache.

    Attributes:
        total_translated (int): Successful backend translations.
        cache_hits (int): Lookups answered from the cache.
        api_calls (int): Backend calls started.
        errors (int): Backend calls that failed.
    """

    total_translated: int = 0
    cache_hits: int = 0
    api_calls: int = 0
    errors: int = 0

    def merge(self, other: TranslationStatistics) -> None:
        """Add the counters of ``other`` to this instance."""
        self.total_translated += other.total_translated
        self.cache_hits += other.cache_hits
        self.api_calls += other.api_calls
        self.errors += other.errors

    def copy(self) -> TranslationStatistics:
        return TranslationStatistics(
            total_translated=self.total_translated,
            cache_hits=self.cache_hits,
            api_calls=self.api_calls,
            errors=self.errors,
        )


@dataclass_json
@dataclass
class CacheRecord(DataClassJsonMixin):
    """One cache entry as written to the version 2 file.

    Attributes:
        original (str): Readable prefix of the source text (first segment of the key).
        translated (str): Translated text.
        key (str): Full cache key.
    """

    original: str
    translated: str
    key: str


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass
class PersistedCacheFile(DataClassJsonMixin):
    """Version 2 cache file.

    Attributes:
        version (int): File format version.
        timestamp (int): Save time in epoch milliseconds.
        provider (str): Backend provider name the translations came from.
        target_language (str): Target language code.
        stats (TranslationStatistics): Counters at save time.
        cache (list[CacheRecord]): Cache entries in cache order.
    """

    version: int = CACHE_FILE_VERSION
    timestamp: int = 0
    provider: str = ""
    target_language: str = ""
    stats: TranslationStatistics = field(default_factory=TranslationStatistics)
    cache: list[CacheRecord] = field(default_factory=list)


@dataclass
class LoadedCache:
    """Cache file contents normalized to a key -> translation mapping.

    Attributes:
        version (int): Version of the file that was read (1 for legacy flat files).
        provider (str): Provider recorded in the file.
        target_language (str): Target language recorded in the file.
        stats (TranslationStatistics): Counters recorded in the file.
        entries (dict[str, str]): Cache key -> translated text, in file order.
    """

    version: int
    provider: str
    target_language: str
    stats: TranslationStatistics = field(default_factory=TranslationStatistics)
    entries: dict[str, str] = field(default_factory=dict)
