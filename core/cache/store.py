# ruff: noqa: BLE001
"""Durable storage of the translation cache.

The cache lives in a single JSON file that is read once at start-up and rewritten as a whole
on every save. Two layouts are understood when reading:

- version 2: ``{"version": 2, ..., "cache": [{"original", "translated", "key"}, ...]}``
- version 1 (or no version): ``{..., "cache": {"<key>": "<translated>", ...}}``

Saving always produces version 2. Storage problems never escape this module: they are
logged and the caller continues with an empty or unsaved cache.
"""

from __future__ import annotations

import json
import time
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final

from core.cache.key_deriver import KeyDeriver
from models.cache_models import (
    CACHE_FILE_VERSION,
    CacheRecord,
    LoadedCache,
    PersistedCacheFile,
    TranslationStatistics,
)
from utils.file_utils import FileUtils, FileUtilsError
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Iterable

__all__: list[str] = ["CACHE_FILE_NAME", "CacheStore", "PersistenceError"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

CACHE_FILE_NAME: Final[str] = "translation_cache.json"
LEGACY_CACHE_FILE_VERSION: Final[int] = 1


class PersistenceError(Exception):
    """The cache file could not be read, parsed or written."""


class CacheStore:
    """File-backed persistence for the translation cache and its statistics.

    Attributes:
        provider (str): Provider name written into saved files.
        target_language (str): Target language written into saved files.
    """

    def __init__(self, cache_dir: str | Path, *, provider: str, target_language: str) -> None:
        self._cache_dir: Path = Path(cache_dir)
        self._cache_file: Path = self._cache_dir / CACHE_FILE_NAME
        self.provider: str = provider
        self.target_language: str = target_language

    @property
    def cache_path(self) -> Path:
        return self._cache_file

    def load(self) -> LoadedCache | None:
        """Read and normalize the cache file.

        Returns:
            LoadedCache | None: The file contents, or None if there is no usable file.
        """
        if not self._cache_file.exists():
            logger.debug("No cache file at '%s'", self._cache_file)
            return None

        try:
            raw: Any = self._read_json()
            loaded: LoadedCache = self._normalize(raw)
        except PersistenceError as err:
            logger.error("Failed to load translation cache: %s", err)
            return None

        logger.info(
            "Loaded %d cache entries (version %d) from '%s'", len(loaded.entries), loaded.version, self._cache_file
        )
        return loaded

    def save(self, entries: Iterable[tuple[str, str]], stats: TranslationStatistics) -> bool:
        """Overwrite the cache file with ``entries`` and ``stats``.

        Args:
            entries (Iterable[tuple[str, str]]): Cache key -> translation pairs, in cache order.
            stats (TranslationStatistics): Counters to record.

        Returns:
            bool: True if the file was written.
        """
        document = PersistedCacheFile(
            version=CACHE_FILE_VERSION,
            timestamp=int(time.time() * 1000),
            provider=self.provider,
            target_language=self.target_language,
            stats=stats.copy(),
            cache=[
                CacheRecord(original=KeyDeriver.prefix_of(key), translated=value, key=key) for key, value in entries
            ],
        )
        try:
            self._write_json(document.to_dict())
        except PersistenceError as err:
            logger.error("Failed to save translation cache: %s", err)
            return False

        logger.debug("Saved %d cache entries to '%s'", len(document.cache), self._cache_file)
        return True

    def clear(self) -> bool:
        """Delete the cache file.

        Returns:
            bool: True if a file was deleted.
        """
        if not self._cache_file.exists():
            return False
        try:
            FileUtils.remove(self._cache_file)
        except FileUtilsError as err:
            logger.error("Failed to delete translation cache: %s", err)
            return False

        logger.info("Deleted cache file '%s'", self._cache_file)
        return True

    def _read_json(self) -> Any:
        try:
            text: str = self._cache_file.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as err:
            msg = f"Cannot read '{self._cache_file}': {err}"
            raise PersistenceError(msg) from err
        try:
            return json.loads(text)
        except json.JSONDecodeError as err:
            msg = f"Invalid JSON in '{self._cache_file}': {err}"
            raise PersistenceError(msg) from err

    def _write_json(self, data: dict[str, Any]) -> None:
        try:
            self._cache_dir.mkdir(parents=True, exist_ok=True)
            FileUtils.write_text_atomic(self._cache_file, json.dumps(data, ensure_ascii=False, indent=2))
        except (OSError, TypeError, ValueError) as err:
            msg = f"Cannot write '{self._cache_file}': {err}"
            raise PersistenceError(msg) from err

    @staticmethod
    def _normalize(raw: Any) -> LoadedCache:
        """Convert either file layout into a LoadedCache.

        Raises:
            PersistenceError: If the document does not have a recognizable shape.
        """
        if not isinstance(raw, dict):
            msg = f"Unexpected top-level JSON type: {type(raw).__name__}"
            raise PersistenceError(msg)

        version: Any = raw.get("version", LEGACY_CACHE_FILE_VERSION)
        cache: Any = raw.get("cache")
        entries: dict[str, str] = {}

        if isinstance(cache, list):
            for item in cache:
                try:
                    record: CacheRecord = CacheRecord.from_dict(item)
                except Exception as err:
                    logger.warning("Skipping malformed cache record %r: %s", item, err)
                    continue
                if not isinstance(record.key, str) or not isinstance(record.translated, str):
                    logger.warning("Skipping cache record with non-text fields: %r", item)
                    continue
                entries[record.key] = record.translated
        elif isinstance(cache, dict):
            for key, value in cache.items():
                if isinstance(value, str):
                    entries[key] = value
                else:
                    logger.warning("Skipping non-text cache value for key: %s", str(key)[:16])
        elif cache is not None:
            msg = f"Unexpected 'cache' type: {type(cache).__name__}"
            raise PersistenceError(msg)

        return LoadedCache(
            version=version if isinstance(version, int) else LEGACY_CACHE_FILE_VERSION,
            provider=str(raw.get("provider", "")),
            target_language=str(raw.get("targetLanguage", "")),
            stats=CacheStore._normalize_stats(raw.get("stats")),
            entries=entries,
        )

    @staticmethod
    def _normalize_stats(raw_stats: Any) -> TranslationStatistics:
        """Read the counters, replacing any that are not non-negative integers with 0."""
        if not isinstance(raw_stats, dict):
            return TranslationStatistics()
        counters: dict[str, int] = {}
        for name in TranslationStatistics().to_dict():
            value: Any = raw_stats.get(name, 0)
            if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
                counters[name] = value
            else:
                logger.warning("Ignoring malformed cache statistic '%s': %r", name, value)
        return TranslationStatistics.from_dict(counters)
