# ruff: noqa: BLE001
from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, ClassVar, Self

from core.cache.inflight_manager import PendingRequestRegistry
from core.cache.key_deriver import KeyDeriver
from core.cache.save_scheduler import DebouncedSaver
from core.cache.store import CacheStore
from core.cache.translation_cache import TranslationCache
from core.trans.context_window import ContextWindow
from core.trans.engines import CustomBackend
from core.trans.events import TranslationEvents
from core.trans.interface import BackendError, BackendResponseError, TranslationBackend
from handlers.blacklist_filter import BlacklistFilter
from models.cache_models import TranslationStatistics
from models.translation_models import BackendRequestConfig, TranslationReady, TranslatorStatus
from utils.logger_utils import LoggerUtils
from utils.string_utils import StringUtils

if TYPE_CHECKING:
    import logging

    from core.trans.events import ReadyListener
    from models.cache_models import LoadedCache
    from models.config_models import Config


__all__: list[str] = ["TranslationService"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

type CacheSnapshot = tuple[list[tuple[str, str]], TranslationStatistics]


class TranslationService:
    """Decides for every string whether to serve a cached translation, join an in-flight
    request, or call the backend, and keeps the cache file up to date.

    Two call shapes are offered. ``translate`` never waits: on a miss it returns the input and
    translates in the background, notifying ``on_ready`` and the ``events`` subscribers when the
    result arrives. ``translate_async`` waits for the result. Both always return a string;
    backend failures yield the original text and are only counted and logged.

    Attributes:
        API_KEY_PREFIX_LENGTH (ClassVar[int]): Characters of the API key shown in the status.
        events (TranslationEvents): "Translation ready" notifications for the rendering layer.
    """

    API_KEY_PREFIX_LENGTH: ClassVar[int] = 10

    def __init__(
        self,
        config: Config,
        *,
        backend: TranslationBackend | None = None,
        store: CacheStore | None = None,
        save_delay: float | None = None,
    ) -> None:
        """Build the service and load the persisted cache.

        Args:
            config (Config): Application configuration.
            backend (TranslationBackend | None): Ready-to-use backend. When omitted, the backend
                registered for ``API.PROVIDER`` is created and initialized from ``config``.
            store (CacheStore | None): Cache persistence. Defaults to a store in ``GENERAL.CACHE_DIR``.
            save_delay (float | None): Debounce delay for cache saves in seconds.
        """
        self.config: Config = config
        self._provider: str = config.API.PROVIDER
        self._target_language: str = config.TRANSLATION.TARGET_LANGUAGE
        self._enabled: bool = True

        self._stats = TranslationStatistics()
        self._cache = TranslationCache(config.TRANSLATION.MAX_CACHE_SIZE)
        self._context = ContextWindow(config.TRANSLATION.CONTEXT_WINDOW)
        self._pending = PendingRequestRegistry()
        self._blacklist = BlacklistFilter(config.TRANSLATION.BLACKLIST)
        self._store: CacheStore = store or CacheStore(
            config.GENERAL.CACHE_DIR, provider=self._provider, target_language=self._target_language
        )
        self._saver: DebouncedSaver[CacheSnapshot] = DebouncedSaver(
            self._snapshot, self._write_snapshot, delay=save_delay
        )
        self._backend: TranslationBackend = backend if backend is not None else self.create_backend(config)
        self._background: set[asyncio.Task[None]] = set()
        self.events = TranslationEvents()

        if config.GENERAL.DEBUG:
            self.set_debug_mode(True)
        if not self.has_api_key:
            logger.warning("No API key configured; translation is not ready.")
        self._load_cache_from_store()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        _ = exc_type, exc_val, exc_tb
        await self.close()

    @staticmethod
    def create_backend(config: Config) -> TranslationBackend:
        """Create and initialize the backend registered for ``config.API.PROVIDER``.

        Unknown providers use the OpenAI-compatible backend with ``API.API_URL``.
        """
        backend_cls: type[TranslationBackend] | None = TranslationBackend.registered.get(config.API.PROVIDER)
        if backend_cls is None:
            logger.warning(
                "Unknown provider '%s'; using an OpenAI-compatible endpoint at '%s'.",
                config.API.PROVIDER,
                config.API.API_URL,
            )
            backend_cls = CustomBackend
        backend: TranslationBackend = backend_cls()
        backend.initialize(config)
        return backend

    @property
    def has_api_key(self) -> bool:
        return bool(self.config.API.API_KEY.strip())

    @property
    def request_config(self) -> BackendRequestConfig:
        return BackendRequestConfig(
            model=self.config.API.MODEL,
            temperature=self.config.API.TEMPERATURE,
            max_tokens=self.config.API.MAX_TOKENS,
            target_language=self._target_language,
        )

    def is_enabled(self) -> bool:
        """Whether translation is switched on and an API key is configured."""
        return self._enabled and self.has_api_key

    def enable(self) -> None:
        self._enabled = True
        logger.info("Translation enabled")

    def disable(self) -> None:
        self._enabled = False
        logger.info("Translation disabled")

    def toggle(self) -> bool:
        """Flip the enable flag.

        Returns:
            bool: The new value of the flag.
        """
        self._enabled = not self._enabled
        logger.info("Translation %s", "enabled" if self._enabled else "disabled")
        return self._enabled

    def set_debug_mode(self, enabled: bool) -> None:
        """Switch per-request tracing in the log on or off."""
        LoggerUtils.set_level("DEBUG" if enabled else "INFO")
        logger.info("Debug mode %s", "on" if enabled else "off")

    def get_stats(self) -> TranslationStatistics:
        return self._stats.copy()

    def get_status(self) -> TranslatorStatus:
        api_key: str = self.config.API.API_KEY.strip()
        return TranslatorStatus(
            enabled=self._enabled,
            has_api_key=bool(api_key),
            api_key_prefix=f"{api_key[: self.API_KEY_PREFIX_LENGTH]}..." if api_key else "none",
            provider=self._provider,
            target_language=self._target_language,
            cache_size=self._cache.size(),
            pending_requests=len(self._pending),
            is_ready=self.is_enabled(),
            cache_file=self.get_cache_file_path(),
        )

    def get_cache_file_path(self) -> str:
        return str(self._store.cache_path)

    def derive_key(self, text: str) -> str:
        return KeyDeriver.derive_key(text, self._target_language)

    def is_blocked(self, text: object) -> bool:
        return self._blacklist.is_blocked(text)

    async def clear_cache(self) -> bool:
        """Forget all translations and context, and delete the cache file.

        A save that is already writing is awaited first, so it cannot bring the file back.

        Returns:
            bool: True if a cache file was deleted.
        """
        self._cache.clear()
        self._context.clear()
        await self._saver.discard()
        removed: bool = self._store.clear()
        logger.info("Translation cache cleared")
        return removed

    def translate(self, text: str, on_ready: ReadyListener | None = None) -> str:
        """Return the translation if it is already known, otherwise ``text`` unchanged.

        On a miss a background task requests the translation; when it settles ``on_ready`` is
        called and a TranslationReady event is published, so the caller can redraw.
        Never blocks and never raises.

        Args:
            text (str): Text to translate.
            on_ready (ReadyListener | None): Called once with the result of a background request.

        Returns:
            str: The cached translation, or ``text``.
        """
        if not self.is_enabled():
            logger.debug("Translation not ready; returning original text")
            return text
        if self._blacklist.is_blocked(text):
            logger.debug("Blacklisted text skipped: '%s'", StringUtils.shorten(text))
            return text

        cache_key: str = self.derive_key(text)
        cached: str | None = self._lookup(cache_key)
        if cached is not None:
            return cached

        try:
            loop: asyncio.AbstractEventLoop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("No running event loop; '%s' left untranslated", StringUtils.shorten(text))
            return text

        logger.debug("Cache miss, requesting translation in background: '%s'", StringUtils.shorten(text))
        task: asyncio.Task[None] = loop.create_task(self._refresh_in_background(text, cache_key, on_ready))
        self._background.add(task)
        task.add_done_callback(self._background.discard)
        return text

    async def translate_async(self, text: str) -> str:
        """Return the translation of ``text``, waiting for the backend if necessary.

        Never raises for backend problems: the original text is returned instead.

        Args:
            text (str): Text to translate.

        Returns:
            str: The translation, or ``text`` when disabled, blacklisted or failed.
        """
        if not self.is_enabled() or self._blacklist.is_blocked(text):
            return text
        return await self._send_request(text, self.derive_key(text))

    def _lookup(self, cache_key: str) -> str | None:
        if not self.config.TRANSLATION.ENABLE_CACHE:
            return None
        cached: str | None = self._cache.get(cache_key)
        if cached is not None:
            self._stats.cache_hits += 1
            logger.debug("Cache hit: '%s'", StringUtils.shorten(cached))
        return cached

    async def _send_request(self, text: str, cache_key: str) -> str:
        cached: str | None = self._lookup(cache_key)
        if cached is not None:
            return cached

        fut: asyncio.Future[str] = self._pending.get_or_create(cache_key, lambda: self._do_translate(text, cache_key))
        # Shielded: a waiter being cancelled must not cancel the call shared with other waiters.
        return await asyncio.shield(fut)

    async def _do_translate(self, text: str, cache_key: str) -> str:
        self._stats.api_calls += 1
        try:
            result: str = await self._backend.translate(text, self._context.recent(), self.request_config)
            translated: str = StringUtils.ensure_str(result).strip()
            if not translated:
                msg = "Backend returned an empty translation"
                raise BackendResponseError(msg)
        except BackendError as err:
            self._stats.errors += 1
            logger.error("Translation failed for '%s': %s", StringUtils.shorten(text), err)
            return text
        except Exception:
            self._stats.errors += 1
            logger.exception("Unexpected error while translating '%s'", StringUtils.shorten(text))
            return text

        if self.config.TRANSLATION.ENABLE_CACHE:
            self._cache.set(cache_key, translated)
            self._saver.schedule()
        self._context.push(text, translated)
        self._stats.total_translated += 1
        logger.debug("Translated '%s' -> '%s'", StringUtils.shorten(text), StringUtils.shorten(translated))
        return translated

    async def _refresh_in_background(self, text: str, cache_key: str, on_ready: ReadyListener | None) -> None:
        translated: str = await self._send_request(text, cache_key)
        event = TranslationReady(original=text, translated=translated, cache_key=cache_key)
        if on_ready is not None:
            await TranslationEvents.invoke(on_ready, event)
        await self.events.publish(event)

    def _load_cache_from_store(self) -> None:
        loaded: LoadedCache | None = self._store.load()
        if loaded is None:
            return
        if loaded.provider != self._provider or loaded.target_language != self._target_language:
            logger.info(
                "Cache file is for provider '%s' / language '%s'; starting with an empty cache.",
                loaded.provider,
                loaded.target_language,
            )
            return

        count: int = self._cache.load(loaded.entries)
        self._stats.merge(loaded.stats)
        logger.info("Loaded %d cached translations", count)

    def _snapshot(self) -> CacheSnapshot:
        return self._cache.items(), self._stats.copy()

    def _write_snapshot(self, snapshot: CacheSnapshot) -> None:
        entries, stats = snapshot
        self._store.save(entries, stats)

    async def close(self) -> None:
        """Finish in-flight work, write pending cache changes and close the backend."""
        logger.info("Class '%s' termination process started.", self.__class__.__name__)
        await self._pending.drain()
        if self._background:
            await asyncio.gather(*self._background, return_exceptions=True)
        await self._saver.flush()
        await self._backend.close()
        logger.info("Class '%s' termination process completed.", self.__class__.__name__)
