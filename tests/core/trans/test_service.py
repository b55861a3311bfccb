"""Tests for TranslationService."""

from __future__ import annotations

import asyncio
import json
import threading
from typing import TYPE_CHECKING, Any

import pytest

from core.cache.key_deriver import KeyDeriver
from core.cache.store import CacheStore
from core.trans.engines import ClaudeBackend, CustomBackend, SiliconFlowBackend
from core.trans.interface import BackendHTTPError, TranslationBackend
from core.trans.service import TranslationService
from models.cache_models import TranslationStatistics
from models.config_models import Config
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterable, Sequence
    from pathlib import Path

    from models.translation_models import BackendRequestConfig, ContextEntry, TranslationReady, TranslatorStatus

API_KEY = "sk-test-1234567890"


class FakeBackend(TranslationBackend):
    """Backend answering ``[text]`` after an optional gate, recording each call."""

    def __init__(self, *, reply: str | None = None, error: Exception | None = None) -> None:
        self.reply: str | None = reply
        self.error: Exception | None = error
        self.gate: asyncio.Event | None = None
        self.calls: list[tuple[str, list[ContextEntry]]] = []
        self.closed: bool = False

    def initialize(self, config: Config) -> None:
        _ = config

    async def translate(self, text: str, context: Sequence[ContextEntry], config: BackendRequestConfig) -> str:
        _ = config
        self.calls.append((text, list(context)))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.reply if self.reply is not None else f"[{text}]"

    async def close(self) -> None:
        self.closed = True


class _GatedStore(CacheStore):
    """Store whose save blocks until released."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.started = threading.Event()
        self.release = threading.Event()

    def save(self, entries: Iterable[tuple[str, str]], stats: TranslationStatistics) -> bool:
        self.started.set()
        self.release.wait(timeout=5)
        return super().save(entries, stats)


def make_config(tmp_path: Path, **translation: Any) -> Config:
    config = Config()
    config.API.API_KEY = API_KEY
    config.GENERAL.CACHE_DIR = str(tmp_path / "cache")
    for name, value in translation.items():
        setattr(config.TRANSLATION, name, value)
    return config


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
async def service(tmp_path: Path, backend: FakeBackend) -> AsyncIterator[TranslationService]:
    svc = TranslationService(make_config(tmp_path), backend=backend, save_delay=0.01)
    yield svc
    await svc.close()


@pytest.mark.asyncio
async def test_concurrent_requests_are_coalesced(service: TranslationService, backend: FakeBackend) -> None:
    backend.gate = asyncio.Event()
    tasks: list[asyncio.Task[str]] = [asyncio.create_task(service.translate_async("こんにちは")) for _ in range(5)]
    await asyncio.sleep(0.01)

    assert len(backend.calls) == 1
    assert service.get_status().pending_requests == 1

    backend.gate.set()
    results: list[str] = await asyncio.gather(*tasks)

    assert results == ["[こんにちは]"] * 5
    stats: TranslationStatistics = service.get_stats()
    assert stats.api_calls == 1
    assert stats.total_translated == 1
    assert service.get_status().pending_requests == 0


@pytest.mark.asyncio
async def test_cache_hit_does_not_call_backend(service: TranslationService, backend: FakeBackend) -> None:
    assert await service.translate_async("はい") == "[はい]"

    assert await service.translate_async("はい") == "[はい]"
    assert service.translate("はい") == "[はい]"

    assert len(backend.calls) == 1
    assert service.get_stats().cache_hits == 2


@pytest.mark.asyncio
@pytest.mark.parametrize("text", ["\\i[12]", "$gold", "12345", "", "   "])
async def test_blacklisted_text_is_returned_unchanged(
    service: TranslationService, backend: FakeBackend, text: str
) -> None:
    assert await service.translate_async(text) == text
    assert service.translate(text) == text

    assert backend.calls == []
    assert service.get_stats().api_calls == 0


@pytest.mark.asyncio
async def test_blacklist_takes_precedence_over_cache(tmp_path: Path, backend: FakeBackend) -> None:
    config: Config = make_config(tmp_path)
    store = CacheStore(config.GENERAL.CACHE_DIR, provider="siliconflow", target_language="zh-CN")
    store.save([(KeyDeriver.derive_key("123", "zh-CN"), "一二三")], TranslationStatistics())

    async with TranslationService(config, backend=backend) as svc:
        assert svc.get_status().cache_size == 1
        assert await svc.translate_async("123") == "123"
        assert svc.get_stats().cache_hits == 0


@pytest.mark.asyncio
async def test_backend_failure_returns_original_and_is_not_cached(
    service: TranslationService, backend: FakeBackend
) -> None:
    backend.error = BackendHTTPError("HTTP 500: server error")

    assert await service.translate_async("foo") == "foo"
    stats: TranslationStatistics = service.get_stats()
    assert stats.errors == 1
    assert stats.api_calls == 1
    assert stats.total_translated == 0
    assert service.get_status().cache_size == 0

    backend.error = None
    assert await service.translate_async("foo") == "[foo]"
    assert len(backend.calls) == 2


@pytest.mark.asyncio
async def test_unexpected_backend_exception_is_absorbed(service: TranslationService, backend: FakeBackend) -> None:
    backend.error = RuntimeError("bug")

    assert await service.translate_async("foo") == "foo"
    assert service.get_stats().errors == 1


@pytest.mark.asyncio
async def test_blank_reply_counts_as_failure(service: TranslationService, backend: FakeBackend) -> None:
    backend.reply = "  \n"

    assert await service.translate_async("foo") == "foo"
    assert service.get_stats().errors == 1
    assert service.get_status().cache_size == 0


@pytest.mark.asyncio
async def test_reply_is_trimmed(service: TranslationService, backend: FakeBackend) -> None:
    backend.reply = "  你好 \n"

    assert await service.translate_async("こんにちは") == "你好"


@pytest.mark.asyncio
async def test_context_window_feeds_following_requests(tmp_path: Path, backend: FakeBackend) -> None:
    config: Config = make_config(tmp_path, CONTEXT_WINDOW=2)
    async with TranslationService(config, backend=backend) as svc:
        for text in ("A", "B", "C", "D"):
            await svc.translate_async(text)

    contexts: list[list[str]] = [[entry.original for entry in context] for _, context in backend.calls]
    assert contexts == [[], ["A"], ["A", "B"], ["B", "C"]]
    assert backend.calls[3][1][1].translated == "[C]"


@pytest.mark.asyncio
async def test_cancelled_waiter_does_not_cancel_shared_call(service: TranslationService, backend: FakeBackend) -> None:
    backend.gate = asyncio.Event()
    first: asyncio.Task[str] = asyncio.create_task(service.translate_async("はい"))
    second: asyncio.Task[str] = asyncio.create_task(service.translate_async("はい"))
    await asyncio.sleep(0.01)

    first.cancel()
    backend.gate.set()

    assert await second == "[はい]"
    with pytest.raises(asyncio.CancelledError):
        await first
    assert len(backend.calls) == 1


@pytest.mark.asyncio
async def test_translate_miss_returns_input_and_notifies(service: TranslationService, backend: FakeBackend) -> None:
    ready: asyncio.Event = asyncio.Event()
    callbacks: list[TranslationReady] = []
    published: list[TranslationReady] = []

    def on_ready(event: TranslationReady) -> None:
        callbacks.append(event)

    async def on_event(event: TranslationReady) -> None:
        published.append(event)
        ready.set()

    service.events.subscribe(on_event)

    assert service.translate("ありがとう", on_ready=on_ready) == "ありがとう"
    await asyncio.wait_for(ready.wait(), timeout=1)

    assert [event.translated for event in callbacks] == ["[ありがとう]"]
    assert published == callbacks
    assert published[0].cache_key == KeyDeriver.derive_key("ありがとう", "zh-CN")
    assert service.translate("ありがとう") == "[ありがとう]"
    assert len(backend.calls) == 1


@pytest.mark.asyncio
async def test_repeated_translate_misses_share_one_backend_call(
    service: TranslationService, backend: FakeBackend
) -> None:
    backend.gate = asyncio.Event()
    published: list[TranslationReady] = []
    service.events.subscribe(published.append)

    assert [service.translate("おはよう") for _ in range(5)] == ["おはよう"] * 5
    await asyncio.sleep(0.01)
    assert len(backend.calls) == 1

    backend.gate.set()
    await asyncio.sleep(0.01)

    assert [event.translated for event in published] == ["[おはよう]"] * 5
    assert service.get_stats().api_calls == 1
    assert service.translate("おはよう") == "[おはよう]"


@pytest.mark.asyncio
async def test_failed_background_request_publishes_original(
    service: TranslationService, backend: FakeBackend
) -> None:
    backend.error = BackendHTTPError("HTTP 503: overloaded")
    ready: asyncio.Event = asyncio.Event()
    callbacks: list[TranslationReady] = []

    def on_ready(event: TranslationReady) -> None:
        callbacks.append(event)
        ready.set()

    assert service.translate("foo", on_ready=on_ready) == "foo"
    await asyncio.wait_for(ready.wait(), timeout=1)

    assert callbacks[0].original == "foo"
    assert callbacks[0].translated == "foo"
    assert callbacks[0].changed is False
    assert service.get_stats().errors == 1
    assert service.get_status().cache_size == 0

def test_translate_without_running_loop_returns_input(tmp_path: Path, backend: FakeBackend) -> None:
    svc = TranslationService(make_config(tmp_path), backend=backend)

    assert svc.translate("はい") == "はい"
    assert backend.calls == []


@pytest.mark.asyncio
async def test_missing_api_key_disables_translation(tmp_path: Path, backend: FakeBackend) -> None:
    config: Config = make_config(tmp_path)
    config.API.API_KEY = "  "

    async with TranslationService(config, backend=backend) as svc:
        assert svc.is_enabled() is False
        assert await svc.translate_async("はい") == "はい"
        assert svc.translate("はい") == "はい"
        status: TranslatorStatus = svc.get_status()

    assert backend.calls == []
    assert status.has_api_key is False
    assert status.api_key_prefix == "none"
    assert status.is_ready is False


@pytest.mark.asyncio
async def test_enable_disable_toggle(service: TranslationService, backend: FakeBackend) -> None:
    service.disable()
    assert service.is_enabled() is False
    assert await service.translate_async("はい") == "はい"

    assert service.toggle() is True
    assert service.is_enabled() is True
    assert service.toggle() is False

    service.enable()
    assert await service.translate_async("はい") == "[はい]"
    assert len(backend.calls) == 1


@pytest.mark.asyncio
async def test_status_reports_configuration(service: TranslationService) -> None:
    await service.translate_async("はい")

    status: TranslatorStatus = service.get_status()

    assert status.enabled is True
    assert status.has_api_key is True
    assert status.api_key_prefix == "sk-test-12..."
    assert status.provider == "siliconflow"
    assert status.target_language == "zh-CN"
    assert status.cache_size == 1
    assert status.is_ready is True
    assert status.cache_file == service.get_cache_file_path()
    assert service.get_cache_file_path().endswith("translation_cache.json")


@pytest.mark.asyncio
async def test_cache_is_persisted_and_reloaded(tmp_path: Path) -> None:
    config: Config = make_config(tmp_path)
    first_backend = FakeBackend()
    async with TranslationService(config, backend=first_backend, save_delay=0.01) as svc:
        await svc.translate_async("はい")
        cache_file: str = svc.get_cache_file_path()

    document: dict[str, Any] = json.loads((tmp_path / "cache" / "translation_cache.json").read_text("utf-8"))
    assert document["version"] == 2
    assert document["cache"][0]["original"] == "はい"
    assert document["cache"][0]["translated"] == "[はい]"
    assert document["stats"]["apiCalls"] == 1

    second_backend = FakeBackend()
    async with TranslationService(config, backend=second_backend) as svc:
        assert svc.get_cache_file_path() == cache_file
        assert await svc.translate_async("はい") == "[はい]"
        stats: TranslationStatistics = svc.get_stats()

    assert second_backend.calls == []
    assert stats.api_calls == 1
    assert stats.cache_hits == 1


@pytest.mark.asyncio
async def test_cache_of_other_provider_is_discarded(tmp_path: Path, backend: FakeBackend) -> None:
    config: Config = make_config(tmp_path)
    store = CacheStore(config.GENERAL.CACHE_DIR, provider="openai", target_language="zh-CN")
    store.save([(KeyDeriver.derive_key("はい", "zh-CN"), "是")], TranslationStatistics())

    async with TranslationService(config, backend=backend) as svc:
        assert svc.get_status().cache_size == 0
        assert await svc.translate_async("はい") == "[はい]"

    assert len(backend.calls) == 1


@pytest.mark.asyncio
async def test_malformed_statistics_in_cache_file_do_not_prevent_start(tmp_path: Path, backend: FakeBackend) -> None:
    config: Config = make_config(tmp_path)
    cache_file: Path = tmp_path / "cache" / "translation_cache.json"
    cache_file.parent.mkdir(parents=True)
    key: str = KeyDeriver.derive_key("はい", "zh-CN")
    document: dict[str, Any] = {
        "version": 2,
        "provider": "siliconflow",
        "targetLanguage": "zh-CN",
        "stats": {"totalTranslated": None, "cacheHits": {}, "apiCalls": 2, "errors": "1"},
        "cache": [{"original": "はい", "translated": "是", "key": key}],
    }
    cache_file.write_text(json.dumps(document, ensure_ascii=False), encoding="utf-8")

    async with TranslationService(config, backend=backend) as svc:
        assert svc.get_stats() == TranslationStatistics(api_calls=2)
        assert await svc.translate_async("はい") == "是"
        assert await svc.translate_async("いいえ") == "[いいえ]"

    assert len(backend.calls) == 1

@pytest.mark.asyncio
async def test_disabled_cache_always_calls_backend(tmp_path: Path, backend: FakeBackend) -> None:
    config: Config = make_config(tmp_path, ENABLE_CACHE=False)

    async with TranslationService(config, backend=backend, save_delay=0.01) as svc:
        await svc.translate_async("はい")
        await svc.translate_async("はい")
        assert svc.get_status().cache_size == 0

    assert len(backend.calls) == 2
    assert not (tmp_path / "cache" / "translation_cache.json").exists()


@pytest.mark.asyncio
async def test_max_cache_size_bounds_the_cache(tmp_path: Path, backend: FakeBackend) -> None:
    config: Config = make_config(tmp_path, MAX_CACHE_SIZE=2)

    async with TranslationService(config, backend=backend) as svc:
        for text in ("A", "B", "C"):
            await svc.translate_async(text)
        assert svc.get_status().cache_size == 2
        assert await svc.translate_async("A") == "[A]"

    assert [text for text, _ in backend.calls] == ["A", "B", "C", "A"]


@pytest.mark.asyncio
async def test_clear_cache_removes_entries_and_file(tmp_path: Path, backend: FakeBackend) -> None:
    config: Config = make_config(tmp_path)
    async with TranslationService(config, backend=backend, save_delay=60) as svc:
        await svc.translate_async("はい")
        await svc._saver.flush()  # noqa: SLF001
        assert (tmp_path / "cache" / "translation_cache.json").exists()

        assert await svc.clear_cache() is True
        assert svc.get_status().cache_size == 0
        assert await svc.clear_cache() is False

        await svc.translate_async("はい")

    assert len(backend.calls) == 2
    assert backend.calls[1][1] == []


@pytest.mark.asyncio
async def test_clear_cache_waits_for_save_in_progress(tmp_path: Path, backend: FakeBackend) -> None:
    config: Config = make_config(tmp_path)
    store = _GatedStore(config.GENERAL.CACHE_DIR, provider="siliconflow", target_language="zh-CN")
    async with TranslationService(config, backend=backend, store=store, save_delay=0.01) as svc:
        await svc.translate_async("はい")
        assert await asyncio.to_thread(store.started.wait, 1)

        clearing: asyncio.Task[bool] = asyncio.create_task(svc.clear_cache())
        await asyncio.sleep(0.02)
        assert not clearing.done()

        store.release.set()
        assert await clearing is True

    assert not store.cache_path.exists()
    assert store.load() is None


@pytest.mark.asyncio
async def test_close_closes_backend(tmp_path: Path, backend: FakeBackend) -> None:
    svc = TranslationService(make_config(tmp_path), backend=backend)

    await svc.close()

    assert backend.closed is True


def test_set_debug_mode_switches_log_level(tmp_path: Path, backend: FakeBackend) -> None:
    svc = TranslationService(make_config(tmp_path), backend=backend)

    svc.set_debug_mode(True)
    assert LoggerUtils.get_level().name == "DEBUG"

    svc.set_debug_mode(False)
    assert LoggerUtils.get_level().name == "INFO"


def test_create_backend_by_provider(tmp_path: Path) -> None:
    config: Config = make_config(tmp_path)

    assert isinstance(TranslationService.create_backend(config), SiliconFlowBackend)

    config.API.PROVIDER = "claude"
    assert isinstance(TranslationService.create_backend(config), ClaudeBackend)


def test_unknown_provider_falls_back_to_custom_endpoint(tmp_path: Path) -> None:
    config: Config = make_config(tmp_path)
    config.API.PROVIDER = "local-llm"
    config.API.API_URL = "http://localhost:8000/v1/chat/completions"

    backend: TranslationBackend = TranslationService.create_backend(config)

    assert isinstance(backend, CustomBackend)
    assert backend.endpoint == "http://localhost:8000/v1/chat/completions"
