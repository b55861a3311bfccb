"""Tests for the OpenAI-compatible chat completion backends."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any
from unittest.mock import MagicMock

import pytest

from core.trans.engines import CustomBackend, MoonshotBackend, OpenAIBackend, SiliconFlowBackend
from core.trans.interface import BackendHTTPError, BackendResponseError, BackendTimeoutError, TranslationBackend
from handlers.async_comm import AsyncCommError, AsyncCommInvalidContentTypeError, AsyncCommTimeoutError, AsyncHttp
from models.config_models import Config
from models.translation_models import BackendRequestConfig, ContextEntry

if TYPE_CHECKING:
    from pathlib import Path

REQUEST = BackendRequestConfig(model="test-model", temperature=0.3, max_tokens=1000, target_language="zh-CN")


def _reply(content: Any) -> dict[str, Any]:
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


@pytest.fixture
def http() -> MagicMock:
    mock = MagicMock(spec=AsyncHttp)
    mock.post.return_value = _reply("你好")
    return mock


@pytest.fixture
def config(tmp_path: Path) -> Config:
    cfg = Config()
    cfg.API.API_KEY = "sk-abc"
    cfg.API.TIMEOUT = 12.5
    cfg.GENERAL.PROMPT_FILE = str(tmp_path / "missing_prompt.txt")
    return cfg


@pytest.mark.parametrize(
    ("name", "backend_cls"),
    [
        ("siliconflow", SiliconFlowBackend),
        ("openai", OpenAIBackend),
        ("moonshot", MoonshotBackend),
        ("custom", CustomBackend),
    ],
)
def test_backends_are_registered(name: str, backend_cls: type[TranslationBackend]) -> None:
    assert TranslationBackend.registered[name] is backend_cls


@pytest.mark.asyncio
async def test_request_layout(http: MagicMock, config: Config) -> None:
    backend = OpenAIBackend(http=http)
    backend.initialize(config)
    context: list[ContextEntry] = [ContextEntry("はい", "是")]

    result: str = await backend.translate("こんにちは", context, REQUEST)

    assert result == "你好"
    kwargs: dict[str, Any] = http.post.call_args.kwargs
    assert kwargs["url"] == "https://api.openai.com/v1/chat/completions"
    assert kwargs["total_timeout"] == 12.5
    assert kwargs["headers"]["Authorization"] == "Bearer sk-abc"
    body: dict[str, Any] = kwargs["data"]
    assert body["model"] == "test-model"
    assert body["temperature"] == 0.3
    assert body["max_tokens"] == 1000
    system, user = body["messages"]
    assert system["role"] == "system"
    assert "简体中文" in system["content"]
    assert user["role"] == "user"
    assert user["content"].endswith("Current text to translate:\nこんにちは")
    assert "Japanese: はい\nTranslation: 是" in user["content"]


@pytest.mark.asyncio
async def test_custom_backend_uses_configured_url(http: MagicMock, config: Config) -> None:
    config.API.API_URL = "http://localhost:1234/v1/chat/completions"
    backend = CustomBackend(http=http)
    backend.initialize(config)

    await backend.translate("はい", [], REQUEST)

    assert http.post.call_args.kwargs["url"] == "http://localhost:1234/v1/chat/completions"


@pytest.mark.asyncio
async def test_fixed_endpoint_ignores_configured_url(http: MagicMock, config: Config) -> None:
    config.API.API_URL = "http://localhost:1234/v1/chat/completions"
    backend = SiliconFlowBackend(http=http)
    backend.initialize(config)

    assert backend.endpoint == "https://api.siliconflow.cn/v1/chat/completions"


@pytest.mark.asyncio
async def test_prompt_file_replaces_system_prompt(http: MagicMock, config: Config, tmp_path: Path) -> None:
    prompt_file: Path = tmp_path / "prompt.txt"
    prompt_file.write_text("Translate into pirate speak.", encoding="utf-8")
    config.GENERAL.PROMPT_FILE = str(prompt_file)
    backend = MoonshotBackend(http=http)
    backend.initialize(config)

    await backend.translate("はい", [], REQUEST)

    assert http.post.call_args.kwargs["data"]["messages"][0]["content"] == "Translate into pirate speak."


@pytest.mark.asyncio
async def test_reply_is_stripped(http: MagicMock, config: Config) -> None:
    http.post.return_value = _reply("  你好\n")
    backend = OpenAIBackend(http=http)
    backend.initialize(config)

    assert await backend.translate("こんにちは", [], REQUEST) == "你好"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("side_effect", "expected"),
    [
        (AsyncCommTimeoutError("timeout"), BackendTimeoutError),
        (AsyncCommError("HTTP 401: unauthorized", status=401), BackendHTTPError),
        (AsyncCommInvalidContentTypeError("Unknown Content-Type 'text/html'"), BackendResponseError),
    ],
)
async def test_transport_errors_become_backend_errors(
    http: MagicMock, config: Config, side_effect: Exception, expected: type[Exception]
) -> None:
    http.post.side_effect = side_effect
    backend = OpenAIBackend(http=http)
    backend.initialize(config)

    with pytest.raises(expected):
        await backend.translate("はい", [], REQUEST)


@pytest.mark.asyncio
@pytest.mark.parametrize("data", [{"choices": []}, {"error": "quota"}, None, _reply(""), _reply(None)])
async def test_unusable_reply_raises_response_error(http: MagicMock, config: Config, data: Any) -> None:
    http.post.return_value = data
    backend = OpenAIBackend(http=http)
    backend.initialize(config)

    with pytest.raises(BackendResponseError):
        await backend.translate("はい", [], REQUEST)


@pytest.mark.asyncio
async def test_close_closes_http_session(http: MagicMock) -> None:
    backend = OpenAIBackend(http=http)

    await backend.close()

    http.close.assert_awaited_once()
