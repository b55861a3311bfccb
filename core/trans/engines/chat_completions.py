from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from core.trans.engines.llm_base import LLMBackendBase
from core.trans.interface import BackendResponseError
from utils.string_utils import StringUtils

if TYPE_CHECKING:
    from models.translation_models import BackendRequestConfig

__all__: list[str] = [
    "ChatCompletionsBackend",
    "CustomBackend",
    "MoonshotBackend",
    "OpenAIBackend",
    "SiliconFlowBackend",
]


class ChatCompletionsBackend(LLMBackendBase):
    """OpenAI-compatible ``/v1/chat/completions`` API with bearer authentication."""

    def _build_body(self, system_prompt: str, user_prompt: str, config: BackendRequestConfig) -> dict[str, Any]:
        return {
            "model": config.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": config.temperature,
            "max_tokens": config.max_tokens,
        }

    def _build_headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._api_key}",
        }

    def _extract_text(self, data: Any) -> str:
        try:
            content: Any = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as err:
            msg = f"Unexpected chat completion response: {StringUtils.shorten(repr(data), 200)}"
            raise BackendResponseError(msg) from err
        return StringUtils.ensure_str(content)


class SiliconFlowBackend(ChatCompletionsBackend):
    DEFAULT_ENDPOINT: ClassVar[str] = "https://api.siliconflow.cn/v1/chat/completions"

    @staticmethod
    def fetch_backend_name() -> str:
        return "siliconflow"


class OpenAIBackend(ChatCompletionsBackend):
    DEFAULT_ENDPOINT: ClassVar[str] = "https://api.openai.com/v1/chat/completions"

    @staticmethod
    def fetch_backend_name() -> str:
        return "openai"


class MoonshotBackend(ChatCompletionsBackend):
    DEFAULT_ENDPOINT: ClassVar[str] = "https://api.moonshot.cn/v1/chat/completions"

    @staticmethod
    def fetch_backend_name() -> str:
        return "moonshot"


class CustomBackend(ChatCompletionsBackend):
    """Any OpenAI-compatible endpoint; the URL comes from ``API.API_URL``."""

    @staticmethod
    def fetch_backend_name() -> str:
        return "custom"
