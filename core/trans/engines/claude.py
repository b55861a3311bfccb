from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar, Final

from core.trans.engines.llm_base import LLMBackendBase
from core.trans.interface import BackendResponseError
from utils.string_utils import StringUtils

if TYPE_CHECKING:
    from models.translation_models import BackendRequestConfig

__all__: list[str] = ["ClaudeBackend"]

ANTHROPIC_VERSION: Final[str] = "2023-06-01"


class ClaudeBackend(LLMBackendBase):
    """Anthropic Messages API.

    The system prompt goes in the top-level ``system`` field; the reply text is the first
    content block.
    """

    DEFAULT_ENDPOINT: ClassVar[str] = "https://api.anthropic.com/v1/messages"

    @staticmethod
    def fetch_backend_name() -> str:
        return "claude"

    def _build_body(self, system_prompt: str, user_prompt: str, config: BackendRequestConfig) -> dict[str, Any]:
        return {
            "model": config.model,
            "system": system_prompt,
            "messages": [{"role": "user", "content": user_prompt}],
            "temperature": config.temperature,
            "max_tokens": config.max_tokens,
        }

    def _build_headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-api-key": self._api_key,
            "anthropic-version": ANTHROPIC_VERSION,
        }

    def _extract_text(self, data: Any) -> str:
        try:
            content: Any = data["content"][0]["text"]
        except (KeyError, IndexError, TypeError) as err:
            msg = f"Unexpected messages response: {StringUtils.shorten(repr(data), 200)}"
            raise BackendResponseError(msg) from err
        return StringUtils.ensure_str(content)
