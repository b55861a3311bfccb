"""Translation backend implementations.

Importing this package registers every backend with ``TranslationBackend.registered``.

Modules:
- ChatCompletionsBackend: OpenAI-compatible chat completions (SiliconFlow, OpenAI, Moonshot, custom URL).
- ClaudeBackend: Anthropic Messages API.
- PromptBuilder: system and user prompt construction.
"""

from core.trans.engines.chat_completions import (
    ChatCompletionsBackend,
    CustomBackend,
    MoonshotBackend,
    OpenAIBackend,
    SiliconFlowBackend,
)
from core.trans.engines.claude import ClaudeBackend
from core.trans.engines.llm_base import LLMBackendBase
from core.trans.engines.prompts import LANGUAGE_NAMES, PromptBuilder

__all__: list[str] = [
    "LANGUAGE_NAMES",
    "ChatCompletionsBackend",
    "ClaudeBackend",
    "CustomBackend",
    "LLMBackendBase",
    "MoonshotBackend",
    "OpenAIBackend",
    "PromptBuilder",
    "SiliconFlowBackend",
]
