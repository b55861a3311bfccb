"""Prompt construction for LLM translation requests."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Final

from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Sequence

    from models.translation_models import ContextEntry

__all__: list[str] = ["LANGUAGE_NAMES", "PromptBuilder"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

LANGUAGE_NAMES: Final[dict[str, str]] = {
    "zh-CN": "简体中文",
    "zh-TW": "繁体中文",
    "en": "English",
    "ko": "Korean",
    "ja": "日本語",
}

DEFAULT_SYSTEM_PROMPT: Final[str] = (
    "You are a professional game translator. Translate the following Japanese text to {language}. "
    "Maintain the tone, style, and context. Preserve escape sequences like \\n, \\c[n], etc. "
    "Only return the translated text without explanations."
)


class PromptBuilder:
    """Builds the system and user messages sent to the model.

    A custom system prompt can be supplied as a UTF-8 text file; without one, a default
    game-translation prompt naming the target language is used.
    """

    def __init__(self, prompt_file: str | Path | None = None) -> None:
        self._custom_prompt: str | None = self._load_prompt_file(prompt_file) if prompt_file else None

    @property
    def has_custom_prompt(self) -> bool:
        return self._custom_prompt is not None

    @staticmethod
    def _load_prompt_file(prompt_file: str | Path) -> str | None:
        path = Path(prompt_file)
        if not path.is_file():
            logger.debug("Prompt file not found: '%s'; using the default prompt.", path)
            return None
        try:
            text: str = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as err:
            logger.warning("Failed to read prompt file '%s': %s", path, err)
            return None
        if not text.strip():
            logger.warning("Prompt file '%s' is empty; using the default prompt.", path)
            return None
        logger.info("Loaded system prompt from '%s'", path)
        return text

    def system_prompt(self, target_language: str) -> str:
        if self._custom_prompt is not None:
            return self._custom_prompt
        return DEFAULT_SYSTEM_PROMPT.format(language=LANGUAGE_NAMES.get(target_language, target_language))

    @staticmethod
    def user_prompt(text: str, context: Sequence[ContextEntry]) -> str:
        """Build the user message: previous pairs for context, then the text to translate."""
        parts: list[str] = []
        if context:
            parts.append("Previous translations for context:\n")
            parts.extend(f"Japanese: {entry.original}\nTranslation: {entry.translated}\n\n" for entry in context)
            parts.append("---\n\n")
        parts.append(f"Current text to translate:\n{text}")
        return "".join(parts)
