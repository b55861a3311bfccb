"""Core of the LLM translator.

This package contains the translation service together with its cache, persistence and
backend subpackages.
"""

from core.trans.service import TranslationService

__all__: list[str] = ["TranslationService"]
