"""Configuration data models for the translator.

Each dataclass corresponds to one section of the INI file. Field types drive the value
conversion in ``config.loader``; defaults match a fresh installation.
"""

from __future__ import annotations

from dataclasses import dataclass, field

__all__: list[str] = ["DEFAULT_BLACKLIST", "Api", "Config", "General", "Translation"]

# Icon escape codes such as \i[12], variable names starting with '$', and bare numbers.
DEFAULT_BLACKLIST: str = r"\\i\[\d+\]|^\$|^[0-9]+$"


@dataclass
class General:
    DEBUG: bool = False
    CACHE_DIR: str = "translation_cache"
    PROMPT_FILE: str = "prompt.txt"
    LOG_FILE: str = ""


@dataclass
class Api:
    PROVIDER: str = "siliconflow"
    API_KEY: str = ""
    API_URL: str = "https://api.siliconflow.cn/v1/chat/completions"
    MODEL: str = "Qwen/Qwen2.5-7B-Instruct"
    TEMPERATURE: float = 0.3
    MAX_TOKENS: int = 1000
    TIMEOUT: float = 30.0


@dataclass
class Translation:
    TARGET_LANGUAGE: str = "zh-CN"
    ENABLE_CACHE: bool = True
    MAX_CACHE_SIZE: int = 10000
    CONTEXT_WINDOW: int = 10
    BLACKLIST: str = DEFAULT_BLACKLIST
    TRANSLATE_UI: bool = True
    TRANSLATE_DIALOGUE: bool = True
    TRANSLATE_SYSTEM_TEXT: bool = False


@dataclass
class Config:
    GENERAL: General = field(default_factory=General)
    API: Api = field(default_factory=Api)
    TRANSLATION: Translation = field(default_factory=Translation)
