"""Models for translation requests, results and service status."""

from __future__ import annotations

from dataclasses import dataclass

__all__: list[str] = ["BackendRequestConfig", "ContextEntry", "TranslationReady", "TranslatorStatus"]


@dataclass(frozen=True)
class ContextEntry:
    """A previous (original, translated) pair used to prime the next request.

    Attributes:
        original (str): Source text.
        translated (str): Translation returned by the backend.
    """

    original: str
    translated: str


@dataclass(frozen=True)
class BackendRequestConfig:
    """Per-request generation settings passed to a backend.

    Attributes:
        model (str): Model identifier.
        temperature (float): Sampling temperature (0.0 to 1.0).
        max_tokens (int): Maximum number of tokens in the reply.
        target_language (str): Target language code (e.g., 'zh-CN').
    """

    model: str
    temperature: float
    max_tokens: int
    target_language: str


@dataclass(frozen=True)
class TranslationReady:
    """Published when a background translation has settled.

    Attributes:
        original (str): Text that was requested.
        translated (str): Result; equals ``original`` when the backend failed.
        cache_key (str): Cache key of the request.
    """

    original: str
    translated: str
    cache_key: str

    @property
    def changed(self) -> bool:
        return self.translated != self.original


@dataclass
class TranslatorStatus:
    """Snapshot of the service state for status displays.

    Attributes:
        enabled (bool): The enable flag, regardless of the API key.
        has_api_key (bool): Whether a non-blank API key is configured.
        api_key_prefix (str): First characters of the key, or 'none'.
        provider (str): Backend provider name.
        target_language (str): Target language code.
        cache_size (int): Number of cached translations.
        pending_requests (int): Backend calls currently in flight.
        is_ready (bool): Whether translation requests will reach the backend.
        cache_file (str): Path of the cache file.
    """

    enabled: bool
    has_api_key: bool
    api_key_prefix: str
    provider: str
    target_language: str
    cache_size: int
    pending_requests: int
    is_ready: bool
    cache_file: str
