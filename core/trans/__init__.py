"""Translation service and backend interfaces.

This package provides the translation service, the pluggable backend interface with its
error types, the context window and "translation ready" events.
"""

from core.trans.context_window import ContextWindow
from core.trans.events import ReadyListener, TranslationEvents
from core.trans.interface import (
    BackendError,
    BackendHTTPError,
    BackendResponseError,
    BackendTimeoutError,
    TranslationBackend,
)
from core.trans.service import TranslationService

__all__: list[str] = [
    "BackendError",
    "BackendHTTPError",
    "BackendResponseError",
    "BackendTimeoutError",
    "ContextWindow",
    "ReadyListener",
    "TranslationBackend",
    "TranslationEvents",
    "TranslationService",
]
