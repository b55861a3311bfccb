"""Render pipeline stage that swaps drawn text for its translation.

The host keeps its own draw routine; ``translating_draw`` wraps it so the first argument
(the text) goes through the translation service before the routine sees it. Each draw
routine belongs to a category, and each category is switched on or off in the
``[TRANSLATION]`` section of the configuration.
"""

from __future__ import annotations

from enum import StrEnum
from functools import wraps
from typing import TYPE_CHECKING, Any

from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable

    from core.trans.events import ReadyListener
    from core.trans.service import TranslationService

__all__: list[str] = ["RenderCategory", "should_translate", "translating_draw"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class RenderCategory(StrEnum):
    """Kinds of text drawn by the host."""

    UI = "ui"
    DIALOGUE = "dialogue"
    SYSTEM = "system"


def should_translate(service: TranslationService, category: RenderCategory) -> bool:
    """Whether text of ``category`` is translated with the service's current settings."""
    if not service.is_enabled():
        return False

    trans = service.config.TRANSLATION
    match category:
        case RenderCategory.UI:
            return trans.TRANSLATE_UI
        case RenderCategory.DIALOGUE:
            return trans.TRANSLATE_DIALOGUE
        case RenderCategory.SYSTEM:
            return trans.TRANSLATE_SYSTEM_TEXT


def translating_draw[R](
    service: TranslationService,
    category: RenderCategory,
    *,
    on_ready: ReadyListener | None = None,
) -> Callable[[Callable[..., R]], Callable[..., R]]:
    """Decorate a draw routine whose first positional argument is the text to draw.

    The wrapped routine always draws immediately: a known translation replaces the text,
    otherwise the original is drawn and ``on_ready`` fires once the translation arrives so
    the host can redraw.

    Args:
        service (TranslationService): Service answering the translations.
        category (RenderCategory): Category of the wrapped routine.
        on_ready (ReadyListener | None): Called with the result of a background request.

    Returns:
        Callable: Decorator for the draw routine.
    """

    def decorator(draw: Callable[..., R]) -> Callable[..., R]:
        @wraps(draw)
        def wrapper(text: Any, *args: Any, **kwargs: Any) -> R:
            if isinstance(text, str) and text and should_translate(service, category):
                text = service.translate(text, on_ready=on_ready)
            return draw(text, *args, **kwargs)

        return wrapper

    logger.debug("Translating draw stage created for category '%s'", category)
    return decorator
