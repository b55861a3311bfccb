# ruff: noqa: BLE001
from __future__ import annotations

import asyncio
import inspect
from typing import TYPE_CHECKING, Any

from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Awaitable, Callable

    from models.translation_models import TranslationReady

__all__: list[str] = ["ReadyListener", "TranslationEvents"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

type ReadyListener = Callable[[TranslationReady], Awaitable[Any] | None]


class TranslationEvents:
    """Publishes "translation ready" notifications to subscribed listeners.

    Listeners may be plain functions or coroutine functions. A failing listener is logged
    and does not prevent the others from running.
    """

    def __init__(self) -> None:
        self._listeners: list[ReadyListener] = []

    def __len__(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: ReadyListener) -> Callable[[], None]:
        """Add ``listener``.

        Returns:
            Callable[[], None]: Function removing the listener again.
        """
        self._listeners.append(listener)
        return lambda: self.unsubscribe(listener)

    def unsubscribe(self, listener: ReadyListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def publish(self, event: TranslationReady) -> None:
        """Deliver ``event`` to every listener, awaiting asynchronous ones in order."""
        for listener in list(self._listeners):
            await self.invoke(listener, event)

    @staticmethod
    async def invoke(listener: ReadyListener, event: TranslationReady) -> None:
        """Call a single listener, absorbing its failure."""
        try:
            result: Awaitable[Any] | None = listener(event)
            if inspect.isawaitable(result):
                await result
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Translation ready listener %r failed", listener)
