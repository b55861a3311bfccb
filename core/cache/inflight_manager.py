from __future__ import annotations

import asyncio
from functools import partial
from typing import TYPE_CHECKING

from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable, Coroutine
    from typing import Any


__all__: list[str] = ["PendingRequestRegistry"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class PendingRequestRegistry:
    """Tracks in-flight backend calls so that each cache key has at most one.

    The first caller for a key starts the call; later callers receive the same future until
    it settles. The entry is removed as soon as the future completes, whatever the outcome,
    so a caller arriving after that starts a fresh call.

    Registration is synchronous: between the lookup and the insertion no other coroutine
    can run, which is all the coordination a single event loop needs.
    """

    def __init__(self) -> None:
        self._inflight: dict[str, asyncio.Future[str]] = {}

    def __len__(self) -> int:
        return len(self._inflight)

    def __contains__(self, cache_key: object) -> bool:
        return cache_key in self._inflight

    def get_or_create(
        self, cache_key: str, factory: Callable[[], Coroutine[Any, Any, str]]
    ) -> asyncio.Future[str]:
        """Return the in-flight future for ``cache_key``, starting one with ``factory`` if needed.

        Must be called from within a running event loop.

        Args:
            cache_key (str): Cache key of the request.
            factory (Callable[[], Coroutine[Any, Any, str]]): Creates the backend call. Only invoked
                when no call for the key is in flight.

        Returns:
            asyncio.Future[str]: The shared future. Await it through ``asyncio.shield`` so that a
            cancelled waiter does not cancel the call for everyone else.
        """
        fut: asyncio.Future[str] | None = self._inflight.get(cache_key)
        if fut is not None:
            logger.debug("Joining in-flight translation for key: %s", cache_key[:16])
            return fut

        fut = asyncio.ensure_future(factory())
        self._inflight[cache_key] = fut
        fut.add_done_callback(partial(self._discard, cache_key))
        logger.debug("Marked in-flight start for key: %s", cache_key[:16])
        return fut

    def _discard(self, cache_key: str, fut: asyncio.Future[str]) -> None:
        # A newer call for the same key must not be removed by an older one.
        if self._inflight.get(cache_key) is fut:
            del self._inflight[cache_key]
            logger.debug("In-flight translation settled for key: %s", cache_key[:16])

    async def drain(self) -> None:
        """Wait until every in-flight call has settled.

        Failures are not re-raised here; they belong to the callers of each future.
        """
        while self._inflight:
            pending: list[asyncio.Future[str]] = list(self._inflight.values())
            logger.debug("Waiting for %d in-flight translation(s)", len(pending))
            await asyncio.gather(*pending, return_exceptions=True)
            # Let the done callbacks remove the settled entries.
            await asyncio.sleep(0)
