from __future__ import annotations

import asyncio
import contextlib
from typing import TYPE_CHECKING, ClassVar

from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable

__all__: list[str] = ["DebouncedSaver"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class DebouncedSaver[T]:
    """Collapses bursts of save requests into a single delayed write.

    Each ``schedule()`` cancels the pending delayed task and starts a new one, so the write
    happens ``delay`` seconds after the last request. When the timer fires, ``snapshot`` is
    called on the event loop to capture the state at that moment, and ``write`` receives the
    snapshot in a worker thread.

    Attributes:
        DEFAULT_DELAY_SEC (ClassVar[float]): Quiet period before a scheduled write.
    """

    DEFAULT_DELAY_SEC: ClassVar[float] = 5.0

    def __init__(
        self,
        snapshot: Callable[[], T],
        write: Callable[[T], object],
        *,
        delay: float | None = None,
    ) -> None:
        """Initialize the saver.

        Args:
            snapshot (Callable[[], T]): Captures the state to persist. Runs on the event loop.
            write (Callable[[T], object]): Blocking function persisting a snapshot.
            delay (float | None): Quiet period in seconds. Defaults to DEFAULT_DELAY_SEC.
        """
        self._snapshot: Callable[[], T] = snapshot
        self._write: Callable[[T], object] = write
        self.delay: float = self.DEFAULT_DELAY_SEC if delay is None else delay
        self._timer: asyncio.Task[None] | None = None
        self._writing: asyncio.Task[None] | None = None
        self._write_count: int = 0
        self._generation: int = 0

    @property
    def pending(self) -> bool:
        """Whether a delayed write is scheduled and its timer has not fired yet."""
        return self._timer is not None and not self._timer.done()

    @property
    def write_count(self) -> int:
        """Number of writes started."""
        return self._write_count

    def schedule(self) -> None:
        """Request a write after the quiet period, replacing any pending request.

        Must be called from within a running event loop.
        """
        self.cancel()
        self._timer = asyncio.create_task(self._delayed_write(), name="debounced_cache_save")

    def cancel(self) -> None:
        """Drop the pending write, if any. A write already running is not interrupted."""
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    async def discard(self) -> None:
        """Drop the pending write and wait for a write in progress to finish.

        Writes that were waiting for the running one are skipped, so no state captured before
        this call reaches the file afterwards.
        """
        self._generation += 1
        self.cancel()
        if self._writing is not None:
            await asyncio.shield(self._writing)

    async def flush(self) -> None:
        """Write now if a write was pending, and wait for any write in progress."""
        if self.pending:
            timer: asyncio.Task[None] | None = self._timer
            self.cancel()
            if timer is not None:
                with contextlib.suppress(asyncio.CancelledError):
                    await timer
            await self._start_write()
        elif self._writing is not None:
            await self._writing

    async def _delayed_write(self) -> None:
        await asyncio.sleep(self.delay)
        # The timer has fired: from here on schedule() starts an independent write.
        self._timer = None
        await self._start_write()

    async def _start_write(self) -> None:
        # Wait for an overlapping write so that files are written in request order.
        generation: int = self._generation
        if self._writing is not None:
            await self._writing
            if generation != self._generation:
                logger.debug("Debounced save discarded")
                return
        state: T = self._snapshot()
        self._write_count += 1
        logger.debug("Writing debounced save (%d)", self._write_count)
        self._writing = asyncio.create_task(self._write_in_thread(state))
        try:
            await asyncio.shield(self._writing)
        finally:
            if self._writing is not None and self._writing.done():
                self._writing = None

    async def _write_in_thread(self, state: T) -> None:
        try:
            await asyncio.to_thread(self._write, state)
        except Exception:
            logger.exception("Debounced save failed")
