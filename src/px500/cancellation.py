"""One-shot cancellation signal shared between a caller and a page stream."""

import asyncio
import logging
import threading
from typing import Optional

logger = logging.getLogger("px500.cancellation")

__all__ = ["CancellationToken"]


class CancellationToken:
    """Single-fire latch.

    The first ``cancel()`` fires the token and wakes every ``wait()``; later
    calls do nothing. ``cancel()`` may be called from the event loop thread
    or from any other thread; ``wait()`` must run on the loop the token is
    bound to.

    Example:
        >>> token = CancellationToken()
        >>> token.cancel()
        True
        >>> token.cancel()
        False
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        if loop is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                loop = None
        self._loop = loop
        self._lock = threading.Lock()
        self._fired = False
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        with self._lock:
            return self._fired

    def cancel(self) -> bool:
        """Fire the token.

        Returns:
            True if this call fired the token, False if it had already fired.
        """
        with self._lock:
            if self._fired:
                return False
            self._fired = True

        self._wake()
        logger.debug("cancellation_requested")
        return True

    def _wake(self) -> None:
        loop = self._loop
        if loop is None:
            self._event.set()
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is loop:
            self._event.set()
        elif not loop.is_closed():
            loop.call_soon_threadsafe(self._event.set)

    async def wait(self, timeout: Optional[float] = None) -> bool:
        """Wait until the token fires or ``timeout`` seconds pass.

        Returns:
            True if the token fired, False if the timeout elapsed first.
        """
        if self.cancelled:
            return True
        if timeout is None:
            await self._event.wait()
            return True
        if timeout <= 0:
            return False
        try:
            await asyncio.wait_for(self._event.wait(), timeout)
        except asyncio.TimeoutError:
            return self.cancelled
        return True
