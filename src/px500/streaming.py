"""Paginated streaming engine shared by every list-like endpoint.

A stream is driven by one background asyncio task per invocation:

    fetch page N -> decode -> stamp page number -> hand off to consumer
        -> wait throttle (or cancellation) -> stop or fetch page N+1

Design:
- Handoff is a rendezvous: the producer puts a page on an unbounded
  asyncio.Queue and then waits on Queue.join(), so it only resumes once the
  consumer has taken the page. At most one page is ever in flight.
- Every wait (handoff, throttle) races against the CancellationToken.
  Cancellation never interrupts an HTTP request already in flight.
- Errors after start never escape the task. They become a page whose
  ``err`` is set, emitted as the last item of the stream.
- The stream is closed with a sentinel when the producer exits, whatever
  the reason.
"""

import asyncio
import dataclasses
import logging
from collections.abc import Awaitable
from enum import Enum
from typing import Any, Callable, Generic, Optional, Protocol, TypeVar

from . import metrics
from .cancellation import CancellationToken
from .errors import DecodeError, Px500Error
from .pagination import page_exceeds

logger = logging.getLogger("px500.streaming")

__all__ = [
    "EmptyPageMode",
    "Page",
    "PageStream",
    "PageStreamer",
    "start_stream",
]


class Page(Protocol):
    page_number: int
    err: Optional[BaseException]

    @property
    def items(self) -> list[Any]: ...


R = TypeVar("R")
P = TypeVar("P", bound=Page)

# Marks the end of a stream in the queue
_END = object()


class EmptyPageMode(str, Enum):
    """What a stream does when the server returns a page without items."""

    EMIT_THEN_STOP = "emit_then_stop"  # hand the empty page over, then close
    STOP_SILENTLY = "stop_silently"  # close without handing it over


class PageStream(Generic[P]):
    """Consumer handle of a running page stream.

    A single-pass async iterator over pages in page-number order, exhausted
    once the producer stops. ``cancel()`` stops production after the page in
    flight; it is idempotent and thread-safe.

    Example:
        >>> async with await client.list_photos(ListRequest(feature="popular")) as stream:
        ...     async for page in stream:
        ...         if page.err:
        ...             raise page.err
        ...         print(page.page_number, len(page.photos))
    """

    def __init__(self, name: str, queue: asyncio.Queue, token: CancellationToken) -> None:
        self.name = name
        self._queue = queue
        self._token = token
        self._task: Optional[asyncio.Task] = None
        self._exhausted = False

    @property
    def cancelled(self) -> bool:
        return self._token.cancelled

    @property
    def done(self) -> bool:
        """True once the producer task has finished."""
        return self._task is not None and self._task.done()

    def cancel(self) -> bool:
        """Stop producing pages. Returns False when already cancelled."""
        return self._token.cancel()

    def __aiter__(self) -> "PageStream[P]":
        return self

    async def __anext__(self) -> P:
        if self._exhausted:
            raise StopAsyncIteration
        item = await self._queue.get()
        self._queue.task_done()
        if item is _END:
            self._exhausted = True
            raise StopAsyncIteration
        return item

    async def collect(self) -> list[P]:
        """Drain the stream into a list."""
        return [page async for page in self]

    async def aclose(self) -> None:
        """Cancel the stream and wait for its producer to finish."""
        self.cancel()
        if self._task is not None and not self._task.done():
            await asyncio.wait({self._task})

    async def __aenter__(self) -> "PageStream[P]":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()


class PageStreamer(Generic[R, P]):
    """Producer side of a page stream.

    Args:
        name: Endpoint name used in logs and metrics (list, search, comments)
        request: Normalized request snapshot; owned exclusively by this streamer
        fetch: Coroutine function fetching the raw body of one page
        decode: Turns a raw body into a page
        error_page: Builds a page carrying only an error: (error, page_number) -> page
        throttle: Seconds to wait between pages
        empty_page_mode: Behavior on a page without items
        queue: Queue shared with the PageStream
        token: Cancellation token shared with the PageStream
    """

    def __init__(
        self,
        *,
        name: str,
        request: R,
        fetch: Callable[[R], Awaitable[bytes]],
        decode: Callable[[bytes], P],
        error_page: Callable[[BaseException, int], P],
        throttle: float,
        empty_page_mode: EmptyPageMode,
        queue: asyncio.Queue,
        token: CancellationToken,
    ) -> None:
        self.name = name
        self._request = request
        self._fetch = fetch
        self._decode = decode
        self._error_page = error_page
        self._throttle = throttle
        self._empty_page_mode = empty_page_mode
        self._max_page_number = getattr(request, "max_page_number", 0)
        self._queue = queue
        self._token = token

    async def run(self) -> None:
        request = self._request
        pages_emitted = 0
        reason = "cancelled"

        metrics.active_streams.labels(endpoint=self.name).inc()
        logger.info(
            "stream_started",
            extra={
                "endpoint": self.name,
                "start_page": request.page_number,
                "max_page_number": self._max_page_number,
            },
        )
        try:
            while True:
                page_number = request.page_number
                page = await self._fetch_page(request)

                if page.err is not None:
                    reason = "error"
                    metrics.pages_total.labels(endpoint=self.name, status="error").inc()
                    await self._emit(page)
                    return

                page.page_number = page_number

                if not page.items:
                    reason = "empty_page"
                    metrics.pages_total.labels(endpoint=self.name, status="empty").inc()
                    if self._empty_page_mode is EmptyPageMode.EMIT_THEN_STOP:
                        await self._emit(page)
                    return

                metrics.pages_total.labels(endpoint=self.name, status="emitted").inc()
                taken = await self._emit(page)
                pages_emitted += 1
                if not taken:
                    return

                if await self._token.wait(self._throttle):
                    return

                if page_exceeds(page_number, self._max_page_number):
                    reason = "max_page_reached"
                    return

                request = dataclasses.replace(request, page_number=page_number + 1)
        finally:
            self._queue.put_nowait(_END)
            metrics.active_streams.labels(endpoint=self.name).dec()
            logger.info(
                "stream_finished",
                extra={
                    "endpoint": self.name,
                    "reason": reason,
                    "pages_emitted": pages_emitted,
                    "last_page": request.page_number,
                },
            )

    async def _fetch_page(self, request: R) -> P:
        page_number = request.page_number
        try:
            raw = await self._fetch(request)
        except Exception as e:
            logger.warning(
                "page_error",
                extra={
                    "endpoint": self.name,
                    "page_number": page_number,
                    "error": str(e),
                    "stage": "fetch",
                    "error_type": type(e).__name__,
                },
            )
            return self._error_page(e, page_number)

        try:
            page = self._decode(raw)
        except Exception as e:
            err = e if isinstance(e, Px500Error) else DecodeError(
                f"decoding {self.name} page {page_number}: {e}"
            )
            if err is not e:
                err.__cause__ = e
            logger.warning(
                "page_error",
                extra={
                    "endpoint": self.name,
                    "page_number": page_number,
                    "stage": "decode",
                    "error": str(e),
                },
            )
            return self._error_page(err, page_number)

        logger.debug(
            "page_fetched",
            extra={
                "endpoint": self.name,
                "page_number": page_number,
                "items": len(page.items),
            },
        )
        return page

    async def _emit(self, page: P) -> bool:
        """Hand ``page`` to the consumer.

        The page is queued even if the token already fired, so a fetch that
        was in flight at cancellation time is still delivered.

        Returns:
            True once the consumer has taken the page, False if cancellation
            fired first.
        """
        self._queue.put_nowait(page)
        taken = asyncio.ensure_future(self._queue.join())
        cancelled = asyncio.ensure_future(self._token.wait())
        try:
            done, _ = await asyncio.wait(
                {taken, cancelled}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for waiter in (taken, cancelled):
                if not waiter.done():
                    waiter.cancel()
        return taken in done


def start_stream(
    *,
    name: str,
    request: R,
    fetch: Callable[[R], Awaitable[bytes]],
    decode: Callable[[bytes], P],
    error_page: Callable[[BaseException, int], P],
    throttle: float,
    empty_page_mode: EmptyPageMode,
) -> PageStream[P]:
    """Start the background producer for ``request`` and return its stream.

    ``request`` must already be a normalized snapshot. Must be called with
    an event loop running.
    """
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()
    token = CancellationToken(loop)
    stream: PageStream[P] = PageStream(name, queue, token)
    streamer = PageStreamer(
        name=name,
        request=request,
        fetch=fetch,
        decode=decode,
        error_page=error_page,
        throttle=throttle,
        empty_page_mode=empty_page_mode,
        queue=queue,
        token=token,
    )
    stream._task = loop.create_task(streamer.run(), name=f"px500-{name}-stream")
    return stream
