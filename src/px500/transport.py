"""Authenticated HTTP transport for the 500px REST API.

Wraps a long-lived httpx.AsyncClient. Every request gets the application
consumer key injected as the ``consumer_key`` query parameter; requests can
additionally be signed by any ``httpx.Auth`` (for example an OAuth1 signer)
passed at construction.

The transport is fixed at construction time. Tests swap the network out by
passing an ``httpx.AsyncBaseTransport`` such as ``httpx.MockTransport``.
"""

import logging
from typing import Any, Optional

import httpx

from . import metrics
from .config import DEFAULT_BASE_URL
from .errors import APIError, TransportError
from .timing import timed_operation

logger = logging.getLogger("px500.transport")

__all__ = ["Transport", "status_line"]


def status_line(response: httpx.Response) -> str:
    """Status line of a response, e.g. ``404 Not Found``."""
    reason = response.reason_phrase or ""
    return f"{response.status_code} {reason}".strip()


class Transport:
    """Performs authenticated requests and returns raw response bodies.

    Attributes:
        base_url: API root URL, without trailing slash

    Example:
        >>> async with Transport(consumer_key="key") as transport:
        ...     body, headers = await transport.send("GET", "/photos", params={"feature": "popular"})
    """

    # Timeout configuration
    CONNECT_TIMEOUT = 5.0  # seconds
    READ_TIMEOUT = 30.0  # seconds
    WRITE_TIMEOUT = 30.0  # seconds
    POOL_TIMEOUT = 5.0  # seconds

    USER_AGENT = "px500-python/1.0"

    def __init__(
        self,
        consumer_key: str = "",
        base_url: str = DEFAULT_BASE_URL,
        auth: Optional[httpx.Auth] = None,
        timeout: Optional[httpx.Timeout] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize the transport.

        Args:
            consumer_key: Application consumer key injected into every request
            base_url: API root URL
            auth: Optional request signer applied to every request
            timeout: httpx timeout (defaults to the class timeouts)
            transport: Optional httpx transport, e.g. httpx.MockTransport in tests
        """
        self.base_url = base_url.rstrip("/")
        self._consumer_key = consumer_key.strip()
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            auth=auth,
            headers={
                "Accept": "application/json",
                "User-Agent": self.USER_AGENT,
            },
            timeout=timeout
            or httpx.Timeout(
                connect=self.CONNECT_TIMEOUT,
                read=self.READ_TIMEOUT,
                write=self.WRITE_TIMEOUT,
                pool=self.POOL_TIMEOUT,
            ),
            transport=transport,
        )

    @property
    def consumer_key(self) -> str:
        return self._consumer_key

    async def __aenter__(self) -> "Transport":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the httpx client and release connections."""
        await self._client.aclose()

    def _with_credentials(self, params: Optional[dict[str, Any]]) -> dict[str, Any]:
        merged = dict(params or {})
        if self._consumer_key:
            merged["consumer_key"] = self._consumer_key
        return merged

    async def send(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        data: Optional[dict[str, Any]] = None,
        files: Optional[dict[str, Any]] = None,
    ) -> tuple[bytes, httpx.Headers]:
        """Send one request, exactly once.

        Args:
            method: HTTP method (GET, POST, ...)
            path: API path relative to base_url (e.g. /photos/search)
            params: Query parameters; list values become repeated keys
            data: Multipart/form fields
            files: Multipart files

        Returns:
            (raw response body, response headers)

        Raises:
            APIError: Response status outside 2xx. The message is the response
                body when present, otherwise the status line.
            TransportError: The request could not be completed.
        """
        with timed_operation(
            "api_request",
            logger,
            extra={"method": method, "path": path},
            histogram=metrics.request_duration_seconds.labels(method=method),
        ) as ctx:
            try:
                response = await self._client.request(
                    method,
                    path,
                    params=self._with_credentials(params),
                    data=data,
                    files=files,
                )
            except httpx.HTTPError as e:
                metrics.requests_total.labels(method=method, status="error").inc()
                raise TransportError(f"HTTP error: {e}") from e

            ctx["status_code"] = response.status_code
            metrics.requests_total.labels(
                method=method, status=str(response.status_code)
            ).inc()

            if not response.is_success:
                body = response.content
                message = body.decode("utf-8", errors="replace") if body else ""
                raise APIError(response.status_code, message or status_line(response))

            return response.content, response.headers
