"""Async client for the 500px REST API.

Streaming calls (list_photos, search_photos, comments_for_photo) validate
their request, snapshot it and start a background page stream. One-shot
calls (photo_by_id, upload_photo) return their result directly.

Example:
    >>> async with Client(consumer_key="key") as client:
    ...     async with await client.list_photos(ListRequest(feature=Feature.POPULAR)) as stream:
    ...         async for page in stream:
    ...             if page.err:
    ...                 raise page.err
    ...             for photo in page.photos:
    ...                 print(photo.title)
"""

import functools
import logging
import mimetypes
import uuid
from typing import Any, Callable, Optional

import httpx
import pydantic

from .config import DEFAULT_BASE_URL, Px500Config, get_config
from .endpoints import COMMENTS, LIST, SEARCH, Endpoint, photo_path
from .errors import DecodeError, ValidationError
from .models import (
    CommentsPage,
    CommentsRequest,
    ListRequest,
    Photo,
    PhotoEnvelope,
    PhotoPage,
    SearchRequest,
    UploadRequest,
)
from .pagination import snapshot_request
from .streaming import PageStream, start_stream
from .transport import Transport
from .validation import (
    require_valid,
    validate_comments_request,
    validate_list_request,
    validate_photo_id,
    validate_search_request,
    validate_upload_request,
)

logger = logging.getLogger("px500.client")

__all__ = ["Client"]


class Client:
    """500px API client.

    The transport (credentials, base URL, httpx client) is fixed for the
    lifetime of the client. Closing the client cancels every stream it
    started and waits for their producers before closing the connection
    pool.

    Attributes:
        transport: Underlying authenticated transport
    """

    def __init__(
        self,
        consumer_key: str = "",
        base_url: str = DEFAULT_BASE_URL,
        auth: Optional[httpx.Auth] = None,
        timeout: Optional[httpx.Timeout] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize the client.

        Args:
            consumer_key: Application consumer key
            base_url: API root URL
            auth: Optional httpx.Auth signing every request (e.g. OAuth1)
            timeout: httpx timeout for every request
            transport: Optional httpx transport, e.g. httpx.MockTransport in tests
        """
        self.transport = Transport(
            consumer_key=consumer_key,
            base_url=base_url,
            auth=auth,
            timeout=timeout,
            transport=transport,
        )
        self._streams: list[PageStream] = []

    @classmethod
    def from_config(
        cls,
        config: Optional[Px500Config] = None,
        auth: Optional[httpx.Auth] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "Client":
        """Build a client from PX500_* settings.

        Raises:
            ValidationError: No consumer key is configured.
        """
        config = config or get_config()
        if not config.has_consumer_key():
            raise ValidationError("expecting a consumer key (set PX500_CONSUMER_KEY)")
        return cls(
            consumer_key=config.consumer_key.get_secret_value(),
            base_url=config.base_url,
            auth=auth,
            timeout=httpx.Timeout(
                connect=config.connect_timeout,
                read=config.read_timeout,
                write=config.write_timeout,
                pool=config.pool_timeout,
            ),
            transport=transport,
        )

    async def __aenter__(self) -> "Client":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Cancel running streams and close the transport."""
        streams, self._streams = self._streams, []
        for stream in streams:
            await stream.aclose()
        await self.transport.close()

    # =========================================================================
    # Streaming calls
    # =========================================================================

    async def list_photos(self, request: ListRequest) -> PageStream[PhotoPage]:
        """Stream pages of GET /photos.

        Raises:
            ValidationError: request is None or has no feature.
        """
        return self._start(LIST, request, validate_list_request)

    async def search_photos(self, request: SearchRequest) -> PageStream[PhotoPage]:
        """Stream pages of GET /photos/search.

        Raises:
            ValidationError: request is None.
        """
        return self._start(SEARCH, request, validate_search_request)

    async def comments_for_photo(self, request: CommentsRequest) -> PageStream[CommentsPage]:
        """Stream pages of GET /photos/{photo_id}/comments.

        Unlike photo streams, the trailing empty page is not handed over.

        Raises:
            ValidationError: request is None or has no photo_id.
        """
        return self._start(COMMENTS, request, validate_comments_request)

    def _start(
        self,
        endpoint: Endpoint,
        request: Any,
        validate: Callable[[Any], list[str]],
    ) -> PageStream:
        require_valid(validate(request))
        snapshot = snapshot_request(request)

        stream = start_stream(
            name=endpoint.name,
            request=snapshot,
            fetch=functools.partial(endpoint.fetch, self.transport),
            decode=endpoint.decode,
            error_page=endpoint.error_page,
            throttle=endpoint.throttle,
            empty_page_mode=endpoint.empty_page_mode,
        )

        self._streams = [s for s in self._streams if not s.done]
        self._streams.append(stream)
        return stream

    # =========================================================================
    # One-shot calls
    # =========================================================================

    async def photo_by_id(self, photo_id: str) -> Photo:
        """Fetch a single photo.

        Raises:
            ValidationError: photo_id is empty.
            APIError: Non-success response, e.g. 404 for an unknown photo.
            TransportError: The request could not be completed.
            DecodeError: The response is not a photo.
        """
        require_valid(validate_photo_id(photo_id))
        body, _ = await self.transport.send("GET", photo_path(photo_id))
        return self._decode_photo(body)

    async def upload_photo(self, request: UploadRequest) -> Photo:
        """Upload a photo with its metadata.

        The metadata travels as query parameters; the file goes in a
        multipart body under the ``file`` form field, together with a
        ``Content-Type`` form field when the content type is known.

        Raises:
            ValidationError: request is None, or lacks a body or photo info.
        """
        require_valid(validate_upload_request(request))

        filename = request.filename.strip() or str(uuid.uuid4())
        content_type = request.content_type.strip() or mimetypes.guess_type(filename)[0] or ""

        if content_type:
            files = {"file": (filename, request.body, content_type)}
            data = {"Content-Type": content_type}
        else:
            files = {"file": (filename, request.body)}
            data = None

        logger.info(
            "photo_upload_started",
            extra={"upload_filename": filename, "content_type": content_type or None},
        )
        body, _ = await self.transport.send(
            "POST",
            "/photos/upload",
            params=request.photo_info.upload_params(),
            data=data,
            files=files,
        )
        photo = self._decode_photo(body)
        logger.info("photo_uploaded", extra={"photo_id": photo.id})
        return photo

    @staticmethod
    def _decode_photo(body: bytes) -> Photo:
        try:
            envelope = PhotoEnvelope.model_validate_json(body)
        except pydantic.ValidationError as e:
            raise DecodeError(f"decoding photo response: {e}") from e
        if envelope.photo is None:
            raise DecodeError("response carries no photo")
        return envelope.photo
