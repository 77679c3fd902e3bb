"""Endpoint adapters binding the streaming engine to API resources.

Each adapter knows its path, how to encode a request snapshot as a query
string, how to decode a page, and its fixed throttle and empty-page
behavior. The pagination loop itself lives in px500.streaming.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, Mapping, TypeVar, Union
from urllib.parse import quote

from .models import CommentsPage, CommentsRequest, ListRequest, PhotoPage, SearchRequest
from .streaming import EmptyPageMode
from .transport import Transport

__all__ = [
    "COMMENTS",
    "LIST",
    "SEARCH",
    "Endpoint",
    "comments_query",
    "encode_query",
    "list_query",
    "photo_path",
    "search_query",
]

R = TypeVar("R")
P = TypeVar("P")

QueryValue = Union[str, list[str]]


def _encode_value(value: Any) -> str:
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def encode_query(fields: Mapping[str, Any]) -> dict[str, QueryValue]:
    """Encode request fields as query parameters.

    Empty, zero and false values are left out. Enums encode as their value,
    True as ``true``. List values become repeated keys.

    Example:
        >>> encode_query({"feature": "popular", "page": 2, "tags": ["a", "b"], "only": ""})
        {'feature': 'popular', 'page': '2', 'tags': ['a', 'b']}
    """
    query: dict[str, QueryValue] = {}
    for key, value in fields.items():
        if isinstance(value, (list, tuple)):
            values = [_encode_value(v) for v in value if v is not None and v != ""]
            if values:
                query[key] = values
            continue
        if isinstance(value, Enum):
            value = value.value
        if value is None or value is False or value == "" or value == 0:
            continue
        query[key] = _encode_value(value)
    return query


def list_query(request: ListRequest) -> dict[str, QueryValue]:
    return encode_query(
        {
            "feature": request.feature,
            "user_id": request.user_id,
            "username": request.username,
            "only": request.only,
            "exclude": request.exclude,
            "sort": request.sort,
            "image_size": request.image_size,
            "include_store": request.include_store,
            "tags": request.tags,
            "page": request.page_number,
            "rpp": request.items_per_page,
        }
    )


def search_query(request: SearchRequest) -> dict[str, QueryValue]:
    return encode_query(
        {
            "term": request.term,
            "tag": request.tag,
            "only": request.only,
            "exclude": request.exclude,
            "exclude_nude": request.exclude_nsfw,
            "tags": request.tags,
            "user_id": request.user_id,
            "image_size": request.image_sizes,
            "license_type": request.license_types,
            "sort": request.sort,
            "page": request.page_number,
            "rpp": request.items_per_page,
        }
    )


def comments_query(request: CommentsRequest) -> dict[str, QueryValue]:
    # Comments only page; there is no items-per-page parameter
    return encode_query({"page": request.page_number, "nested": request.nested})


def photo_path(photo_id: Any) -> str:
    return "/photos/" + quote(str(photo_id).strip(), safe="")


@dataclass
class Endpoint(Generic[R, P]):
    """A paginated API resource.

    Attributes:
        name: Short name used in logs and metrics
        path: Builds the request path from a request snapshot
        query: Builds the query parameters from a request snapshot
        decode: Decodes a raw response body into a page
        error_page: Builds a page carrying only an error
        throttle: Seconds to wait between two page fetches
        empty_page_mode: Whether an empty page is handed to the consumer
    """

    name: str
    path: Callable[[R], str]
    query: Callable[[R], dict[str, QueryValue]]
    decode: Callable[[bytes], P]
    error_page: Callable[[BaseException, int], P]
    throttle: float
    empty_page_mode: EmptyPageMode
    method: str = "GET"

    async def fetch(self, transport: Transport, request: R) -> bytes:
        body, _ = await transport.send(
            self.method, self.path(request), params=self.query(request)
        )
        return body


LIST: Endpoint[ListRequest, PhotoPage] = Endpoint(
    name="list",
    path=lambda request: "/photos",
    query=list_query,
    decode=PhotoPage.from_json,
    error_page=PhotoPage.from_error,
    throttle=0.150,
    empty_page_mode=EmptyPageMode.EMIT_THEN_STOP,
)

SEARCH: Endpoint[SearchRequest, PhotoPage] = Endpoint(
    name="search",
    path=lambda request: "/photos/search",
    query=search_query,
    decode=PhotoPage.from_json,
    error_page=PhotoPage.from_error,
    throttle=0.150,
    empty_page_mode=EmptyPageMode.EMIT_THEN_STOP,
)

COMMENTS: Endpoint[CommentsRequest, CommentsPage] = Endpoint(
    name="comments",
    path=lambda request: photo_path(request.photo_id) + "/comments",
    query=comments_query,
    decode=CommentsPage.from_json,
    error_page=CommentsPage.from_error,
    throttle=0.200,
    empty_page_mode=EmptyPageMode.STOP_SILENTLY,
)
