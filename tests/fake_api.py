"""In-memory 500px backend served through httpx.MockTransport.

Shared by the unit tests; imported as a plain module (tests/ is put on
sys.path by conftest.py).
"""

import json
from typing import Any

import httpx

from px500.client import Client

BASE_URL = "https://api.test/v1"
CONSUMER_KEY = "test-consumer-key"


# =============================================================================
# Fake API
# =============================================================================


def make_photo(photo_id: int, **fields: Any) -> dict[str, Any]:
    """Photo JSON as the API returns it."""
    photo = {
        "id": photo_id,
        "user_id": 7,
        "name": f"Photo {photo_id}",
        "times_viewed": 10 * photo_id,
        "rating": 42.5,
        "privacy": False,
        "user": {"id": 7, "username": "ansel", "userpic_url": "https://pics.test/7.jpg"},
        "images": [{"size": 2, "url": f"https://pics.test/{photo_id}.jpg", "format": "jpeg"}],
    }
    photo.update(fields)
    return photo


def make_comment(comment_id: int, **fields: Any) -> dict[str, Any]:
    comment = {
        "id": comment_id,
        "body": f"Comment {comment_id}",
        "user_id": 8,
        "user": {"id": 8, "username": "dorothea"},
        "created_at": "2016-05-04T10:00:00-04:00",
    }
    comment.update(fields)
    return comment


class FakeAPI:
    """In-memory 500px backend.

    Pages are keyed by page number; a page number without an entry answers
    with an empty page. Every received request is recorded.
    """

    def __init__(self, consumer_key: str = CONSUMER_KEY) -> None:
        self.consumer_key = consumer_key
        self.requests: list[httpx.Request] = []
        self.photo_pages: dict[int, list[dict[str, Any]]] = {}
        self.comment_pages: dict[int, list[dict[str, Any]]] = {}
        self.photos: dict[str, dict[str, Any]] = {}
        # page number -> (status code, body)
        self.failures: dict[int, tuple[int, bytes]] = {}
        # page number -> raw body returned with a 200
        self.raw_pages: dict[int, bytes] = {}

    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]

    def pages_requested(self) -> list[int]:
        return [int(r.url.params.get("page", "0")) for r in self.requests]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.url.params.get("consumer_key") != self.consumer_key:
            return httpx.Response(401, json={"error": "Consumer key missing or invalid"})

        path = request.url.path.removeprefix("/v1")
        page = int(request.url.params.get("page", "1"))

        if request.method == "POST" and path == "/photos/upload":
            return self._upload(request)

        if path in ("/photos", "/photos/search") or path.endswith("/comments"):
            if page in self.failures:
                status, body = self.failures[page]
                return httpx.Response(status, content=body)
            if page in self.raw_pages:
                return httpx.Response(200, content=self.raw_pages[page])

        if path in ("/photos", "/photos/search"):
            return httpx.Response(
                200,
                json={
                    "feature": request.url.params.get("feature"),
                    "filters": {"category": False, "exclude": False},
                    "current_page": page,
                    "total_pages": len(self.photo_pages),
                    "total_items": sum(len(p) for p in self.photo_pages.values()),
                    "photos": self.photo_pages.get(page, []),
                },
            )

        if path.endswith("/comments"):
            return httpx.Response(
                200,
                json={
                    "media_type": "photo",
                    "current_page": page,
                    "total_pages": len(self.comment_pages),
                    "total_items": sum(len(p) for p in self.comment_pages.values()),
                    "comments": self.comment_pages.get(page, []),
                },
            )

        photo_id = path.removeprefix("/photos/")
        if request.method == "GET" and photo_id in self.photos:
            return httpx.Response(200, json={"photo": self.photos[photo_id]})

        return httpx.Response(404)

    def _upload(self, request: httpx.Request) -> httpx.Response:
        photo: dict[str, Any] = {"id": 99}
        for key, value in request.url.params.multi_items():
            if key == "consumer_key":
                continue
            if key == "tags":
                photo.setdefault("tags", []).append(value)
            else:
                photo[key] = value
        return httpx.Response(200, json={"photo": photo})


def json_lines(text: str) -> list[Any]:
    return [json.loads(line) for line in text.splitlines() if line.strip()]


def make_client(api: FakeAPI, consumer_key: str = CONSUMER_KEY) -> Client:
    return Client(
        consumer_key=consumer_key,
        base_url=BASE_URL,
        transport=httpx.MockTransport(api.handler),
    )
