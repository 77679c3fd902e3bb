"""Unit tests for the authenticated transport.

Tests Transport with:
- Consumer key injection
- Default headers and timeouts
- Error mapping (APIError, TransportError)
- Request metrics
"""

import httpx
import pytest
from prometheus_client import REGISTRY

from px500.errors import APIError, TransportError
from px500.transport import Transport, status_line

BASE_URL = "https://api.test/v1"


def transport_for(handler, consumer_key="key-123", **kwargs) -> Transport:
    return Transport(
        consumer_key=consumer_key,
        base_url=BASE_URL,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


class TestConfiguration:
    def test_base_url_stripped(self):
        transport = Transport(base_url="https://api.test/v1/")
        assert transport.base_url == "https://api.test/v1"

    def test_default_timeouts(self):
        timeout = Transport()._client.timeout
        assert timeout.connect == 5.0
        assert timeout.read == 30.0
        assert timeout.write == 30.0
        assert timeout.pool == 5.0

    def test_headers(self):
        headers = Transport()._client.headers
        assert headers["Accept"] == "application/json"
        assert headers["User-Agent"] == "px500-python/1.0"

    def test_consumer_key_trimmed(self):
        assert Transport(consumer_key="  abc  ").consumer_key == "abc"


class TestSend:
    """send() injects credentials and returns the raw body."""

    @pytest.mark.asyncio
    async def test_injects_consumer_key(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, content=b'{"ok": true}', headers={"X-Rate": "9"})

        async with transport_for(handler) as transport:
            body, headers = await transport.send("GET", "/photos", params={"feature": "popular"})

        assert body == b'{"ok": true}'
        assert headers["X-Rate"] == "9"
        assert seen[0].url.path == "/v1/photos"
        assert seen[0].url.params["feature"] == "popular"
        assert seen[0].url.params["consumer_key"] == "key-123"

    @pytest.mark.asyncio
    async def test_repeated_keys(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, content=b"{}")

        async with transport_for(handler) as transport:
            await transport.send("GET", "/photos/search", params={"image_size": ["2", "4"]})

        assert seen[0].url.params.get_list("image_size") == ["2", "4"]

    @pytest.mark.asyncio
    async def test_no_key_configured(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, content=b"{}")

        async with transport_for(handler, consumer_key="") as transport:
            await transport.send("GET", "/photos")

        assert "consumer_key" not in seen[0].url.params

    @pytest.mark.asyncio
    async def test_auth_applied(self):
        class StampAuth(httpx.Auth):
            def auth_flow(self, request):
                request.headers["Authorization"] = "OAuth signed"
                yield request

        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, content=b"{}")

        async with transport_for(handler, auth=StampAuth()) as transport:
            await transport.send("GET", "/photos")

        assert seen[0].headers["Authorization"] == "OAuth signed"


class TestErrors:
    @pytest.mark.asyncio
    async def test_error_body_becomes_message(self):
        async with transport_for(lambda r: httpx.Response(403, content=b"Forbidden: bad key")) as t:
            with pytest.raises(APIError) as exc_info:
                await t.send("GET", "/photos")

        assert exc_info.value.status_code == 403
        assert exc_info.value.message == "Forbidden: bad key"

    @pytest.mark.asyncio
    async def test_empty_error_body_uses_status_line(self):
        async with transport_for(lambda r: httpx.Response(503)) as t:
            with pytest.raises(APIError, match="^503 Service Unavailable$"):
                await t.send("GET", "/photos")

    @pytest.mark.asyncio
    async def test_network_error_wrapped(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        async with transport_for(handler) as t:
            with pytest.raises(TransportError, match="timed out") as exc_info:
                await t.send("GET", "/photos")

        assert isinstance(exc_info.value.__cause__, httpx.ReadTimeout)

    def test_status_line(self):
        assert status_line(httpx.Response(404)) == "404 Not Found"
        assert status_line(httpx.Response(299)) == "299"


class TestRequestMetrics:
    @pytest.mark.asyncio
    async def test_requests_counted_by_status(self):
        def count(status):
            labels = {"method": "DELETE", "status": status}
            return REGISTRY.get_sample_value("px500_requests_total", labels) or 0.0

        before_ok, before_missing = count("200"), count("404")

        responses = iter([httpx.Response(200, content=b"{}"), httpx.Response(404)])
        async with transport_for(lambda r: next(responses)) as t:
            await t.send("DELETE", "/photos/1")
            with pytest.raises(APIError):
                await t.send("DELETE", "/photos/2")

        assert count("200") == before_ok + 1
        assert count("404") == before_missing + 1
