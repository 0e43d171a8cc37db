"""End-to-end tests: typed handler -> writer -> httpx client -> extract_payload."""

from __future__ import annotations

import anyio
import httpx
import pytest

from jsonreply import (
    ErrorPayloadDecodeError,
    HttpRequest,
    RemoteError,
    add_handler,
    aextract_payload,
    bad_request,
    extract_payload,
    not_found,
    ok,
    read_user_ip,
)
from jsonreply.http import http_error
from jsonreply.testing import mounted_transport, with_timeout


ITEMS = {"1": {"id": "1", "name": "kettle", "tags": ["kitchen"], "price": 12.5}}


async def get_item(req: HttpRequest):
    item_id = req.headers.get("x-item-id", "")
    if not item_id.isdigit():
        return bad_request(ValueError(f"invalid id {item_id!r}"))
    if item_id not in ITEMS:
        return not_found(LookupError(f"item {item_id} not found"))
    return ok(ITEMS[item_id])


async def whoami(req: HttpRequest):
    return ok({"ip": read_user_ip(req)})


async def silent(_req: HttpRequest):
    return None


@pytest.fixture
def routes():
    table = {}
    add_handler(table.__setitem__, "/item", get_item)
    add_handler(table.__setitem__, "/whoami", whoami)
    add_handler(table.__setitem__, "/silent", silent)

    async def plain_400(writer, _req):
        await http_error(writer, "not json at all", 400)

    table["/plain-400"] = plain_400
    return table


@pytest.fixture
async def client(routes):
    async with httpx.AsyncClient(transport=mounted_transport(routes), base_url="http://test") as c:
        yield c


class TestRoundTrip:
    """Test that what the server writes is what the client decodes."""

    @pytest.mark.parametrize(
        "payload",
        [0, "text", [1, "two", None], {"nested": {"list": [1.5, True]}}, {"unicode": "žluťoučký"}],
    )
    async def test_ok_round_trip(self, payload):
        table = {}

        async def handler(_req):
            return ok(payload)

        add_handler(table.__setitem__, "/p", handler)
        async with httpx.AsyncClient(transport=mounted_transport(table), base_url="http://test") as c:
            resp = await c.get("/p")

        assert resp.headers["content-type"] == "application/json; charset=utf-8"
        assert await aextract_payload(resp) == payload

    async def test_item_found(self, client):
        resp = await with_timeout(client.get("/item", headers={"X-Item-Id": "1"}), timeout=5.0)
        assert extract_payload(resp) == ITEMS["1"]

    async def test_bad_request_round_trip(self, client):
        """The client error carries the server-side message."""
        resp = await client.get("/item", headers={"X-Item-Id": "abc"})

        assert resp.status_code == 400
        with pytest.raises(RemoteError) as exc_info:
            await aextract_payload(resp)
        assert str(exc_info.value) == str(ValueError("invalid id 'abc'"))

    async def test_not_found_round_trip(self, client):
        resp = await client.get("/item", headers={"X-Item-Id": "9"})

        with pytest.raises(RemoteError) as exc_info:
            extract_payload(resp)
        assert exc_info.value.status_code == 404
        assert exc_info.value.message == "item 9 not found"

    async def test_plain_text_error_body(self, client):
        """A non-JSON 400 body is reported as a decode error, not a crash."""
        resp = await client.get("/plain-400")

        with pytest.raises(ErrorPayloadDecodeError) as exc_info:
            await aextract_payload(resp)
        assert exc_info.value.body == b"not json at all\n"

    async def test_unmounted_path(self, client):
        resp = await client.get("/nowhere")

        assert resp.status_code == 404
        with pytest.raises(ErrorPayloadDecodeError):
            extract_payload(resp)

    async def test_silent_handler(self, client):
        """Nothing written by the handler leaves an empty body."""
        resp = await client.get("/silent")

        assert resp.content == b""
        assert "content-type" not in resp.headers

    async def test_user_ip_from_headers(self, client):
        resp = await client.get("/whoami", headers={"X-Forwarded-For": "5.6.7.8"})
        assert extract_payload(resp) == {"ip": "5.6.7.8"}

    async def test_user_ip_falls_back_to_remote_addr(self, client):
        resp = await client.get("/whoami")
        assert extract_payload(resp) == {"ip": "127.0.0.1:0"}


class TestMountedTimeouts:
    """Test deadlines on requests served by mounted handlers."""

    @staticmethod
    def slow_transport(delay: float) -> httpx.MockTransport:
        table = {}

        async def report(_req):
            await anyio.sleep(delay)
            return ok({"status": "ready"})

        add_handler(table.__setitem__, "/report", report)
        return mounted_transport(table)

    async def test_handler_within_deadline(self):
        async with httpx.AsyncClient(transport=self.slow_transport(0.01), base_url="http://test") as c:
            resp = await with_timeout(c.get("/report"), timeout=1.0)

        assert extract_payload(resp) == {"status": "ready"}

    async def test_slow_handler_times_out(self):
        """A handler that outlives the deadline surfaces as TimeoutError."""
        async with httpx.AsyncClient(transport=self.slow_transport(5.0), base_url="http://test") as c:
            with pytest.raises(TimeoutError):
                await with_timeout(c.get("/report"), timeout=0.1)
