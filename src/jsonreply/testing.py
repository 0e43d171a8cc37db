"""Helpers for exercising mounted handlers without a real server."""

from __future__ import annotations

from typing import Awaitable, Mapping, TypeVar

import anyio
import httpx

from .http.server import BufferedResponseWriter, HttpRequest, LowLevelHandler, http_error


T = TypeVar("T")


async def with_timeout(awaitable: Awaitable[T], timeout: float) -> T:
    """Await with a deadline; raises TimeoutError when it passes."""
    with anyio.fail_after(timeout):
        return await awaitable


def _to_http_request(request: httpx.Request) -> HttpRequest:
    return HttpRequest(
        method=request.method,
        path=request.url.path,
        headers={k.lower(): v for k, v in request.headers.items()},
        body=request.content,
        remote_addr="127.0.0.1:0",
    )


def mounted_transport(handlers: Mapping[str, LowLevelHandler]) -> httpx.MockTransport:
    """An httpx transport that serves requests from `handlers` in-process.

    Lookup is by exact path; anything else gets a plain-text 404. Use with
    httpx.AsyncClient:

        routes = {}
        add_handler(routes.__setitem__, "/items", get_items)
        async with httpx.AsyncClient(transport=mounted_transport(routes), base_url="http://test") as c:
            ...
    """

    async def dispatch(request: httpx.Request) -> httpx.Response:
        writer = BufferedResponseWriter()
        handler = handlers.get(request.url.path)
        if handler is None:
            await http_error(writer, "404 page not found", 404)
        else:
            await handler(writer, _to_http_request(request))
        result = writer.result()
        return httpx.Response(result.status, headers=dict(result.headers or {}), content=result.body)

    return httpx.MockTransport(dispatch)


__all__ = ["with_timeout", "mounted_transport"]
