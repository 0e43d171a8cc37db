"""Adapter between typed handlers and a low-level response writer.

A handler here is a coroutine that takes an HttpRequest and returns a
Response (or None). The hosting server, on the other hand, expects a
coroutine that is handed a ResponseWriter and writes the reply itself.
`convert()` bridges the two, and `add_handler()` registers the converted
coroutine through whatever mount function the hosting server exposes.

Routing, connection handling and the server loop are the host's business.
Two writers are provided:
- BufferedResponseWriter: collects the reply in memory (tests, in-process hosts)
- StreamResponseWriter: writes HTTP/1.1 onto an AnyIO byte stream
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any, Awaitable, Callable, Mapping, Protocol

from anyio.abc import ByteSendStream

from ..response import Response


logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json; charset=utf-8"
TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"

HeaderMap = dict[str, str]


@dataclass(frozen=True, slots=True)
class HttpRequest:
    method: str
    path: str
    version: str = "HTTP/1.1"
    headers: HeaderMap = field(default_factory=dict)
    body: bytes = b""
    # Raw peer address as the host reports it, usually "host:port".
    remote_addr: str = ""

    def header(self, name: str) -> str:
        """Case-insensitive header lookup; "" when absent."""
        value = self.headers.get(name.lower())
        if value is not None:
            return value
        wanted = name.lower()
        for k, v in self.headers.items():
            if k.lower() == wanted:
                return v
        return ""


@dataclass(frozen=True, slots=True)
class HttpResponse:
    status: int = 200
    headers: Mapping[str, str] | None = None
    body: bytes = b""

    def text(self, encoding: str = "utf-8") -> str:
        return self.body.decode(encoding)


class ResponseWriter(Protocol):
    headers: HeaderMap

    def write_header(self, status: int) -> None:
        ...

    async def write(self, data: bytes) -> int:
        ...


Handler = Callable[[HttpRequest], Awaitable[Response | None]]
LowLevelHandler = Callable[[ResponseWriter, HttpRequest], Awaitable[None]]
Mount = Callable[[str, LowLevelHandler], Any]


def _status_line(status: int) -> str:
    try:
        text = HTTPStatus(status).phrase
    except ValueError:
        text = ""
    return f"HTTP/1.1 {status} {text}\r\n"


def _set_header(headers: HeaderMap, name: str, value: str | None) -> None:
    """Replace `name` whatever its casing; None just removes it."""
    for k in [k for k in headers if k.lower() == name]:
        del headers[k]
    if value is not None:
        headers[name] = value


def _normalize_headers(headers: Mapping[str, str] | None) -> dict[str, str]:
    if not headers:
        return {}
    return {k.lower(): v for k, v in headers.items()}


class BufferedResponseWriter:
    """Collects a reply in memory.

    Headers are snapshotted when the status is written; later changes to
    `headers` do not affect the reply.
    """

    def __init__(self) -> None:
        self.headers: HeaderMap = {}
        self.status: int | None = None
        self.wrote_header = False
        self._sent_headers: HeaderMap = {}
        self._body = bytearray()

    def write_header(self, status: int) -> None:
        if self.wrote_header:
            logger.warning("superfluous write_header(%d) call, status already %s", status, self.status)
            return
        self.wrote_header = True
        self.status = int(status)
        self._sent_headers = _normalize_headers(self.headers)

    async def write(self, data: bytes) -> int:
        if not self.wrote_header:
            self.write_header(200)
        self._body.extend(data)
        return len(data)

    @property
    def body(self) -> bytes:
        return bytes(self._body)

    def result(self) -> HttpResponse:
        if not self.wrote_header:
            # What a host sends when the handler wrote nothing: an implicit 200.
            return HttpResponse(status=200, headers=_normalize_headers(self.headers), body=b"")
        return HttpResponse(status=self.status or 200, headers=dict(self._sent_headers), body=self.body)


class StreamResponseWriter:
    """Writes an HTTP/1.1 reply onto an AnyIO byte stream.

    The status line and headers go out together with the first body chunk.
    The reply is delimited by the connection closing (Connection: close), so
    no content-length is computed.
    """

    def __init__(self, stream: ByteSendStream):
        self._stream = stream
        self.headers: HeaderMap = {}
        self.status: int | None = None
        self._head_sent = False

    def write_header(self, status: int) -> None:
        if self.status is not None:
            logger.warning("superfluous write_header(%d) call, status already %s", status, self.status)
            return
        self.status = int(status)

    def _head(self) -> bytes:
        headers = _normalize_headers(self.headers)
        headers.setdefault("connection", "close")
        start = _status_line(self.status or 200).encode("ascii")
        head = b"".join(f"{k}: {v}\r\n".encode("latin-1") for k, v in headers.items())
        return start + head + b"\r\n"

    async def write(self, data: bytes) -> int:
        if self.status is None:
            self.write_header(200)
        if not self._head_sent:
            self._head_sent = True
            await self._stream.send(self._head() + data)
        elif data:
            await self._stream.send(data)
        return len(data)

    async def finish(self) -> None:
        """Flush the head if a status was set but no body followed."""
        if self.status is not None and not self._head_sent:
            self._head_sent = True
            await self._stream.send(self._head())


async def http_error(writer: ResponseWriter, message: str, status: int) -> None:
    """Plain-text error reply; the body is the message plus a newline."""
    _set_header(writer.headers, "content-length", None)
    _set_header(writer.headers, "content-type", TEXT_CONTENT_TYPE)
    _set_header(writer.headers, "x-content-type-options", "nosniff")
    writer.write_header(status)
    await writer.write((message + "\n").encode("utf-8"))


async def write_response(writer: ResponseWriter, response: Response) -> None:
    try:
        body = json.dumps(
            response.get_payload(),
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
        ).encode("utf-8")
    except (TypeError, ValueError, RecursionError) as e:
        logger.warning("cannot serialize %s payload: %s", type(response).__name__, e)
        await http_error(writer, str(e), 500)
        return

    _set_header(writer.headers, "content-type", JSON_CONTENT_TYPE)
    writer.write_header(response.status_code)
    await writer.write(body)


def convert(handler: Handler) -> LowLevelHandler:
    """Wrap a typed handler into a (writer, request) coroutine.

    A handler returning None writes nothing at all: no status, no body.
    Exceptions raised by the handler propagate to the host.
    """

    async def low_level(writer: ResponseWriter, request: HttpRequest) -> None:
        response = await handler(request)
        if response is None:
            return
        await write_response(writer, response)

    return low_level


def add_handler(mount: Mount, pattern: str, handler: Handler) -> None:
    """Register `handler` at `pattern` using the host's mount function."""
    mount(pattern, convert(handler))


def read_user_ip(request: HttpRequest) -> str:
    """Best-effort client address.

    X-Real-Ip, then X-Forwarded-For (taken verbatim, chains included), then
    the raw remote address.
    """
    ip = request.header("X-Real-Ip")
    if not ip:
        ip = request.header("X-Forwarded-For")
    if not ip:
        ip = request.remote_addr
    return ip
