"""Client-side decoding of jsonreply responses.

    resp = httpx.get(url)
    item = extract_payload(resp, into=lambda d: Item(**d))

A 200 body is decoded as JSON (and optionally passed through `into`).
Any other status is expected to carry {"message": ...}; it is raised as a
RemoteError carrying that message.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable
from typing_extensions import TypeVar

import httpx

from .errors import BodyReadError, ErrorPayloadDecodeError, PayloadDecodeError, RemoteError


logger = logging.getLogger(__name__)

T = TypeVar("T", default=Any)

_READ_ERRORS = (httpx.RequestError, httpx.StreamError)


def extract_payload(response: httpx.Response, into: Callable[[Any], T] | None = None) -> T:
    try:
        body = response.read()
    except _READ_ERRORS as e:
        raise BodyReadError(f"reading response body: {e}") from e
    return _decode(response.status_code, body, into)


async def aextract_payload(response: httpx.Response, into: Callable[[Any], T] | None = None) -> T:
    """Async twin of extract_payload() for responses from httpx.AsyncClient."""
    try:
        body = await response.aread()
    except _READ_ERRORS as e:
        raise BodyReadError(f"reading response body: {e}") from e
    return _decode(response.status_code, body, into)


def _decode(status_code: int, body: bytes, into: Callable[[Any], T] | None) -> T:
    if status_code != httpx.codes.OK:
        raise _remote_error(status_code, body)

    try:
        data = json.loads(body)
    except (ValueError, RecursionError) as e:
        raise PayloadDecodeError(f"decoding payload: {e}") from e

    if into is None:
        return data
    try:
        return into(data)
    except (TypeError, ValueError, KeyError) as e:
        raise PayloadDecodeError(f"converting payload: {e}") from e


def _remote_error(status_code: int, body: bytes) -> RemoteError:
    try:
        data = json.loads(body)
    except (ValueError, RecursionError) as e:
        logger.debug("status %d with non-JSON body (%d bytes)", status_code, len(body))
        raise ErrorPayloadDecodeError(f"decoding error payload: {e}", status_code, body) from e

    message = data.get("message") if isinstance(data, dict) else None
    if not isinstance(message, str):
        raise ErrorPayloadDecodeError(
            "decoding error payload: expected an object with a string 'message'",
            status_code,
            body,
        )
    return RemoteError(message, status_code)


__all__ = ["extract_payload", "aextract_payload"]
