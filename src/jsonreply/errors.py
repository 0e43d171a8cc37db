"""Errors raised while decoding a server reply on the client side."""

from __future__ import annotations


class PayloadError(Exception):
    """Base class for everything extract_payload() can raise."""


class BodyReadError(PayloadError):
    """The response body could not be read off the wire."""


class RemoteError(PayloadError):
    """The server answered with a well-formed error object."""

    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class PayloadDecodeError(PayloadError, ValueError):
    """The body is not valid JSON, or does not fit the requested type."""


class ErrorPayloadDecodeError(PayloadDecodeError):
    """A non-200 body that is not an error object.

    The raw body is kept so callers can still inspect what the server sent.
    """

    def __init__(self, message: str, status_code: int, body: bytes):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


__all__ = [
    "PayloadError",
    "BodyReadError",
    "RemoteError",
    "PayloadDecodeError",
    "ErrorPayloadDecodeError",
]
