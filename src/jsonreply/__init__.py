"""Typed JSON responses for plain HTTP handlers."""

from .response import Response, BasicResponse, ErrorResponse, ok, bad_request, not_found
from .http import (
    HttpRequest,
    HttpResponse,
    ResponseWriter,
    BufferedResponseWriter,
    StreamResponseWriter,
    add_handler,
    convert,
    write_response,
    read_user_ip,
)
from .client import extract_payload, aextract_payload
from .errors import (
    PayloadError,
    BodyReadError,
    RemoteError,
    PayloadDecodeError,
    ErrorPayloadDecodeError,
)

__all__ = [
    # Responses
    "Response",
    "BasicResponse",
    "ErrorResponse",
    "ok",
    "bad_request",
    "not_found",
    # Server side
    "HttpRequest",
    "HttpResponse",
    "ResponseWriter",
    "BufferedResponseWriter",
    "StreamResponseWriter",
    "add_handler",
    "convert",
    "write_response",
    "read_user_ip",
    # Client side
    "extract_payload",
    "aextract_payload",
    "PayloadError",
    "BodyReadError",
    "RemoteError",
    "PayloadDecodeError",
    "ErrorPayloadDecodeError",
]
