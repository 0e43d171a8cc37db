"""HTTP side of jsonreply.

Converts typed handlers into low-level (writer, request) coroutines and
registers them through a host-supplied mount function.
"""

from .server import (
    JSON_CONTENT_TYPE,
    TEXT_CONTENT_TYPE,
    BufferedResponseWriter,
    Handler,
    HttpRequest,
    HttpResponse,
    LowLevelHandler,
    Mount,
    ResponseWriter,
    StreamResponseWriter,
    add_handler,
    convert,
    http_error,
    read_user_ip,
    write_response,
)

__all__ = [
    "JSON_CONTENT_TYPE",
    "TEXT_CONTENT_TYPE",
    "BufferedResponseWriter",
    "Handler",
    "HttpRequest",
    "HttpResponse",
    "LowLevelHandler",
    "Mount",
    "ResponseWriter",
    "StreamResponseWriter",
    "add_handler",
    "convert",
    "http_error",
    "read_user_ip",
    "write_response",
]
