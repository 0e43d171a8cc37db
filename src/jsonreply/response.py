"""
Typed handler results.

A handler returns one of two response variants instead of writing to the
response writer itself:

  - BasicResponse: an arbitrary payload serialized as-is
  - ErrorResponse: serialized as {"message": ...}; the cause stays server-side
"""

from __future__ import annotations

from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Response(Protocol):
    """Anything the adapter can write: a status code plus a JSON-able payload."""

    @property
    def status_code(self) -> int:
        ...

    def get_payload(self) -> Any:
        ...


@dataclass(frozen=True, slots=True)
class BasicResponse:
    payload: Any = None
    status: int = HTTPStatus.OK

    @property
    def status_code(self) -> int:
        return int(self.status)

    def get_payload(self) -> Any:
        return self.payload


@dataclass(frozen=True, slots=True)
class ErrorResponse:
    message: str
    error: BaseException | None = None
    status: int = HTTPStatus.BAD_REQUEST

    @property
    def status_code(self) -> int:
        return int(self.status)

    def get_payload(self) -> dict[str, str]:
        # `error` is never put on the wire.
        return {"message": self.message}


def ok(payload: Any) -> BasicResponse:
    return BasicResponse(payload=payload, status=HTTPStatus.OK)


def bad_request(err: BaseException) -> ErrorResponse:
    return ErrorResponse(message=str(err), error=err, status=HTTPStatus.BAD_REQUEST)


def not_found(err: BaseException) -> ErrorResponse:
    return ErrorResponse(message=str(err), error=err, status=HTTPStatus.NOT_FOUND)


__all__ = [
    "Response",
    "BasicResponse",
    "ErrorResponse",
    "ok",
    "bad_request",
    "not_found",
]
