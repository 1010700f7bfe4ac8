"""
Request/response value types.

`RequestDescriptor` is what the executor hands to the transport: method, resolved
URI, headers and body. `ResponseEntity` is what comes back to the call site: the
status, the response headers and the (optionally decoded) body.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

import httpx

T = TypeVar("T")


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class RequestDescriptor:
    """A fully resolved request, ready for the transport."""

    method: HttpMethod
    uri: httpx.URL
    headers: httpx.Headers
    body: Any = None


@dataclass(frozen=True)
class ResponseEntity(Generic[T]):
    """Status, headers and decoded body of a response (`body` is None for void calls)."""

    status_code: int
    headers: httpx.Headers
    body: T | None = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300
