"""
Request assembly and execution.

An `Executor` receives an already resolved URI, collects headers, then sends the
request through the transport. Header merge rules differ from the query rules in
`UriResolver`: `headers()` appends to what is already there instead of replacing
it, while `accept()`, `accept_charset()` and `content_type()` replace their own
header (last call wins).
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, TypeVar

import httpx
from pydantic import TypeAdapter

from fluentrest.core.http import Transport
from fluentrest.domain.models import HttpMethod, RequestDescriptor, ResponseEntity

T = TypeVar("T")


def decode_body(response: httpx.Response, response_type: type[T] | Any | None) -> T | None:
    """Decode a response body into `response_type`.

    `None` means the caller expects no body. `str` and `bytes` return the text or
    raw content; any other type is validated from JSON with pydantic.
    Empty bodies decode to None.
    """
    if response_type is None or not response.content:
        return None
    if response_type is str:
        return response.text  # type: ignore[return-value]
    if response_type is bytes:
        return response.content  # type: ignore[return-value]
    return TypeAdapter(response_type).validate_json(response.content)


class Executor:
    """Collects headers for a resolved request and executes it."""

    def __init__(self, transport: Transport, method: HttpMethod, uri: httpx.URL, body: Any = None):
        self._transport = transport
        self._method = method
        self._uri = uri
        self._body = body
        self._headers: list[tuple[str, str]] = []

    def _replace(self, name: str, value: str) -> None:
        lowered = name.lower()
        self._headers = [(k, v) for k, v in self._headers if k.lower() != lowered]
        self._headers.append((name, value))

    def header(self, name: str, *values: str) -> "Executor":
        """Append `values` to header `name`."""
        if not name:
            raise ValueError("header name must not be null or empty")
        self._headers.extend((name, str(v)) for v in values)
        return self

    def headers(self, headers: Mapping[str, Any] | httpx.Headers | None) -> "Executor":
        """Merge `headers` into the request; existing values are kept."""
        if headers is None:
            return self
        items: Iterable[tuple[str, Any]]
        if isinstance(headers, httpx.Headers):
            items = headers.multi_items()
        else:
            items = headers.items()
        for name, value in items:
            if isinstance(value, (list, tuple)):
                self.header(name, *value)
            else:
                self.header(name, value)
        return self

    def accept(self, *media_types: str) -> "Executor":
        self._replace("Accept", ", ".join(media_types))
        return self

    def accept_charset(self, *charsets: str) -> "Executor":
        self._replace("Accept-Charset", ", ".join(str(c).lower() for c in charsets))
        return self

    def content_type(self, media_type: str) -> "Executor":
        self._replace("Content-Type", media_type)
        return self

    def request(self) -> RequestDescriptor:
        return RequestDescriptor(
            method=self._method,
            uri=self._uri,
            headers=httpx.Headers(self._headers),
            body=self._body,
        )

    def execute(self, response_type: type[T] | Any | None = None) -> ResponseEntity[T]:
        """Send the request and wrap the response.

        With no `response_type` the body is discarded (void call).

        Raises:
            httpx.HTTPError: Propagated from the transport.
            pydantic.ValidationError: If the body does not match `response_type`.
        """
        response = self._transport.send(self.request())
        return ResponseEntity(
            status_code=response.status_code,
            headers=response.headers,
            body=decode_body(response, response_type),
        )

    def execute_for_object(self, response_type: type[T] | Any | None = None) -> T | None:
        """Like `execute()` but return only the body (None when there is none)."""
        return self.execute(response_type).body
