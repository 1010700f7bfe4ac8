"""
HTTP transport.

The builder never talks to the network itself; it hands a `RequestDescriptor` to
a `Transport`. `HttpxTransport` is the default implementation over `httpx`.

Design goals:
- Small surface area (`supports()` + `send()`).
- Deterministic defaults (timeout + User-Agent).
- Raise on non-2xx (configurable) so callers decide how to fail.
- No retries, caching or pooling policy of its own: pass a configured
  `httpx.Client` if you need any of that.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Protocol

import httpx
from pydantic_core import to_json

from fluentrest.domain.models import RequestDescriptor

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "fluentrest/0.1.0"
JSON_CONTENT_TYPE = "application/json"


class Transport(Protocol):
    """What the builder needs from an HTTP client."""

    def supports(self, method: str) -> bool: ...

    def send(self, request: RequestDescriptor) -> httpx.Response: ...


def encode_body(body: Any) -> tuple[bytes | str | None, str | None]:
    """Return (content, implied content type) for a request body.

    `str` and `bytes` are sent as-is. Anything else (pydantic models, dataclasses,
    mappings, lists, datetimes and so on) is serialized as JSON by pydantic-core.
    """
    if body is None:
        return None, None
    if isinstance(body, (bytes, str)):
        return body, None
    return to_json(body), JSON_CONTENT_TYPE


class HttpxTransport:
    """`Transport` backed by `httpx.Client`.

    If no client is injected, a short-lived client is opened for each request.
    """

    def __init__(
        self,
        client: httpx.Client | None = None,
        *,
        timeout_seconds: float = 15,
        user_agent: str = DEFAULT_USER_AGENT,
        unsupported_methods: Iterable[str] = (),
        raise_for_status: bool = True,
    ):
        self._client = client
        self._timeout_seconds = timeout_seconds
        self._user_agent = user_agent
        self._unsupported_methods = frozenset(m.upper() for m in unsupported_methods)
        self._raise_for_status = raise_for_status

    def supports(self, method: str) -> bool:
        return str(method).upper() not in self._unsupported_methods

    def send(self, request: RequestDescriptor) -> httpx.Response:
        """Send `request` and return the raw response.

        Raises:
            httpx.HTTPError: On transport errors, or non-2xx status codes when
                `raise_for_status` is enabled.
        """
        header_items = list(request.headers.multi_items())
        if "User-Agent" not in request.headers:
            header_items.append(("User-Agent", self._user_agent))
        content, content_type = encode_body(request.body)
        if content_type and "Content-Type" not in request.headers:
            header_items.append(("Content-Type", content_type))
        headers = httpx.Headers(header_items)

        logger.debug("Sending %s %s", request.method, request.uri)
        if self._client is not None:
            resp = self._client.request(str(request.method), request.uri, headers=headers, content=content)
        else:
            with httpx.Client(timeout=self._timeout_seconds) as client:
                resp = client.request(str(request.method), request.uri, headers=headers, content=content)
        logger.debug("Received %s for %s %s", resp.status_code, request.method, request.uri)

        if self._raise_for_status:
            resp.raise_for_status()
        return resp
