"""
Service descriptors.

A `ServiceDescriptor` describes a family of endpoints that share a scheme, host,
port, context path and API version, plus a map of named endpoint path templates:

    fetchProviderFoo: provider/{providerId}/foo
    createPersonBar: person/bar

Common query parameters and a common fragment are applied to every URI built
from the descriptor unless the call site overrides them (see `UriResolver`).
Both are held in their URI-encoded form.

Descriptors are pydantic models so they can be declared in the YAML settings
(`services:` section) as well as built in code or parsed from a URI string.
The design assumes "configure once, resolve many": `resolver()` copies
everything it needs, so resolvers never observe each other's additions.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping
from urllib.parse import urlsplit

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator

from fluentrest.uri.resolver import MultiValueParams, UriResolver, has_text, to_multimap

logger = logging.getLogger(__name__)


def _join_path(context_path: str | None, *segments: str | None) -> str:
    """Append non-blank `segments` to `context_path`, one `/` between each."""
    path = context_path if has_text(context_path) else ""
    for segment in segments:
        if not has_text(segment):
            continue
        path = path.rstrip("/") + "/" + segment.lstrip("/")
    return path


def _split_authority(netloc: str) -> tuple[str | None, str | None]:
    """Return (host, port) from a netloc, keeping templated ports intact."""
    hostport = netloc.rpartition("@")[2]
    if hostport.startswith("["):
        end = hostport.find("]")
        host, rest = hostport[: end + 1], hostport[end + 1 :]
        port = rest[1:] if rest.startswith(":") else None
    else:
        host, sep, port = hostport.partition(":")
        port = port if sep else None
    return host or None, port or None


def _parse_query(query: str) -> dict[str, list[str | None]]:
    params: dict[str, list[str | None]] = {}
    if not query:
        return params
    for pair in query.split("&"):
        if not pair:
            continue
        key, sep, value = pair.partition("=")
        params.setdefault(key, []).append(value if sep else None)
    return params


class ServiceDescriptor(BaseModel):
    """Reusable URI template for a service's endpoints."""

    model_config = ConfigDict(validate_assignment=True)

    scheme: str | None = None
    host: str | None = None
    port: str | None = None
    context_path: str | None = None
    version: str | None = None
    endpoints: dict[str, str] = Field(default_factory=dict)
    common_query_params: dict[str, list[str | None]] = Field(default_factory=dict)
    common_fragment: str | None = None

    @field_validator("port", mode="before")
    @classmethod
    def _port_as_string(cls, value: Any) -> Any:
        if isinstance(value, int):
            return str(value)
        return value

    @field_validator("endpoints", mode="before")
    @classmethod
    def _endpoints_never_none(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("common_query_params", mode="before")
    @classmethod
    def _query_params_as_multimap(cls, value: Any) -> Any:
        if value is None:
            return {}
        return {
            key: [None if v is None else str(v) for v in values]
            for key, values in to_multimap(value).items()
        }

    @classmethod
    def from_uri(cls, uri: str | httpx.URL) -> "ServiceDescriptor":
        """Build a descriptor from a full URI.

        The whole path becomes `context_path` verbatim, the query string becomes
        `common_query_params` (duplicate keys kept in order) and the fragment
        becomes `common_fragment`. Version and endpoints start empty.

        Query text and fragment are stored still encoded, exactly as written in
        `uri`, so `from_uri(u).uri_string() == u`.
        """
        if uri is None:
            raise ValueError("uri must not be null")
        text = str(uri)
        if not text.strip():
            raise ValueError("uri must not be null or empty")

        parts = urlsplit(text)
        host, port = _split_authority(parts.netloc)
        return cls(
            scheme=parts.scheme or None,
            host=host,
            port=port,
            context_path=parts.path or None,
            common_query_params=_parse_query(parts.query),
            common_fragment=parts.fragment or None,
        )

    def set_version(self, version: str | None) -> "ServiceDescriptor":
        self.version = version
        return self

    def add_endpoint(self, key: str, value: str) -> "ServiceDescriptor":
        if not has_text(key):
            raise ValueError("key must not be null or empty")
        if not has_text(value):
            raise ValueError("value must not be null or empty")
        self.endpoints[key] = value
        return self

    def add_endpoints(self, endpoints: Mapping[str, str]) -> "ServiceDescriptor":
        if endpoints is None:
            raise ValueError("endpoints must not be null")
        for key, value in endpoints.items():
            self.add_endpoint(key, value)
        return self

    def add_common_query_param(self, key: str, *values: Any) -> "ServiceDescriptor":
        """Append values for `key`; a single list argument is used as the values."""
        if not has_text(key):
            raise ValueError("key must not be null or empty")
        if len(values) == 1 and isinstance(values[0], (list, tuple)):
            values = tuple(values[0])
        if not values:
            return self
        self.common_query_params.setdefault(key, []).extend(
            None if v is None else str(v) for v in values
        )
        return self

    def add_common_query_params(self, params: MultiValueParams) -> "ServiceDescriptor":
        if params is None:
            raise ValueError("params must not be null")
        for key, values in to_multimap(params).items():
            self.add_common_query_param(key, values)
        return self

    def set_common_fragment(self, fragment: str | None) -> "ServiceDescriptor":
        self.common_fragment = fragment
        return self

    def resolver(self, endpoint_key: str | None = None) -> UriResolver:
        """Return a new `UriResolver` seeded with this descriptor's defaults.

        An endpoint key that is blank or not configured resolves without an
        endpoint segment; it is not an error.
        """
        endpoint = self.endpoints.get(endpoint_key) if has_text(endpoint_key) else None
        if endpoint is None and has_text(endpoint_key):
            logger.debug("No endpoint %r on service %s; resolving without endpoint", endpoint_key, self.host)

        return UriResolver(
            scheme=self.scheme,
            host=self.host,
            port=self.port,
            path=_join_path(self.context_path, self.version, endpoint),
            query_params=self.common_query_params,
            fragment=self.common_fragment,
        )

    def uri(
        self,
        endpoint_key: str | None = None,
        uri_variables: Mapping[str, Any] | None = None,
        query_params: MultiValueParams | None = None,
    ) -> httpx.URL:
        """Resolve a URI in one call; `query_params` are added to the common ones."""
        return self._resolve(endpoint_key, uri_variables, query_params).build()

    def uri_string(
        self,
        endpoint_key: str | None = None,
        uri_variables: Mapping[str, Any] | None = None,
        query_params: MultiValueParams | None = None,
    ) -> str:
        return self._resolve(endpoint_key, uri_variables, query_params).build_string()

    def _resolve(
        self,
        endpoint_key: str | None,
        uri_variables: Mapping[str, Any] | None,
        query_params: MultiValueParams | None,
    ) -> UriResolver:
        resolver = self.resolver(endpoint_key).uri_variables(uri_variables)
        if query_params is not None:
            for key, values in to_multimap(query_params).items():
                resolver.query_param(key, values)
        return resolver
