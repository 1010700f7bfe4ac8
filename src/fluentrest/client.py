"""
Fluent REST client.

Calls read as a chain that moves through fixed stages:

    client.get()                              # verb  -> UriStarter
          .from_(service)                     # target -> ServiceEndpointSelector
          .with_endpoint("fetchThing")        #        -> ExecutorUriBuilder
          .uri_variable("id", 123)
          .query_param("expand", "owner")
          .executor()                         # URI resolved -> Executor
          .accept("application/json")
          .execute_for_object(Thing)

Every verb call starts a new, independent chain. Body-carrying verbs (POST, PUT,
PATCH) use `into()` instead of `from_()`. The transport is asked whether it
supports the verb before anything else happens.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, overload

import httpx

from fluentrest.config.settings import Settings, get_settings
from fluentrest.core.http import HttpxTransport, Transport
from fluentrest.domain.models import HttpMethod
from fluentrest.errors import UnsupportedMethodError
from fluentrest.executor import Executor
from fluentrest.uri.resolver import MultiValueParams, UriResolver
from fluentrest.uri.service import ServiceDescriptor

logger = logging.getLogger(__name__)


class ExecutorUriBuilder:
    """URI stage of a call: accumulates URI parts, then hands over to an `Executor`."""

    def __init__(self, transport: Transport, method: HttpMethod, body: Any, resolver: UriResolver):
        self._transport = transport
        self._method = method
        self._body = body
        self._resolver = resolver

    def query_param(self, key: str, *values: Any) -> "ExecutorUriBuilder":
        self._resolver.query_param(key, *values)
        return self

    def query_params(self, params: MultiValueParams | None) -> "ExecutorUriBuilder":
        self._resolver.query_params(params)
        return self

    def fragment(self, fragment: str | None) -> "ExecutorUriBuilder":
        self._resolver.fragment(fragment)
        return self

    def uri_variable(self, key: str, value: Any) -> "ExecutorUriBuilder":
        self._resolver.uri_variable(key, value)
        return self

    def uri_variables(self, variables: Mapping[str, Any] | None) -> "ExecutorUriBuilder":
        self._resolver.uri_variables(variables)
        return self

    def executor(self) -> Executor:
        """Resolve the URI and move on to the header/execution stage."""
        return Executor(self._transport, self._method, self._resolver.build(), self._body)


class ServiceEndpointSelector:
    """Chooses which endpoint of a `ServiceDescriptor` a call targets."""

    def __init__(self, transport: Transport, method: HttpMethod, body: Any, service: ServiceDescriptor):
        self._transport = transport
        self._method = method
        self._body = body
        self._service = service

    def with_endpoint(self, key: str | None) -> ExecutorUriBuilder:
        return ExecutorUriBuilder(self._transport, self._method, self._body, self._service.resolver(key))

    def without_endpoint(self) -> ExecutorUriBuilder:
        return self.with_endpoint(None)


class _Starter:
    def __init__(self, transport: Transport, method: HttpMethod, body: Any = None):
        self._transport = transport
        self._method = method
        self._body = body

    def _target(self, target: Any) -> ExecutorUriBuilder | ServiceEndpointSelector:
        if target is None:
            raise ValueError("target must not be null")
        if isinstance(target, ServiceDescriptor):
            return ServiceEndpointSelector(self._transport, self._method, self._body, target)
        if isinstance(target, str) and not target.strip():
            raise ValueError("uri must not be null or empty")
        resolver = ServiceDescriptor.from_uri(target).resolver()
        return ExecutorUriBuilder(self._transport, self._method, self._body, resolver)


class UriStarter(_Starter):
    """Target stage for verbs without a body (GET, DELETE)."""

    @overload
    def from_(self, target: ServiceDescriptor) -> ServiceEndpointSelector: ...

    @overload
    def from_(self, target: str | httpx.URL) -> ExecutorUriBuilder: ...

    def from_(self, target):
        return self._target(target)


class UriBodyStarter(_Starter):
    """Target stage for verbs with a body (POST, PUT, PATCH)."""

    @overload
    def into(self, target: ServiceDescriptor) -> ServiceEndpointSelector: ...

    @overload
    def into(self, target: str | httpx.URL) -> ExecutorUriBuilder: ...

    def into(self, target):
        return self._target(target)


class FluentClient:
    """Entry point: pick a verb, then build the URI, then execute."""

    def __init__(self, transport: Transport):
        if transport is None:
            raise ValueError("transport must not be null")
        self._transport = transport

    @classmethod
    def from_settings(
        cls, settings: Settings | None = None, *, client: httpx.Client | None = None
    ) -> "FluentClient":
        """Create a client over `HttpxTransport` configured from `settings.http`."""
        http = (settings or get_settings()).http
        transport = HttpxTransport(
            client,
            timeout_seconds=http.timeout_seconds,
            user_agent=http.user_agent,
            unsupported_methods=http.unsupported_methods,
            raise_for_status=http.raise_for_status,
        )
        return cls(transport)

    def _require_support(self, method: HttpMethod) -> None:
        if not self._transport.supports(method.value):
            raise UnsupportedMethodError(method.value)
        logger.debug("Starting %s call", method.value)

    def get(self) -> UriStarter:
        self._require_support(HttpMethod.GET)
        return UriStarter(self._transport, HttpMethod.GET)

    def delete(self) -> UriStarter:
        self._require_support(HttpMethod.DELETE)
        return UriStarter(self._transport, HttpMethod.DELETE)

    def post(self, body: Any = None) -> UriBodyStarter:
        self._require_support(HttpMethod.POST)
        return UriBodyStarter(self._transport, HttpMethod.POST, body)

    def put(self, body: Any = None) -> UriBodyStarter:
        self._require_support(HttpMethod.PUT)
        return UriBodyStarter(self._transport, HttpMethod.PUT, body)

    def patch(self, body: Any = None) -> UriBodyStarter:
        self._require_support(HttpMethod.PATCH)
        return UriBodyStarter(self._transport, HttpMethod.PATCH, body)
