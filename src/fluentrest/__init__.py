"""Fluent builder for REST calls over httpx."""

from fluentrest.client import FluentClient
from fluentrest.core.http import HttpxTransport, Transport
from fluentrest.domain.models import HttpMethod, RequestDescriptor, ResponseEntity
from fluentrest.errors import FluentRestError, UnsupportedMethodError, UriTemplateError
from fluentrest.executor import Executor
from fluentrest.uri import ServiceDescriptor, UriResolver

__all__ = [
    "Executor",
    "FluentClient",
    "FluentRestError",
    "HttpMethod",
    "HttpxTransport",
    "RequestDescriptor",
    "ResponseEntity",
    "ServiceDescriptor",
    "Transport",
    "UnsupportedMethodError",
    "UriResolver",
    "UriTemplateError",
]
