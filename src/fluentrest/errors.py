"""
Exception types raised by fluentrest.

Argument validation uses plain `ValueError` and transport failures are the
`httpx` exceptions raised by the HTTP client; only the conditions below get
their own types so callers can catch them precisely.
"""

from __future__ import annotations


class FluentRestError(Exception):
    """Base class for fluentrest-specific errors."""


class UriTemplateError(FluentRestError, ValueError):
    """A URI template placeholder has no matching variable."""

    def __init__(self, name: str, template: str):
        super().__init__(f"Not enough variable values available to expand '{name}' in '{template}'")
        self.name = name
        self.template = template


class UnsupportedMethodError(FluentRestError, NotImplementedError):
    """The configured transport cannot send requests with this HTTP method."""

    def __init__(self, method: str):
        super().__init__(f"{method} method not supported by the configured transport")
        self.method = method
