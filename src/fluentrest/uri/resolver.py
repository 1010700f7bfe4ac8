"""
Per-call URI resolution.

A `UriResolver` is created by `ServiceDescriptor.resolver()` already seeded with
the descriptor's scheme, host, port, path template, common query parameters and
common fragment. Call sites then add their own parts and call `build()`.

Merge rules:
- `query_param()` appends to whatever is already present for the key.
- `query_params()` replaces the whole query, common parameters included.
- `fragment()` always overrides; `fragment(None)` removes the fragment.
- `uri_variable()` / `uri_variables()` upsert; the last value for a key wins.

Common query parameters and the fragment are taken as already-encoded text, so a
URI parsed by `ServiceDescriptor.from_uri()` builds back unchanged. Call-site
query names and values, and every substituted variable, are encoded on build.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Union

import httpx

from fluentrest.uri.template import (
    expand,
    quote_encoded_fragment,
    quote_encoded_query,
    quote_fragment,
    quote_path,
    quote_path_value,
    quote_query,
)

logger = logging.getLogger(__name__)

MultiValueParams = Union[Mapping[str, Any], httpx.QueryParams, Iterable[tuple[str, Any]]]

_COLLECTION_TYPES = (list, tuple, set, frozenset)


class _Encoded(str):
    """Query name or value taken from a descriptor, already percent-encoded."""


def _encoded(value: Any) -> Any:
    return value if value is None else _Encoded(value)


def _literal_quoter(text: Any):
    return quote_encoded_query if isinstance(text, _Encoded) else quote_query


def has_text(value: str | None) -> bool:
    return value is not None and value.strip() != ""


def _as_values(values: Any) -> list[Any]:
    if isinstance(values, _COLLECTION_TYPES):
        return list(values)
    return [values]


def to_multimap(params: MultiValueParams) -> dict[str, list[Any]]:
    """Normalize query parameters into an insertion-ordered `key -> [values]` dict.

    Accepts a mapping whose values are scalars or collections, an
    `httpx.QueryParams`, or an iterable of `(key, value)` pairs.
    """
    out: dict[str, list[Any]] = {}
    if isinstance(params, httpx.QueryParams):
        for key, value in params.multi_items():
            out.setdefault(key, []).append(value)
        return out
    if isinstance(params, Mapping):
        for key, values in params.items():
            out.setdefault(str(key), []).extend(_as_values(values))
        return out
    for key, value in params:
        out.setdefault(str(key), []).append(value)
    return out


class UriResolver:
    """Accumulates call-specific URI parts and resolves them into an `httpx.URL`."""

    def __init__(
        self,
        *,
        scheme: str | None = None,
        host: str | None = None,
        port: str | None = None,
        path: str = "",
        query_params: Mapping[str, list[Any]] | None = None,
        fragment: str | None = None,
    ):
        self._scheme = scheme if has_text(scheme) else None
        self._host = host if has_text(host) else None
        self._port = port if has_text(port) else None
        self._path = path or ""
        # Seeded parameters are kept in their encoded form; call-site ones are
        # encoded on build. Copied so resolvers never share lists with their descriptor.
        self._query_params: dict[str, list[Any]] = {
            _Encoded(key): [_encoded(v) for v in values] for key, values in (query_params or {}).items()
        }
        self._fragment = fragment
        self._uri_variables: dict[str, Any] = {}

    def query_param(self, key: str, *values: Any) -> "UriResolver":
        """Append `values` to query parameter `key`.

        A single list/tuple/set argument is treated as the value collection.
        Passing no values (or an empty collection) leaves the query untouched.
        """
        if not has_text(key):
            raise ValueError("key must not be null or empty")
        if len(values) == 1 and isinstance(values[0], _COLLECTION_TYPES):
            values = tuple(values[0])
        if not values:
            return self
        self._query_params.setdefault(key, []).extend(values)
        return self

    def query_params(self, params: MultiValueParams | None) -> "UriResolver":
        """Replace every accumulated query parameter with `params`.

        `None` is ignored; an empty mapping clears the query.
        """
        if params is None:
            return self
        self._query_params = to_multimap(params)
        return self

    def fragment(self, fragment: str | None) -> "UriResolver":
        self._fragment = fragment
        return self

    def uri_variable(self, key: str, value: Any) -> "UriResolver":
        if not has_text(key):
            raise ValueError("key must not be null or empty")
        self._uri_variables[key] = value
        return self

    def uri_variables(self, variables: Mapping[str, Any] | None) -> "UriResolver":
        if variables:
            self._uri_variables.update(variables)
        return self

    def _build_query(self) -> str:
        variables = self._uri_variables
        pairs: list[str] = []
        for key, values in self._query_params.items():
            name = expand(key, variables, quote_literal=_literal_quoter(key), quote_value=quote_query)
            for value in values:
                if value is None:
                    pairs.append(name)
                    continue
                literal = _literal_quoter(value)
                pairs.append(f"{name}={expand(str(value), variables, quote_literal=literal, quote_value=quote_query)}")
        return "&".join(pairs)

    def build_string(self) -> str:
        """Expand every template and return the URI as a string.

        Raises:
            UriTemplateError: If a placeholder has no bound variable.
        """
        variables = self._uri_variables
        out: list[str] = []
        if self._scheme:
            out.append(f"{self._scheme}:")
        if self._host:
            out.append("//" + expand(self._host, variables))
            if self._port:
                out.append(":" + expand(self._port, variables))

        path = expand(self._path, variables, quote_literal=quote_path, quote_value=quote_path_value)
        if path and not path.startswith("/") and (self._host or self._scheme is None):
            path = "/" + path
        out.append(path)

        query = self._build_query()
        if query:
            out.append("?" + query)
        if has_text(self._fragment):
            out.append(
                "#" + expand(self._fragment, variables, quote_literal=quote_encoded_fragment, quote_value=quote_fragment)
            )
        return "".join(out)

    def build(self) -> httpx.URL:
        """Resolve the URI. State is kept, so calling `build()` again gives the same URI."""
        uri = self.build_string()
        logger.debug("Resolved URI %s", uri)
        return httpx.URL(uri)
