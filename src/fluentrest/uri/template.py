"""
URI template expansion.

Templates use `{name}` placeholders (a `{name:regex}` suffix is accepted and
ignored). Expansion and percent-encoding happen in one pass so that literal
template text and substituted values can be quoted differently: a path literal
such as `update/stuff/{stuffId}` keeps its `/` separators while a value bound to
`stuffId` is encoded as a single path segment.
"""

from __future__ import annotations

import re
from typing import Any, Callable, Mapping
from urllib.parse import quote

from fluentrest.errors import UriTemplateError

Quoter = Callable[[str], str]

_PLACEHOLDER = re.compile(r"\{([^{}:]+)(?::[^{}]*)?\}")
_PERCENT_TRIPLET = re.compile(r"%[0-9A-Fa-f]{2}")

# RFC 3986 sub-delims plus ":" and "@" (pchar), without "/".
_PCHAR_SAFE = "!$&'()*+,;=:@"
_QUERY_SAFE = "!$'()*,;:@/?"
_FRAGMENT_SAFE = "!$&'()*+,;=:@/?"


def _quote_keeping_triplets(text: str, safe: str) -> str:
    # Already-encoded octets in literal text are left alone.
    out: list[str] = []
    pos = 0
    for match in _PERCENT_TRIPLET.finditer(text):
        out.append(quote(text[pos : match.start()], safe=safe))
        out.append(match.group(0))
        pos = match.end()
    out.append(quote(text[pos:], safe=safe))
    return "".join(out)


def quote_path(text: str) -> str:
    """Quote literal path text (keeps `/` and existing `%XX` escapes)."""
    return _quote_keeping_triplets(text, "/" + _PCHAR_SAFE)


def quote_path_value(text: str) -> str:
    """Quote a value substituted into a path; `/` is encoded."""
    return quote(text, safe=_PCHAR_SAFE)


def quote_query(text: str) -> str:
    """Quote a query parameter name or value (`&`, `=`, `+` and `#` are encoded)."""
    return quote(text, safe=_QUERY_SAFE)


def quote_encoded_query(text: str) -> str:
    """Quote query text that is already encoded, as parsed from a URI.

    `+`, `=` and existing `%XX` escapes are kept as they arrived; only `&`, `#`
    and characters never allowed in a query are encoded.
    """
    return _quote_keeping_triplets(text, _QUERY_SAFE + "+=")


def quote_fragment(text: str) -> str:
    return quote(text, safe=_FRAGMENT_SAFE)


def quote_encoded_fragment(text: str) -> str:
    """Quote literal fragment text, keeping existing `%XX` escapes."""
    return _quote_keeping_triplets(text, _FRAGMENT_SAFE)


def _no_quote(text: str) -> str:
    return text


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def expand(
    template: str | None,
    variables: Mapping[str, Any],
    *,
    quote_literal: Quoter = _no_quote,
    quote_value: Quoter | None = None,
) -> str | None:
    """Expand `{name}` placeholders in `template` using `variables`.

    `quote_literal` is applied to the template text between placeholders and
    `quote_value` (defaulting to `quote_literal`) to each substituted value.

    Raises:
        UriTemplateError: If a placeholder has no entry in `variables`.
    """
    if template is None:
        return None
    if quote_value is None:
        quote_value = quote_literal

    out: list[str] = []
    pos = 0
    for match in _PLACEHOLDER.finditer(template):
        out.append(quote_literal(template[pos : match.start()]))
        name = match.group(1).strip()
        if name not in variables:
            raise UriTemplateError(name, template)
        out.append(quote_value(_stringify(variables[name])))
        pos = match.end()
    out.append(quote_literal(template[pos:]))
    return "".join(out)
