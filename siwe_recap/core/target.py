from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Union

from rfc3986 import exceptions as uri_exceptions
from rfc3986 import uri_reference
from rfc3986.validators import Validator

from .exceptions import InvalidNamespaceUri

_VALIDATOR = (
    Validator()
    .require_presence_of("scheme")
    .check_validity_of("scheme", "userinfo", "host", "port", "path", "query", "fragment")
)

# RFC 3986 unreserved, gen-delims, sub-delims and '%'.
_URI_CHARS_RE = re.compile(r"^[A-Za-z0-9\-._~:/?#\[\]@!$&'()*+,;=%]+$")
_BAD_PERCENT_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def validate_absolute_uri(uri: str) -> str:
    """Return ``uri`` unchanged if it is an absolute URI.

    Security notes:
    - The text is never normalized; it is rendered verbatim into the
      signed statement and must match what a verifier regenerates.
    - Whitespace, quotes and angle brackets are outside the URI grammar
      and are rejected, so a target cannot close its quoted clause and
      inject text into the statement.
    - Every '%' must start a two-digit hex escape.

    """

    if not isinstance(uri, str) or not uri:
        raise InvalidNamespaceUri(uri)
    if not _URI_CHARS_RE.match(uri) or _BAD_PERCENT_RE.search(uri):
        raise InvalidNamespaceUri(uri)
    try:
        _VALIDATOR.validate(uri_reference(uri))
    except uri_exceptions.RFC3986Exception as e:
        raise InvalidNamespaceUri(uri) from e
    return uri


@dataclass(frozen=True, order=True)
class Target:
    """An absolute URI naming the resource or scope an ability applies to.

    Ordering is the string order of the URI text.
    """

    uri: str

    def __post_init__(self) -> None:
        validate_absolute_uri(self.uri)

    @classmethod
    def coerce(cls, value: Union["Target", str]) -> "Target":
        if isinstance(value, Target):
            return value
        return cls(value)

    def __str__(self) -> str:
        return self.uri
