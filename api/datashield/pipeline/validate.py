"""
Input validation for the two analysis routes.

Turns a raw JSON body into a tagged request (``UrlRequest`` or
``EmailRequest``). Nothing here touches the network or parses email; it only
decides whether the pipeline may start.
"""

from dataclasses import dataclass
from typing import Any, Literal, Mapping, Union
from urllib.parse import urlsplit

import httpx

from ..errors import InvalidInput, InvalidUrlFormat

ALLOWED_SCHEMES = {"http", "https"}

# Never valid in a host name, even percent-decoded.
FORBIDDEN_HOST_CHARS = set("<>\"{}|\\^`")


@dataclass(frozen=True)
class UrlRequest:
    url: str
    kind: Literal["url"] = "url"


@dataclass(frozen=True)
class EmailRequest:
    raw_content: str
    kind: Literal["email"] = "email"


AnalysisRequest = Union[UrlRequest, EmailRequest]


def _required_text(payload: Mapping[str, Any] | None, field: str) -> str:
    value = (payload or {}).get(field)
    if not isinstance(value, str) or not value.strip():
        raise InvalidInput(f"Field '{field}' is required")
    return value


def _has_control_or_space(text: str) -> bool:
    return any(ch.isspace() or ord(ch) < 0x20 or ord(ch) == 0x7F for ch in text)


def is_allowed_url(url: str) -> bool:
    """Absolute http(s) URL with an explicit scheme and a well-formed host."""
    # urlsplit silently drops tabs and newlines, so check the raw text first.
    if _has_control_or_space(url):
        return False
    try:
        parts = urlsplit(url)
        # Accessing .port validates the port component.
        parts.port
        httpx.URL(url)
    except (ValueError, httpx.InvalidURL):
        return False
    host = parts.hostname or ""
    if parts.scheme not in ALLOWED_SCHEMES or not host:
        return False
    return not any(ch in FORBIDDEN_HOST_CHARS for ch in host)


def validate_url_request(payload: Mapping[str, Any] | None) -> UrlRequest:
    url = _required_text(payload, "url").strip()
    if not is_allowed_url(url):
        raise InvalidUrlFormat(f"Invalid URL format: {url!r} (expected an absolute http or https URL)")
    return UrlRequest(url=url)


def validate_email_request(payload: Mapping[str, Any] | None) -> EmailRequest:
    return EmailRequest(raw_content=_required_text(payload, "emailContent"))
