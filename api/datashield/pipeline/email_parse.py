"""
Email enrichment: raw RFC 5322 text -> ``EmailMetadata``.

Link extraction is a regex scan for ``href="http(s)://..."`` over every HTML
part, not a structural HTML parse. It reports anchors inside comments,
``<template>``/``<noscript>`` blocks and other non-rendered markup as well.
That over-approximation is intended and covered by tests.
"""

import re
from dataclasses import asdict, dataclass, field
from email import policy
from email.errors import HeaderParseError, MessageError
from email.message import Message
from email.parser import Parser
from typing import Any, Dict, List

from ..errors import EmailParseFailed

HREF_RE = re.compile(r"""href\s*=\s*["'](https?://[^"']+)["']""", re.IGNORECASE)
FOLDING_RE = re.compile(r"\r?\n[ \t]+")

NOT_AVAILABLE = "Not available"
NOT_PRESENT = "Not present"
PRESENT = "Present"


@dataclass(frozen=True)
class EmailMetadata:
    sender: str
    subject: str
    date: str
    headers: Dict[str, str] = field(default_factory=dict)
    attachment_count: int = 0
    has_html: bool = False
    links: List[str] = field(default_factory=list)
    spf_result: str = NOT_AVAILABLE
    dkim_result: str = NOT_PRESENT
    return_path: str = NOT_AVAILABLE

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ============================================================================
# Helpers
# ============================================================================

def extract_links(html: str) -> List[str]:
    """All href targets with an http(s) scheme, first occurrence order, no duplicates."""
    seen = set()
    links: List[str] = []
    for m in HREF_RE.finditer(html or ""):
        link = m.group(1)
        if link not in seen:
            seen.add(link)
            links.append(link)
    return links


def _decode_part(part: Message) -> str:
    payload = part.get_payload(decode=True) or b""
    charset = part.get_content_charset() or "utf-8"
    try:
        return payload.decode(charset, errors="replace")
    except LookupError:
        # Unknown charset label in the Content-Type header.
        return payload.decode("utf-8", errors="replace")


def _header_text(msg: Message, name: str, raw: str) -> str:
    """Decoded header value, or the unfolded raw value when it does not parse."""
    try:
        return str(msg.policy.header_fetch_parse(name, raw))
    except (HeaderParseError, IndexError, ValueError, TypeError):
        return FOLDING_RE.sub(" ", raw).strip()


def _header_map(msg: Message) -> Dict[str, str]:
    headers: Dict[str, str] = {}
    for name, raw in msg.raw_items():
        value = _header_text(msg, name, raw)
        if name in headers:
            # Repeated headers (Received, ...) keep every value.
            headers[name] = headers[name] + "\n" + value
        else:
            headers[name] = value
    return headers


def _is_attachment(part: Message) -> bool:
    if part.is_multipart():
        return False
    return part.get_content_disposition() == "attachment" or part.get_filename() is not None


def _header(msg: Message, name: str) -> str | None:
    wanted = name.lower()
    for key, raw in msg.raw_items():
        if key.lower() == wanted:
            return _header_text(msg, key, raw).strip() or None
    return None


# ============================================================================
# Public API
# ============================================================================

def parse_email(raw_content: str) -> EmailMetadata:
    """
    Parse a raw email into metadata used by the heuristics and the prompt.

    Raises EmailParseFailed when the text has no header block or the parser
    cannot make sense of its structure.
    """
    try:
        msg = Parser(policy=policy.default).parsestr(raw_content)
        if not msg.keys():
            raise EmailParseFailed("Email content has no header section")

        html_parts: List[str] = []
        attachments = 0
        for part in msg.walk():
            if _is_attachment(part):
                attachments += 1
            elif part.get_content_type() == "text/html":
                html_parts.append(_decode_part(part))

        links: List[str] = []
        for html in html_parts:
            links.extend(link for link in extract_links(html) if link not in links)

        auth_results = _header(msg, "authentication-results")
        return_path = _header(msg, "return-path")

        return EmailMetadata(
            sender=_header(msg, "from") or "",
            subject=_header(msg, "subject") or "",
            date=_header(msg, "date") or "",
            headers=_header_map(msg),
            attachment_count=attachments,
            has_html=bool(html_parts),
            links=links,
            spf_result=auth_results or NOT_AVAILABLE,
            dkim_result=PRESENT if _header(msg, "dkim-signature") else NOT_PRESENT,
            return_path=return_path or NOT_AVAILABLE,
        )
    except EmailParseFailed:
        raise
    except (MessageError, ValueError, TypeError, LookupError) as exc:
        raise EmailParseFailed(f"Could not parse email: {exc}", cause=exc) from exc
