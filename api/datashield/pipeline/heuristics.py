"""
Local suspicion indicators for the email route.

Pure functions over parsed metadata: no I/O and no failure mode. Each rule is
evaluated independently and appends its indicator when it fires, so the output
order follows rule order.
"""

from typing import Callable, List, Optional

from .email_parse import EmailMetadata

SUBJECT_KEYWORDS = ("urgent", "password")

# Substring match against the full link text, not just the host.
URL_SHORTENER_MARKERS = ("bit.ly", "tinyurl", "shortened")

SUBJECT_KEYWORD_INDICATOR = "Suspicious subject keywords"
SHORTENED_LINK_INDICATOR = "Contains shortened URLs"


def _subject_keywords(metadata: EmailMetadata) -> Optional[str]:
    subject = metadata.subject.lower()
    if any(k in subject for k in SUBJECT_KEYWORDS):
        return SUBJECT_KEYWORD_INDICATOR
    return None


def _shortened_links(metadata: EmailMetadata) -> Optional[str]:
    for link in metadata.links:
        low = link.lower()
        if any(marker in low for marker in URL_SHORTENER_MARKERS):
            return SHORTENED_LINK_INDICATOR
    return None


def _sender_reputation(metadata: EmailMetadata) -> Optional[str]:
    # Extension point for a sender-domain reputation lookup; emits nothing yet.
    return None


RULES: List[Callable[[EmailMetadata], Optional[str]]] = [
    _subject_keywords,
    _shortened_links,
    _sender_reputation,
]


def extract_indicators(metadata: EmailMetadata) -> List[str]:
    indicators: List[str] = []
    for rule in RULES:
        hit = rule(metadata)
        if hit:
            indicators.append(hit)
    return indicators
