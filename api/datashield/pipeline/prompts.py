"""
Prompt composition for the external classifier.

Both routes produce the same two-message shape (system + user). The system
message pins the task and the answer format; the user message is a plain-text
dump of everything the pipeline learned about the input.
"""

from typing import Dict, List

from .email_parse import EmailMetadata
from .fetch import FetchedPage

# Keep a reasonable cap to avoid oversized payloads.
MAX_PAGE_CHARS = 8000

URL_SYSTEM_PROMPT = (
    "You will read a URL and the content of the page it serves and estimate the "
    "percentage chance that the page is phishing or a scam. Analyze the content "
    "before answering. Reply with the percentage followed by a summary of at most "
    "50 characters."
)

EMAIL_SYSTEM_PROMPT = (
    "You are an email security analyst. Using the metadata and security indicators "
    "below, estimate the percentage chance that this email is spam and the "
    "percentage chance that it is phishing. Reply with both percentages followed "
    "by an explanation of at most 50 characters."
)

Messages = List[Dict[str, str]]


def _truncate(text: str, limit: int = MAX_PAGE_CHARS) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "\n[content truncated]"


def compose_url_prompt(page: FetchedPage) -> Messages:
    user = f"url: {page.url}\n\ncontent:\n{_truncate(page.body)}"
    return [
        {"role": "system", "content": URL_SYSTEM_PROMPT},
        {"role": "user", "content": user},
    ]


def compose_email_prompt(metadata: EmailMetadata, indicators: List[str]) -> Messages:
    links = "\n".join(f"  - {link}" for link in metadata.links) or "  (none)"
    found = "\n".join(f"  - {ind}" for ind in indicators) or "  (none)"
    user = (
        "Email metadata:\n"
        f"From: {metadata.sender}\n"
        f"Subject: {metadata.subject}\n"
        f"Date: {metadata.date}\n"
        f"Return-Path: {metadata.return_path}\n"
        f"Authentication-Results: {metadata.spf_result}\n"
        f"DKIM-Signature: {metadata.dkim_result}\n"
        f"Attachments: {metadata.attachment_count}\n"
        f"HTML body: {'yes' if metadata.has_html else 'no'}\n"
        f"Links:\n{links}\n\n"
        f"Security indicators:\n{found}"
    )
    return [
        {"role": "system", "content": EMAIL_SYSTEM_PROMPT},
        {"role": "user", "content": user},
    ]
