from datashield.pipeline.email_parse import parse_email
from datashield.pipeline.fetch import FetchedPage
from datashield.pipeline.heuristics import extract_indicators
from datashield.pipeline.prompts import (
    MAX_PAGE_CHARS,
    compose_email_prompt,
    compose_url_prompt,
)


def test_url_prompt_has_system_and_user_messages():
    page = FetchedPage(url="https://x.test", body="<form>password</form>", status_code=200, final_url="https://x.test")
    messages = compose_url_prompt(page)

    assert [m["role"] for m in messages] == ["system", "user"]
    assert "percentage" in messages[0]["content"]
    assert "50 characters" in messages[0]["content"]
    assert messages[1]["content"].startswith("url: https://x.test")
    assert "<form>password</form>" in messages[1]["content"]


def test_url_prompt_truncates_large_pages():
    page = FetchedPage(url="https://x.test", body="a" * (MAX_PAGE_CHARS + 500), status_code=200, final_url="https://x.test")
    user = compose_url_prompt(page)[1]["content"]
    assert user.count("a") <= MAX_PAGE_CHARS + 10
    assert user.endswith("[content truncated]")


def test_email_prompt_lists_metadata_and_indicators(raw_email):
    meta = parse_email(raw_email)
    messages = compose_email_prompt(meta, extract_indicators(meta))

    assert [m["role"] for m in messages] == ["system", "user"]
    user = messages[1]["content"]
    assert "Subject: URGENT: reset your password" in user
    assert "http://bit.ly/x" in user
    assert "Suspicious subject keywords" in user
    assert "Attachments: 1" in user


def test_email_prompt_marks_empty_sections():
    meta = parse_email("From: a@b.test\nSubject: hi\n\nbody\n")
    user = compose_email_prompt(meta, [])[1]["content"]
    assert "Links:\n  (none)" in user
    assert "Security indicators:\n  (none)" in user
