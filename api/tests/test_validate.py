import pytest

from datashield.errors import InvalidInput, InvalidUrlFormat
from datashield.pipeline.validate import (
    EmailRequest,
    UrlRequest,
    is_allowed_url,
    validate_email_request,
    validate_url_request,
)


def test_valid_url_becomes_tagged_request():
    req = validate_url_request({"url": "https://example.com/login?next=/"})
    assert req == UrlRequest(url="https://example.com/login?next=/")
    assert req.kind == "url"


@pytest.mark.parametrize("payload", [None, {}, {"url": None}, {"url": ""}, {"url": "   "}, {"url": 42}])
def test_missing_url_is_invalid_input(payload):
    with pytest.raises(InvalidInput):
        validate_url_request(payload)


@pytest.mark.parametrize(
    "url",
    [
        "example.com",
        "www.example.com/login",
        "//example.com/path",
        "ftp://example.com/file",
        "javascript:alert(1)",
        "file:///etc/passwd",
        "http://",
        "https://example.com:99999/",
        "http://a\tb.test/",
        "http://exa mple.com/",
        "http://exa<mple.com/",
    ],
)
def test_url_without_explicit_http_scheme_is_rejected(url):
    assert not is_allowed_url(url)
    with pytest.raises(InvalidUrlFormat):
        validate_url_request({"url": url})


def test_scheme_check_is_case_insensitive_but_exact():
    assert is_allowed_url("HTTPS://Example.com")
    assert not is_allowed_url("httpx://example.com")


def test_email_request_requires_content():
    with pytest.raises(InvalidInput):
        validate_email_request({"emailContent": ""})
    with pytest.raises(InvalidInput):
        validate_email_request({"email": "Subject: hi\n\nbody"})

    req = validate_email_request({"emailContent": "Subject: hi\n\nbody"})
    assert req == EmailRequest(raw_content="Subject: hi\n\nbody")
    assert req.kind == "email"


def test_client_errors_map_to_400():
    assert InvalidInput("x").status_code == 400
    assert InvalidUrlFormat("x").is_client_error


def test_surrounding_whitespace_is_stripped_before_checking():
    assert validate_url_request({"url": "  https://example.com/  "}) == UrlRequest(url="https://example.com/")
