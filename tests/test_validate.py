import pytest

from httpreqkit.validate import (
    InvalidRequestError,
    is_http_error,
    is_http_success,
    is_request_valid,
    is_url_valid,
)


def test_empty_method():
    with pytest.raises(InvalidRequestError, match="^no method is specified$"):
        is_request_valid("", "https://www.example.com")


def test_invalid_url():
    with pytest.raises(InvalidRequestError, match="^invalid url invalid-url$"):
        is_request_valid("GET", "invalid-url")


def test_valid_request_returns_none():
    assert is_request_valid("GET", "https://www.example.com") is None


@pytest.mark.parametrize("code,expected", [(200, True), (400, False), (299, True), (300, False)])
def test_is_http_success(code, expected):
    assert is_http_success(code) is expected


@pytest.mark.parametrize("code,expected", [(400, True), (200, False), (599, True), (600, False)])
def test_is_http_error(code, expected):
    assert is_http_error(code) is expected


@pytest.mark.parametrize("url,expected", [
    ("https://www.example.com", True),
    ("", False),
    ("invalid-url", False),
    ("http://", False),
    ("http://[::1", False),
])
def test_is_url_valid(url, expected):
    assert is_url_valid(url) is expected