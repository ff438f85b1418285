"""
Unit Tests for URL Validation
=============================
"""

import pytest

from titanium.core.errors import InvalidURLError
from titanium.core.url.validator import validate_url


class TestValidateUrl:
    """Test absolute URL validation."""

    def test_valid_url(self):
        url = validate_url("https://google.com")
        assert url.scheme == "https"
        assert url.host == "google.com"

    def test_structured_parts(self):
        url = validate_url("http://user@example.com:8080/a/b?x=1#top")
        assert url.scheme == "http"
        assert url.host == "example.com"
        assert url.port == 8080
        assert url.path == "/a/b"
        assert url.query == "x=1"
        assert url.fragment == "top"

    def test_scheme_not_restricted(self):
        url = validate_url("ftp://files.example.com/readme.txt")
        assert url.scheme == "ftp"

    @pytest.mark.parametrize(
        "raw",
        [
            "not a url",
            "",
            "/relative/path",
            "example.com",
            "https://",
            "http://exa mple.com",
            "mailto:someone@example.com",
        ],
    )
    def test_invalid_url(self, raw):
        with pytest.raises(InvalidURLError) as exc_info:
            validate_url(raw)
        assert exc_info.value.message == "Invalid URL"
