"""
Unit Tests for Base64url Decoding
=================================
"""

import base64

import pytest

from titanium.core.errors import InvalidBase64Error, InvalidUtf8Error, RenderPipelineError
from titanium.core.url.decoder import decode_base64_url, encode_base64_url


class TestDecodeBase64Url:
    """Test decoding of the url query parameter."""

    def test_decode_valid(self):
        assert decode_base64_url("aHR0cHM6Ly9nb29nbGUuY29t") == "https://google.com"

    @pytest.mark.parametrize(
        "text",
        [
            "https://example.com",
            "https://example.com/path?q=1&r=2#frag",
            "http://例え.jp/ページ",
            "https://example.com/~user/a_b-c",
            "",
        ],
    )
    def test_round_trip(self, text):
        assert decode_base64_url(encode_base64_url(text)) == text

    def test_unpadded_input_accepted(self):
        encoded = base64.urlsafe_b64encode(b"https://a.io").decode().rstrip("=")
        assert "=" not in encoded
        assert decode_base64_url(encoded) == "https://a.io"

    def test_url_safe_alphabet_used(self):
        # "??>" encodes to "Pz8-" in the URL-safe alphabet and "Pz8+" in the standard one
        assert decode_base64_url("Pz8-") == "??>"

    @pytest.mark.parametrize(
        "encoded",
        [
            "invalid@@base64",
            "Pz8+",
            "Pz8/",
            "aGVs bG8=",
            "aGVsbG8=\n",
            "aHR0cHM6Ly9hLmlv\n",
            "a",
            "abcde",
            "ab=c",
            "abc===",
            "a=",
            "====",
        ],
    )
    def test_invalid_base64(self, encoded):
        with pytest.raises(InvalidBase64Error) as exc_info:
            decode_base64_url(encoded)
        assert exc_info.value.message == "Invalid base64"

    def test_invalid_utf8(self):
        encoded = base64.urlsafe_b64encode(b"\xff\xfe\xfd").decode()
        with pytest.raises(InvalidUtf8Error) as exc_info:
            decode_base64_url(encoded)
        assert exc_info.value.message == "Invalid URL encoding"

    def test_errors_are_pipeline_errors(self):
        with pytest.raises(RenderPipelineError):
            decode_base64_url("%%%")

    @pytest.mark.parametrize("encoded", ["aGl", "aGl=", "aB", "aB=="])
    def test_non_zero_trailing_bits_rejected(self, encoded):
        with pytest.raises(InvalidBase64Error):
            decode_base64_url(encoded)

    @pytest.mark.parametrize("encoded", ["aGk", "aGk="])
    def test_canonical_short_input_accepted(self, encoded):
        assert decode_base64_url(encoded) == "hi"
