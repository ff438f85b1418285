"""
Base64url Decoder
=================

Decodes the base64url-encoded ``url`` query parameter into a text URL.
"""

import base64
import binascii
import re

from titanium.config.logging import get_logger
from titanium.core.errors import InvalidBase64Error, InvalidUtf8Error

logger = get_logger(__name__)

# URL-safe alphabet with up to two trailing pad characters
_BASE64URL_PATTERN = re.compile(r"[A-Za-z0-9_-]*={0,2}")


def decode_base64_url(encoded: str) -> str:
    """
    Decode a base64url string into UTF-8 text.

    Unpadded input is accepted. Padded input must be padded correctly, and
    the unused bits of the final character must be zero.

    Args:
        encoded: Untrusted value of the ``url`` query parameter

    Returns:
        The decoded text

    Raises:
        InvalidBase64Error: If the input is not valid base64url
        InvalidUtf8Error: If the decoded bytes are not UTF-8
    """
    logger.debug("Attempting to decode base64 URL", encoded=encoded)

    if not _BASE64URL_PATTERN.fullmatch(encoded):
        logger.error("Base64 decoding error", reason="character outside base64url alphabet")
        raise InvalidBase64Error()

    data = encoded
    if "=" in data:
        if len(data) % 4:
            logger.error("Base64 decoding error", reason="invalid padding")
            raise InvalidBase64Error()
    else:
        if len(data) % 4 == 1:
            logger.error("Base64 decoding error", reason="invalid length")
            raise InvalidBase64Error()
        data += "=" * (-len(data) % 4)

    try:
        raw = base64.urlsafe_b64decode(data)
    except (binascii.Error, ValueError) as e:
        logger.error("Base64 decoding error", error=str(e))
        raise InvalidBase64Error() from e

    # Unused trailing bits must be zero, so every value has one encoding
    if base64.urlsafe_b64encode(raw).decode("ascii") != data:
        logger.error("Base64 decoding error", reason="non-canonical encoding")
        raise InvalidBase64Error()

    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        logger.error("UTF-8 decoding error", error=str(e))
        raise InvalidUtf8Error() from e


def encode_base64_url(url: str) -> str:
    """Encode text as padded base64url, the inverse of ``decode_base64_url``."""
    return base64.urlsafe_b64encode(url.encode("utf-8")).decode("ascii")
