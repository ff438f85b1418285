"""
URL Validator
=============

Parses decoded text as an absolute URL. Scheme policy is left to the fetcher.
"""

from pydantic import AnyUrl, TypeAdapter, ValidationError

from titanium.config.logging import get_logger
from titanium.core.errors import InvalidURLError

logger = get_logger(__name__)

_url_adapter: TypeAdapter[AnyUrl] = TypeAdapter(AnyUrl)


def validate_url(url_str: str) -> AnyUrl:
    """
    Validate that ``url_str`` is an absolute URL with a host.

    Raises:
        InvalidURLError: For relative, host-less or malformed URLs
    """
    logger.debug("Validating URL", url=url_str)

    try:
        url = _url_adapter.validate_python(url_str)
    except ValidationError as e:
        logger.error("URL parsing error", url=url_str, error=e.errors()[0]["msg"])
        raise InvalidURLError() from e

    if not url.host:
        logger.error("URL parsing error", url=url_str, error="URL has no authority")
        raise InvalidURLError()

    return url
