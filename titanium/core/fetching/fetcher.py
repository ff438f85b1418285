"""
Page Fetcher
============

HTTP client that downloads the page to be rendered.
"""

import asyncio
from typing import Any, Optional

import aiohttp
from pydantic import AnyUrl

from titanium.config.logging import get_logger
from titanium.config.settings import Settings, get_settings
from titanium.core.errors import FetchError
from titanium.models.schemas import FetchedPage

logger = get_logger(__name__)


class PageFetcher:
    """Fetches page HTML over a shared aiohttp session."""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.logger: Any = logger.bind(component="page_fetcher")
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(
                total=self.settings.fetch_timeout, connect=self.settings.fetch_connect_timeout
            )
            self._session = aiohttp.ClientSession(
                timeout=timeout, headers={"User-Agent": self.settings.fetch_user_agent}
            )
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def fetch(self, url: AnyUrl) -> FetchedPage:
        """
        GET ``url`` and return the decoded body.

        Non-2xx responses are returned like any other page unless
        ``reject_upstream_errors`` is enabled.

        Raises:
            FetchError: On disallowed schemes, network failures, timeouts
                and undecodable bodies
        """
        target = str(url)

        if url.scheme not in self.settings.allowed_schemes:
            self.logger.error("Refusing to fetch URL", url=target, scheme=url.scheme)
            raise FetchError(f"Failed to fetch URL: unsupported scheme '{url.scheme}'")

        self.logger.info("Fetching page", url=target)

        try:
            session = await self._get_session()
            async with session.get(
                target, max_redirects=self.settings.fetch_max_redirects
            ) as response:
                self.logger.debug(
                    "Received response from URL", status=response.status, url=target
                )
                text = await response.text()
                page = FetchedPage(
                    text=text,
                    status=response.status,
                    url=str(response.url),
                    content_type=response.content_type,
                )
        except asyncio.TimeoutError as e:
            self.logger.error("Failed to fetch URL", url=target, error="timed out")
            raise FetchError("Failed to fetch URL: request timed out") from e
        except (aiohttp.ClientError, UnicodeDecodeError) as e:
            self.logger.error("Failed to fetch URL", url=target, error=str(e))
            raise FetchError(f"Failed to fetch URL: {e}") from e

        if not page.ok:
            self.logger.warning("Upstream returned non-success status", url=target, status=page.status)
            if self.settings.reject_upstream_errors:
                raise FetchError(f"Failed to fetch URL: upstream returned HTTP {page.status}")

        self.logger.info("Fetched page", url=target, status=page.status, html_length=len(page.text))
        return page
