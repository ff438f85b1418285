"""
PNG Generator
=============

Playwright-based PNG screenshot generation from fetched HTML.

Rendering is blocking: each call drives headless Chromium through Playwright's
synchronous API and is meant to run on a ``RenderExecutor`` worker thread.
Every worker thread keeps its own browser, since sync Playwright objects are
bound to the thread that created them. ``close_thread`` must likewise run on
the thread that owns the browser; see ``RenderExecutor.run_on_each_worker``.
"""

import html
import io
import re
import threading
from typing import Any, Dict, Optional, Protocol, Set, Type

from PIL import Image
from playwright.sync_api import Browser, sync_playwright

from titanium.config.logging import get_logger
from titanium.config.settings import Settings, get_settings
from titanium.core.errors import RenderError

logger = get_logger(__name__)

_HEAD_TAG = re.compile(r"<head(\s[^>]*)?>", re.IGNORECASE)
_BASE_TAG = re.compile(r"<base\s", re.IGNORECASE)


class Renderer(Protocol):
    """Turns HTML into image bytes. Implementations may block."""

    name: str

    def render(self, html_content: str, base_url: str, width: int, height: int) -> bytes:
        ...

    def close_thread(self) -> None:
        """Release resources held for the calling thread."""
        ...


def inject_base_href(html_content: str, base_url: str) -> str:
    """Make relative resources in ``html_content`` resolve against ``base_url``."""
    if _BASE_TAG.search(html_content):
        return html_content

    base_tag = f'<base href="{html.escape(base_url, quote=True)}">'
    match = _HEAD_TAG.search(html_content)
    if match:
        return html_content[: match.end()] + base_tag + html_content[match.end() :]
    return base_tag + html_content


def optimize_png(png_bytes: bytes) -> bytes:
    """
    Re-encode PNG bytes with maximum compression.

    Returns the original bytes when Pillow cannot process the image or the
    result is not smaller.
    """
    try:
        image = Image.open(io.BytesIO(png_bytes))
        output = io.BytesIO()
        image.save(output, format="PNG", optimize=True, compress_level=9)
        optimized_bytes = output.getvalue()
    except (OSError, ValueError) as e:
        logger.warning("PNG optimization failed, using original", error=str(e))
        return png_bytes

    if len(optimized_bytes) >= len(png_bytes):
        return png_bytes

    logger.debug(
        "PNG optimization completed",
        original_size=len(png_bytes),
        optimized_size=len(optimized_bytes),
        reduction_percent=round((1 - len(optimized_bytes) / len(png_bytes)) * 100, 2),
    )
    return optimized_bytes


class PlaywrightRenderer:
    """Headless Chromium renderer with one browser per worker thread."""

    name = "playwright"

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.logger: Any = logger.bind(renderer="playwright")
        self._local = threading.local()
        self._lock = threading.Lock()
        self._open_threads: Set[int] = set()

    @property
    def open_browsers(self) -> int:
        """Number of worker threads currently holding a Playwright driver."""
        with self._lock:
            return len(self._open_threads)

    def _get_browser(self) -> Browser:
        """Get the browser for the current thread, launching it if needed."""
        browser: Optional[Browser] = getattr(self._local, "browser", None)
        if browser is not None and browser.is_connected():
            return browser

        if getattr(self._local, "playwright", None) is None:
            self._local.playwright = sync_playwright().start()
            with self._lock:
                self._open_threads.add(threading.get_ident())

        browser = self._local.playwright.chromium.launch(
            headless=self.settings.playwright_headless,
            args=[
                "--no-sandbox",
                "--disable-setuid-sandbox",
                "--disable-dev-shm-usage",
                "--disable-gpu",
            ],
        )
        self._local.browser = browser
        self.logger.info("Browser launched", thread=threading.current_thread().name)
        return browser

    def render(self, html_content: str, base_url: str, width: int, height: int) -> bytes:
        """
        Render ``html_content`` into a ``width`` x ``height`` PNG.

        Raises:
            RenderError: If the browser fails at any step
        """
        self.logger.debug(
            "Launching renderer", base_url=base_url, width=width, height=height,
            html_length=len(html_content),
        )

        try:
            browser = self._get_browser()
            context = browser.new_context(
                viewport={"width": width, "height": height}, java_script_enabled=True
            )
            try:
                page = context.new_page()
                page.set_default_timeout(self.settings.playwright_timeout)
                page.set_content(inject_base_href(html_content, base_url), wait_until="load")
                screenshot_bytes = page.screenshot(type="png", full_page=False)
            finally:
                context.close()
        except Exception as e:
            self.logger.error("Renderer failed", base_url=base_url, error=str(e))
            raise RenderError(f"Task failed: {e}") from e

        if self.settings.optimize_png:
            screenshot_bytes = optimize_png(screenshot_bytes)

        return screenshot_bytes

    def close_thread(self) -> None:
        """Close the calling thread's browser and stop its Playwright driver."""
        browser: Optional[Browser] = getattr(self._local, "browser", None)
        playwright = getattr(self._local, "playwright", None)
        self._local.browser = None
        self._local.playwright = None

        try:
            if browser is not None and browser.is_connected():
                browser.close()
        finally:
            if playwright is not None:
                with self._lock:
                    self._open_threads.discard(threading.get_ident())
                playwright.stop()
                self.logger.info("Browser closed", thread=threading.current_thread().name)


class RendererFactory:
    """Factory for creating renderers by name."""

    _renderers: Dict[str, Type[PlaywrightRenderer]] = {
        "playwright": PlaywrightRenderer,
    }

    @classmethod
    def create_renderer(cls, name: str = "playwright", settings: Optional[Settings] = None) -> Renderer:
        """
        Create a renderer instance.

        Raises:
            ValueError: If ``name`` is not a known renderer
        """
        if name not in cls._renderers:
            raise ValueError(f"Unknown renderer '{name}'. Available: {sorted(cls._renderers)}")
        return cls._renderers[name](settings)
