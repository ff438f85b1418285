"""
Render Pipeline
===============

Orchestrates decode -> validate -> fetch -> render for one request.
Each step either hands its result to the next or raises a
``RenderPipelineError``; nothing is retried.
"""

import time
from typing import Any, Optional

from titanium.config.logging import get_logger
from titanium.config.settings import Settings, get_settings
from titanium.core.errors import InvalidDimensionsError, RenderError
from titanium.core.fetching.fetcher import PageFetcher
from titanium.core.rendering.executor import RenderExecutor
from titanium.core.rendering.png_generator import Renderer, RendererFactory
from titanium.core.url.decoder import decode_base64_url
from titanium.core.url.validator import validate_url
from titanium.models.schemas import RenderParams, RenderResult

logger = get_logger(__name__)


class RenderPipeline:
    """Turns ``RenderParams`` into a rendered PNG."""

    def __init__(
        self,
        fetcher: PageFetcher,
        renderer: Renderer,
        executor: RenderExecutor,
        settings: Optional[Settings] = None,
    ):
        self.fetcher = fetcher
        self.renderer = renderer
        self.executor = executor
        self.settings = settings or get_settings()
        self.logger: Any = logger.bind(component="render_pipeline")

    def check_dimensions(self, width: int, height: int) -> None:
        """Reject sizes the renderer cannot produce."""
        if not 1 <= width <= self.settings.max_width:
            raise InvalidDimensionsError(
                f"Invalid width: must be between 1 and {self.settings.max_width}"
            )
        if not 1 <= height <= self.settings.max_height:
            raise InvalidDimensionsError(
                f"Invalid height: must be between 1 and {self.settings.max_height}"
            )

    async def run(self, params: RenderParams) -> RenderResult:
        """
        Execute the full pipeline.

        Args:
            params: Parsed query parameters

        Returns:
            RenderResult with PNG bytes and timings

        Raises:
            RenderPipelineError: The first step that failed
        """
        start = time.perf_counter()
        self.logger.info("Received render request", url=params.url, width=params.w, height=params.h)

        decoded = decode_base64_url(params.url)
        self.logger.debug("Decoded URL", url=decoded)

        url = validate_url(decoded)
        self.logger.debug("Validated URL", url=str(url), scheme=url.scheme, host=url.host)

        self.check_dimensions(params.w, params.h)

        fetch_start = time.perf_counter()
        page = await self.fetcher.fetch(url)
        fetch_time = time.perf_counter() - fetch_start

        self.logger.info("Starting render", url=str(url), width=params.w, height=params.h)
        render_start = time.perf_counter()
        png_data = await self._render(page.text, page.url, params.w, params.h)
        render_time = time.perf_counter() - render_start
        self.logger.info("Render completed", render_time=round(render_time, 3))

        total_time = time.perf_counter() - start
        self.logger.info(
            "Render request completed",
            total_time=round(total_time, 3),
            fetch_time=round(fetch_time, 3),
            file_size=len(png_data),
        )

        return RenderResult(
            png_data=png_data,
            width=params.w,
            height=params.h,
            file_size=len(png_data),
            source_url=page.url,
            upstream_status=page.status,
            fetch_time=fetch_time,
            render_time=render_time,
            total_time=total_time,
        )

    async def _render(self, html_content: str, base_url: str, width: int, height: int) -> bytes:
        """Run the renderer on the blocking pool, converting any fault to RenderError."""
        try:
            png_data = await self.executor.run(
                self.renderer.render,
                html_content,
                base_url,
                width,
                height,
                timeout=self.settings.render_timeout,
            )
        except RenderError:
            raise
        except Exception as e:
            self.logger.error("Task execution failed", error=str(e), exc_info=True)
            raise RenderError(f"Task failed: {e}") from e

        if not png_data:
            self.logger.error("Renderer returned no image data", base_url=base_url)
            raise RenderError("Task failed: renderer produced no image data")

        return png_data


# Global pipeline instance
_render_pipeline: Optional[RenderPipeline] = None


async def initialize_render_pipeline(settings: Optional[Settings] = None) -> RenderPipeline:
    """Create the global pipeline with its fetch session and worker pool."""
    global _render_pipeline
    settings = settings or get_settings()

    executor = RenderExecutor(settings=settings)
    executor.start()

    _render_pipeline = RenderPipeline(
        fetcher=PageFetcher(settings),
        renderer=RendererFactory.create_renderer(settings.renderer, settings),
        executor=executor,
        settings=settings,
    )
    logger.info("Render pipeline initialized", renderer=settings.renderer)
    return _render_pipeline


async def close_render_pipeline() -> None:
    """Close the global pipeline, shutting down each worker's renderer first."""
    global _render_pipeline
    if _render_pipeline:
        await _render_pipeline.fetcher.close()
        await _render_pipeline.executor.run_on_each_worker(_render_pipeline.renderer.close_thread)
        _render_pipeline.executor.close(wait=False)
        _render_pipeline = None
        logger.info("Render pipeline closed")


def get_render_pipeline() -> RenderPipeline:
    """Get the global pipeline."""
    if _render_pipeline is None:
        raise RuntimeError("Render pipeline not initialized")
    return _render_pipeline
