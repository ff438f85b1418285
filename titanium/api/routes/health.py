"""
Health Routes
=============

FastAPI routes for health check endpoints.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from titanium.config.logging import get_logger
from titanium.core.pipeline import RenderPipeline, get_render_pipeline
from titanium.models.schemas import HealthStatus

logger = get_logger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health", response_class=PlainTextResponse)
async def health_check() -> str:
    """Liveness check."""
    logger.debug("Health check requested")
    return "OK"


@router.get("/health/detailed", response_model=HealthStatus)
async def detailed_health_check(
    pipeline: RenderPipeline = Depends(get_render_pipeline),
) -> HealthStatus:
    """Report render pool usage."""
    executor = pipeline.executor
    return HealthStatus(
        status="healthy",
        version=pipeline.settings.app_version,
        renderer=pipeline.renderer.name,
        render_capacity=executor.capacity,
        renders_in_flight=executor.in_flight,
    )
