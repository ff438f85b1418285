"""
Render Routes
=============

FastAPI route that renders a base64url-encoded page URL to PNG.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from titanium.core.pipeline import RenderPipeline, get_render_pipeline
from titanium.models.schemas import RenderParams

router = APIRouter(tags=["Rendering"])


@router.get(
    "/render.png",
    response_class=Response,
    responses={
        200: {"content": {"image/png": {}}, "description": "Rendered page"},
        400: {"content": {"text/plain": {}}, "description": "Invalid input or failed render"},
    },
)
async def render_png(
    params: Annotated[RenderParams, Query()],
    pipeline: RenderPipeline = Depends(get_render_pipeline),
) -> Response:
    """
    Render the page behind ``url`` to a ``w`` x ``h`` PNG.

    Pipeline failures are raised as ``RenderPipelineError`` and turned into
    plain-text responses by the application's exception handler.
    """
    result = await pipeline.run(params)
    return Response(
        content=result.png_data,
        media_type="image/png",
        headers={"X-Render-Time": f"{result.total_time:.3f}"},
    )
