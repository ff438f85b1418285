"""
Pydantic Models and Schemas
===========================

Request parameters, pipeline results and API response models.
"""

from typing import Optional, Dict, Any

from pydantic import BaseModel, ConfigDict, Field

UINT32_MAX = 2**32 - 1


class RenderParams(BaseModel):
    """Query parameters of ``GET /render.png``."""

    model_config = ConfigDict(extra="ignore")

    url: str = Field(..., description="Base64url-encoded page URL")
    w: int = Field(..., ge=0, le=UINT32_MAX, description="Target width in pixels")
    h: int = Field(..., ge=0, le=UINT32_MAX, description="Target height in pixels")


class FetchedPage(BaseModel):
    """HTML document returned by the fetcher."""

    text: str
    status: int
    url: str = Field(..., description="Final URL after redirects")
    content_type: Optional[str] = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class RenderResult(BaseModel):
    """Rendered PNG together with timing information."""

    png_data: bytes = Field(..., repr=False)
    width: int
    height: int
    file_size: int
    source_url: str
    upstream_status: int
    fetch_time: float = Field(..., description="Seconds spent fetching the page")
    render_time: float = Field(..., description="Seconds spent rendering")
    total_time: float = Field(..., description="Seconds from request start to completion")


class HealthStatus(BaseModel):
    """Detailed health check response."""

    status: str
    version: str
    renderer: str
    render_capacity: int
    renders_in_flight: int


class ErrorResponse(BaseModel):
    """Error response for unexpected server failures."""

    error: str
    error_code: str
    details: Optional[Dict[str, Any]] = None
    request_id: Optional[str] = None
