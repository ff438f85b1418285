"""
FastAPI Application
==================

Application factory, middleware, exception handlers and the server entry point.
"""

from contextlib import asynccontextmanager
import socket
import sys
import time
import uuid
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
import structlog
import uvicorn

from titanium.config.settings import get_settings, Settings
from titanium.config.logging import get_logger, setup_logging, shutdown_logging
from titanium.core.errors import RenderPipelineError
from titanium.core.pipeline import initialize_render_pipeline, close_render_pipeline
from titanium.api.routes.health import router as health_router
from titanium.api.routes.render import router as render_router
from titanium.models.schemas import ErrorResponse

logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Application factory function for creating a FastAPI app instance.

    Returns:
        FastAPI application instance
    """
    settings = settings or get_settings()
    setup_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan manager."""
        logger.info("Starting Titanium service", version=settings.app_version)
        await initialize_render_pipeline(settings)
        try:
            yield
        finally:
            logger.info("Shutting down Titanium service")
            await close_render_pipeline()

    app = FastAPI(
        title=settings.app_name,
        description="Render web pages to PNG images",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/docs" if settings.debug else None,
        redoc_url=None,
        openapi_url="/openapi.json" if settings.debug else None,
    )

    app.include_router(render_router)
    app.include_router(health_router)

    # Request tracing middleware
    @app.middleware("http")
    async def trace_requests(request: Request, call_next):  # type: ignore[no-untyped-def]
        """Assign a request ID and log every request with its outcome and duration."""
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        start = time.perf_counter()

        with structlog.contextvars.bound_contextvars(
            request_id=request_id, method=request.method, path=request.url.path
        ):
            logger.info("Request started", client=request.client.host if request.client else None)
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            logger.info(
                "Request completed",
                status_code=response.status_code,
                duration=round(time.perf_counter() - start, 4),
            )
        return response

    @app.exception_handler(RenderPipelineError)
    async def pipeline_exception_handler(request: Request, exc: RenderPipelineError) -> PlainTextResponse:
        """Convert pipeline failures into plain-text responses."""
        status_code = (
            exc.upstream_status_code if settings.distinguish_upstream_errors else exc.status_code
        )
        logger.warning(
            "Render request failed",
            error=exc.message,
            error_type=type(exc).__name__,
            status_code=status_code,
        )
        return PlainTextResponse(exc.message, status_code=status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> PlainTextResponse:
        """Answer malformed query strings with 400 instead of FastAPI's 422."""
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'][1:]) or 'request'}: {err['msg']}"
            for err in exc.errors()
        )
        logger.warning("Invalid request parameters", errors=problems)
        return PlainTextResponse(f"Invalid request parameters: {problems}", status_code=400)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """General exception handler for unexpected errors."""
        error_response = ErrorResponse(
            error="Internal server error",
            error_code="INTERNAL_ERROR",
            details={"exception": str(exc)} if settings.debug else None,
            request_id=getattr(request.state, "request_id", None),
        )

        logger.error(
            "Unhandled exception",
            exception=str(exc),
            request_id=error_response.request_id,
            exc_info=exc,
        )

        return JSONResponse(status_code=500, content=error_response.model_dump(mode="json"))

    return app


def bind_socket(host: str, port: int) -> socket.socket:
    """Bind and listen on ``host:port``."""
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    return socket.create_server((host, port), family=family, backlog=2048)


def main() -> None:
    """Run the server until it is stopped. Exits with status 1 on fatal errors."""
    settings = get_settings()
    setup_logging(settings)
    logger.info("Initializing Titanium service", environment=settings.environment)

    try:
        sock = bind_socket(settings.host, settings.port)
    except OSError as e:
        logger.critical("Failed to bind to address", host=settings.host, port=settings.port, error=str(e))
        shutdown_logging()
        sys.exit(1)

    config = uvicorn.Config(
        create_app(settings),
        log_config=None,
        log_level=settings.log_level.lower(),
        access_log=False,
    )
    server = uvicorn.Server(config)
    logger.info("Server listening", url=f"http://{settings.host}:{settings.port}")

    failed = False
    try:
        server.run(sockets=[sock])
    except Exception as e:
        logger.critical("Server error", error=str(e), exc_info=True)
        failed = True
    finally:
        sock.close()

    if failed or not server.started:
        logger.critical("Server stopped unexpectedly")
        shutdown_logging()
        sys.exit(1)

    shutdown_logging()


if __name__ == "__main__":
    main()
