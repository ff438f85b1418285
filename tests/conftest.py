"""
Test Configuration
==================

Pytest configuration with fixtures for all test types.
Provides test settings, fake collaborators and application clients.
"""

import os

os.environ.setdefault("TITANIUM_ENVIRONMENT", "testing")
os.environ.setdefault("TITANIUM_LOG_LEVEL", "DEBUG")

from typing import AsyncGenerator, Generator

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from fastapi.testclient import TestClient
from pydantic_settings import SettingsConfigDict

from titanium.api.main import create_app
from titanium.config.settings import Settings
from titanium.core.pipeline import RenderPipeline, get_render_pipeline
from titanium.core.rendering.executor import RenderExecutor

from tests.utils.helpers import make_png
from tests.utils.mocks import MockPageFetcher, MockRenderer


# Test settings override
class TestSettings(Settings):
    """Test-specific settings."""

    __test__ = False

    environment: str = "testing"
    debug: bool = True
    log_level: str = "DEBUG"
    render_timeout: float = 5.0
    render_workers: int = 4
    max_concurrent_renders: int = 4
    optimize_png: bool = False

    model_config = SettingsConfigDict(env_file=None, env_prefix="TITANIUM_TEST_")


@pytest.fixture
def test_settings() -> TestSettings:
    """Test settings fixture."""
    return TestSettings()


@pytest.fixture
def png_bytes() -> bytes:
    """A small valid PNG."""
    return make_png()


@pytest.fixture
def mock_fetcher() -> MockPageFetcher:
    """Fetcher returning a static page."""
    return MockPageFetcher()


@pytest.fixture
def mock_renderer(png_bytes: bytes) -> MockRenderer:
    """Renderer returning ``png_bytes``."""
    return MockRenderer(png_data=png_bytes)


@pytest.fixture
def render_executor(test_settings: TestSettings) -> Generator[RenderExecutor, None, None]:
    """Started render executor, closed after the test."""
    executor = RenderExecutor(settings=test_settings)
    executor.start()
    yield executor
    executor.close(wait=True)


@pytest.fixture
def pipeline(
    mock_fetcher: MockPageFetcher,
    mock_renderer: MockRenderer,
    render_executor: RenderExecutor,
    test_settings: TestSettings,
) -> RenderPipeline:
    """Pipeline wired with fake fetcher and renderer."""
    return RenderPipeline(
        fetcher=mock_fetcher,  # type: ignore[arg-type]
        renderer=mock_renderer,
        executor=render_executor,
        settings=test_settings,
    )


@pytest.fixture
def app(test_settings: TestSettings, pipeline: RenderPipeline) -> FastAPI:
    """Application with the pipeline dependency overridden."""
    application = create_app(test_settings)
    application.dependency_overrides[get_render_pipeline] = lambda: pipeline
    return application


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """FastAPI test client. The lifespan is not run."""
    return TestClient(app)


@pytest_asyncio.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Async HTTP client for concurrent API testing."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers based on file paths."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "performance" in str(item.fspath):
            item.add_marker(pytest.mark.performance)
