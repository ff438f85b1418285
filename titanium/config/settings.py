"""
Application Settings
===================

Main application settings and environment configuration using Pydantic Settings.
Supports development, testing, and production environments.
"""

from typing import Annotated, Optional, List, Union
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
import json
from pathlib import Path


class Settings(BaseSettings):
    """Main application settings with environment variable support."""

    # Application Configuration
    app_name: str = Field(default="Titanium", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(
        default="development", description="Environment: development, testing, production"
    )
    debug: bool = Field(default=False, description="Debug mode")

    # Server Configuration
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=3000, description="Server port")

    # Fetch Configuration
    fetch_timeout: float = Field(default=30.0, description="Total fetch timeout in seconds")
    fetch_connect_timeout: float = Field(default=10.0, description="Connect timeout in seconds")
    fetch_max_redirects: int = Field(default=10, description="Maximum redirects to follow")
    fetch_user_agent: str = Field(
        default="Titanium/1.0 (+url-to-png)", description="User-Agent sent to upstream pages"
    )
    allowed_schemes: Annotated[List[str], NoDecode] = Field(
        default=["http", "https"], description="URL schemes the fetcher may request"
    )
    reject_upstream_errors: bool = Field(
        default=False, description="Fail the request when the page returns a non-2xx status"
    )

    # Rendering Configuration
    renderer: str = Field(default="playwright", description="Renderer implementation")
    max_width: int = Field(default=4000, description="Maximum render width")
    max_height: int = Field(default=4000, description="Maximum render height")
    render_timeout: float = Field(default=60.0, description="Render wait timeout in seconds")
    render_workers: int = Field(default=4, description="Blocking render thread pool size")
    max_concurrent_renders: int = Field(default=4, description="Admission limit for renders")
    optimize_png: bool = Field(default=True, description="Re-encode screenshots with Pillow")

    # Browser Configuration
    playwright_headless: bool = Field(default=True, description="Run browser in headless mode")
    playwright_timeout: int = Field(default=30000, description="Playwright timeout in milliseconds")

    # Error Mapping
    distinguish_upstream_errors: bool = Field(
        default=False, description="Answer 502/504 for fetch and render failures instead of 400"
    )

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_dir: Optional[Path] = Field(default=None, description="Directory for rotating log files")

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        allowed = {"development", "testing", "production"}
        if v not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    @field_validator("allowed_schemes", mode="before")
    @classmethod
    def parse_allowed_schemes(cls, v: Union[str, List[str]]) -> List[str]:
        """Parse allowed schemes from string or list."""
        if isinstance(v, str):
            # Handle JSON-like string: ["http"] or ["http", "https"]
            v = v.strip()
            if v.startswith("[") and v.endswith("]"):
                try:
                    v = json.loads(v)
                except json.JSONDecodeError:
                    v = v[1:-1]
            # Handle comma-separated string: "http,https"
            if isinstance(v, str):
                v = v.split(",")
        return [scheme.strip().lower() for scheme in v if scheme.strip()]

    @field_validator("render_workers", "max_concurrent_renders")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Pool sizes must allow at least one render."""
        if v < 1:
            raise ValueError("Must be at least 1")
        return v

    @field_validator("log_dir")
    @classmethod
    def create_log_dir(cls, v: Optional[Path]) -> Optional[Path]:
        """Ensure the log directory exists."""
        if v is not None:
            v.mkdir(parents=True, exist_ok=True)
        return v

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, env_prefix="TITANIUM_"
    )


# Global settings instance - will be initialized when needed
settings = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global settings
    if settings is None:
        settings = Settings()
    return settings


def reload_settings() -> Settings:
    """Reload settings from environment."""
    global settings
    settings = Settings()
    return settings
