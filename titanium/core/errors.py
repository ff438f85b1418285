"""
Pipeline Errors
===============

Typed failures raised by the render pipeline. Every error carries the
plain-text message returned to the client and the HTTP status it maps to.
"""


class RenderPipelineError(Exception):
    """Base class for all render pipeline failures."""

    status_code = 400
    upstream_status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidBase64Error(RenderPipelineError):
    """The url parameter is not valid base64url."""

    def __init__(self, message: str = "Invalid base64"):
        super().__init__(message)


class InvalidUtf8Error(RenderPipelineError):
    """The decoded bytes are not valid UTF-8."""

    def __init__(self, message: str = "Invalid URL encoding"):
        super().__init__(message)


class InvalidURLError(RenderPipelineError):
    """The decoded string is not an absolute URL."""

    def __init__(self, message: str = "Invalid URL"):
        super().__init__(message)


class InvalidDimensionsError(RenderPipelineError):
    """Requested width or height is outside the supported range."""


class FetchError(RenderPipelineError):
    """The page could not be fetched."""

    upstream_status_code = 502


class RenderError(RenderPipelineError):
    """The renderer did not produce an image."""

    upstream_status_code = 502


class RenderTimeoutError(RenderError):
    """The renderer did not finish within the configured timeout."""

    upstream_status_code = 504
