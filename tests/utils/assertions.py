"""
Custom Assertions
=================

Domain-specific assertion helpers.
"""

import io

from PIL import Image

from titanium.models.schemas import RenderResult

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


def assert_valid_png(data: bytes) -> None:
    """Assert that ``data`` is a decodable PNG image."""
    assert isinstance(data, bytes)
    assert data.startswith(PNG_SIGNATURE)
    with Image.open(io.BytesIO(data)) as image:
        assert image.format == "PNG"


def assert_valid_render_result(result: RenderResult) -> None:
    """Assert that a render result is consistent."""
    assert isinstance(result, RenderResult)
    assert len(result.png_data) > 0
    assert result.file_size == len(result.png_data)
    assert result.width > 0
    assert result.height > 0
    assert result.fetch_time >= 0
    assert result.render_time >= 0
    assert result.total_time >= result.fetch_time + result.render_time
    assert_valid_png(result.png_data)
