"""
Test Helpers
============

Helper functions for common testing operations.
"""

import io
import time

from PIL import Image


def make_png(width: int = 8, height: int = 6, color: tuple = (200, 30, 30)) -> bytes:
    """Create a small solid-colour PNG."""
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


class TestTimer:
    """Context manager for timing test operations."""

    __test__ = False

    def __init__(self, description: str = ""):
        self.description = description
        self.start_time = 0.0
        self.end_time = 0.0

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.end_time = time.perf_counter()
        duration = self.end_time - self.start_time
        print(f"⏱️  {self.description}: {duration:.3f}s")

    @property
    def duration(self) -> float:
        """Get the measured duration."""
        return self.end_time - self.start_time
