"""
Titanium
========

HTTP service that renders web pages to PNG images.

This package provides:
- FastAPI endpoints for rendering and health checks
- Base64url decoding and URL validation of page addresses
- Page fetching over aiohttp
- Headless Chromium rendering with Playwright on a bounded worker pool
"""

__version__ = "1.0.0"
__author__ = "Titanium Team"
