"""
Core Business Logic
==================

Request pipeline: decode, validate, fetch and render.

Components:
- url: Base64url decoding and URL validation
- fetching: Page download
- rendering: Renderer and blocking worker pool
- pipeline: Orchestration of a single render request
"""
