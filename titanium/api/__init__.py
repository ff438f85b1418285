"""
API Layer
=========

FastAPI application, middleware and route modules.
"""
