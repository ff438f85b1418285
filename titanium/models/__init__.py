"""
Data Models
===========

Pydantic models for request parameters, pipeline results and responses.
"""
