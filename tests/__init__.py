"""
Test Suite
==========

Test suite matching the titanium/ package structure.

Test Categories:
- unit: Unit tests for individual components
- integration: HTTP API contract tests
- performance: Concurrency and timing tests
"""
