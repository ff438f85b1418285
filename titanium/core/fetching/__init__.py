"""
Page Fetching
=============

HTTP client for downloading pages before rendering.
"""
