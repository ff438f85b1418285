"""
URL Handling
============

Base64url decoding of the ``url`` parameter and absolute URL validation.
"""
