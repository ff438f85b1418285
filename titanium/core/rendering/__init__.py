"""
Rendering Module
===============

PNG creation from HTML with browser automation.

Components:
- png_generator: Playwright renderer and PNG optimisation
- executor: Bounded worker pool for blocking render calls
"""
