"""
htmlshot
========

Turn HTML fragments, templates or URLs into complete documents and render them
to images or PDF through a headless browser.

This package provides:
- HTML normalization and viewport sizing for render jobs
- A fluent render builder with download, save and base64 outputs
- Playwright-backed rendering with Pillow re-encoding
- Named local storage disks
- FastAPI REST endpoints for HTTP access
"""

__version__ = "1.0.0"
__author__ = "htmlshot Team"
