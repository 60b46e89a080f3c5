"""
Rendering Module
===============

HTML normalization and render dispatch to a headless browser.

Components:
- content: resolve templates, URLs and raw strings into HTML
- document: wrap fragments into complete HTML documents
- renderer: Playwright-based screenshot and PDF rendering
- builder: fluent render request builder and output packaging
"""
