"""
Test Suite
==========

Test suite matching the htmlshot/ package structure.

Test Categories:
- unit: Unit tests for individual components
- integration: API endpoint tests
"""
