"""
Test Utilities
==============

Shared test doubles and helpers.
"""
