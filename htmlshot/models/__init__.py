"""
Data Models
===========

Pydantic models for render jobs and API requests/responses.
"""
