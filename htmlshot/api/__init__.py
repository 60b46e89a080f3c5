"""
API Module
==========

FastAPI application and routes exposing the render builder over HTTP.
"""
