"""
API Layer

FastAPI application exposing the engine to renderers over HTTP and SSE.
"""

from .server import create_app

__all__ = ['create_app']
