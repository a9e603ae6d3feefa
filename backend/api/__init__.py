"""
Peerdex API package.

Provides the FastAPI application for the Peerdex profile lookup service.
"""

from .app import app, create_app

__all__ = ["app", "create_app"]
