# Path: api/__init__.py
# Purpose: Package initializer for HTTP API layer.
# Layer: api.
# Details: Exposes the FastAPI application factory and the uvicorn server wrapper.

from .app import create_app
from .server import AlbumServer, build_server

__all__ = ["AlbumServer", "build_server", "create_app"]
