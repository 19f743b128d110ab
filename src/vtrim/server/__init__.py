"""HTTP server for vtrim."""

from vtrim.server.app import create_app

__all__ = ["create_app"]
