"""Static file server for generated documentation."""

from .app import ServeOptions, StaticServer, create_app

__all__ = ["ServeOptions", "StaticServer", "create_app"]
