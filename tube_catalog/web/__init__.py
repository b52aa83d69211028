"""HTTP front-end for the catalog."""

from .server import create_app

__all__ = ["create_app"]
