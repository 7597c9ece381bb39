"""HTTP API for Archai."""

from .app import app

__all__ = ["app"]
