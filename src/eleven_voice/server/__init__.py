"""Backend proxy relaying chat and speech requests to provider APIs."""

from .app import create_app

__all__ = ["create_app"]
