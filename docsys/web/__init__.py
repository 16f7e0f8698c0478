"""Web API for the document store."""

from .app import PASSWORD_HEADER, create_app

__all__ = ["PASSWORD_HEADER", "create_app"]
