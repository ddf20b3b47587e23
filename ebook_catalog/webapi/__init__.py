"""HTTP surface for the ebook catalog."""

from .application import create_app

__all__ = ["create_app"]
