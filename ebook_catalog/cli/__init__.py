"""Command line interface for ebook-catalog."""

from .main import main

__all__ = ["main"]
