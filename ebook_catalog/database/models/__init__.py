"""ORM models for ebook-catalog."""

from .book import BookRecord

__all__ = ["BookRecord"]
