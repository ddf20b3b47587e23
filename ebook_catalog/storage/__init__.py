"""File storage backends."""

from .base import FileStorage
from .local import LocalFileStorage

__all__ = ["FileStorage", "LocalFileStorage"]
