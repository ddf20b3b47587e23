"""SQLAlchemy persistence used by the bulk importer.

The catalog itself reads the filesystem directly.
"""

from .base import Base
from .engine import dispose_engine, get_engine, get_session_factory, init_schema

__all__ = ["Base", "dispose_engine", "get_engine", "get_session_factory", "init_schema"]
