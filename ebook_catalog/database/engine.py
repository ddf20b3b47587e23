"""Process-wide SQLAlchemy engine for the importer's ``books`` table."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from sqlalchemy import Engine, create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker

from .. import config_manager as cfg
from .. import logging_manager as log_mgr
from .base import Base

logger = log_mgr.get_logger().getChild("database")

# Pool tuning for server databases; SQLite uses SQLAlchemy's defaults.
SERVER_POOL_OPTIONS = {"pool_size": 10, "max_overflow": 5, "pool_pre_ping": True, "pool_recycle": 3600}

_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker[Session]] = None


def build_engine(url: str) -> Engine:
    """Create an engine for ``url``, creating the parent directory of SQLite files."""

    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        return create_engine(url, **SERVER_POOL_OPTIONS)
    if parsed.database and parsed.database != ":memory:":
        Path(parsed.database).expanduser().parent.mkdir(parents=True, exist_ok=True)
    return create_engine(url)


def get_engine(url: Optional[str] = None) -> Engine:
    global _engine
    if _engine is None:
        target = url or cfg.get_settings().database_url_value()
        _engine = build_engine(target)
        logger.debug(
            "Database engine created",
            extra={"event": "database.engine.created", "backend": _engine.url.get_backend_name()},
        )
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(bind=get_engine(), expire_on_commit=False)
    return _session_factory


def init_schema(engine: Optional[Engine] = None) -> None:
    """Create the importer tables when they do not exist yet."""

    from . import models  # noqa: F401

    Base.metadata.create_all(engine or get_engine())


def dispose_engine() -> None:
    """Drop the cached engine so the next call reads the configured URL again."""

    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine, _session_factory = None, None
