"""
Database connection management for submitted KYC documents.

Supports:
  - SQLite file (local dev, the default) or in-memory (":memory:")
  - PostgreSQL (hosted review backend)

The URL and pool sizing come from Settings (DATABASE_URL, DB_POOL_SIZE, ...).
"""

import logging
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from kycscan.config.settings import get_settings
from kycscan.infrastructure.db.models import Base

logger = logging.getLogger(__name__)


def get_database_url() -> str:
    return get_settings().database_url


def describe_database(url: str | None = None) -> str:
    """Backend name plus host/path, credentials stripped (logs, /health)."""
    db_url = url or get_database_url()
    backend = "SQLite" if db_url.startswith("sqlite") else "PostgreSQL"
    location = db_url.rsplit("@", 1)[-1] if "@" in db_url else db_url.split("://", 1)[-1]
    return f"{backend} ({location})"


def create_db_engine(url: str | None = None) -> Engine:
    """Engine for SQLite (thread-shared connection) or a pooled server database."""
    settings = get_settings()
    db_url = url or settings.database_url

    if not db_url.startswith("sqlite"):
        return create_engine(
            db_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=True,
            echo=settings.db_echo,
        )

    # Repository work runs in worker threads
    sqlite_args = {"connect_args": {"check_same_thread": False}, "echo": settings.db_echo}
    if ":memory:" in db_url or db_url in ("sqlite://", "sqlite:///"):
        sqlite_args["poolclass"] = StaticPool
    return create_engine(db_url, **sqlite_args)


# ── Process-wide engine & session factory ──
_engine: Engine | None = None
_SessionFactory: sessionmaker | None = None


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        _engine = create_db_engine()
    return _engine


def get_session_factory() -> sessionmaker:
    global _SessionFactory
    if _SessionFactory is None:
        _SessionFactory = sessionmaker(bind=get_engine(), expire_on_commit=False)
    return _SessionFactory


def dispose_engine() -> None:
    """Close pooled connections and forget the engine (settings changed, tests)."""
    global _engine, _SessionFactory
    if _engine is not None:
        _engine.dispose()
    _engine, _SessionFactory = None, None


def init_db() -> None:
    """Create the kyc_documents table if it is missing."""
    Base.metadata.create_all(get_engine())
    logger.info(f"Database ready: {describe_database()}")


@contextmanager
def get_db() -> Session:
    """
    Session scope: commit on success, roll back on any exception.

    Entities are detached with their loaded values (expire_on_commit=False).
    """
    session = get_session_factory()()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
