"""Engine and session factory, created on first use."""
import os
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

_engine = None
_SessionLocal = None


def _get_database_url() -> str:
    url = os.getenv("DB_URL")
    if not url:
        raise ValueError("DB_URL not set in environment variables!")
    return url


def get_engine():
    global _engine
    if _engine is None:
        database_url = _get_database_url()
        engine_kwargs = {"pool_pre_ping": True, "echo": False}
        if not database_url.startswith("sqlite"):
            engine_kwargs.update(pool_size=5, max_overflow=10, pool_timeout=30)
        _engine = create_engine(database_url, **engine_kwargs)
    return _engine


def get_session_factory():
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=get_engine(),
        )
    return _SessionLocal


class SessionLocal:
    """Call like a sessionmaker: ``SessionLocal()`` returns a new Session."""
    def __new__(cls) -> Session:
        factory = get_session_factory()
        return factory()


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
