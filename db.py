# db.py
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base

from settings import get_settings

Base = declarative_base()

_engine: Optional[Engine] = None
_session_factory: Optional[sessionmaker] = None


def get_engine() -> Optional[Engine]:
    """Engine for DATABASE_URL, or None when no database is configured."""
    global _engine
    if _engine is None:
        database_url = get_settings().database_url
        if not database_url:
            return None
        _engine = create_engine(database_url, echo=False, future=True, pool_pre_ping=True)
    return _engine


def get_session_factory() -> Optional[sessionmaker]:
    global _session_factory
    if _session_factory is None:
        engine = get_engine()
        if engine is None:
            return None
        _session_factory = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    return _session_factory


def init_db() -> bool:
    """Create tables when a database is configured. Returns False otherwise."""
    engine = get_engine()
    if engine is None:
        return False

    import models  # noqa: F401  registers tables on Base.metadata

    Base.metadata.create_all(bind=engine)
    return True


def reset_engine() -> None:
    """Dispose the cached engine so the next call re-reads settings."""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None
