"""
Database configuration and base model.

Uses SQLAlchemy 2.0 declarative style. SQLite by default; any transactional
relational store SQLAlchemy supports can be plugged in through the URL.
"""

from contextlib import contextmanager
from typing import Generator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from config import PATHS, database_url


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


def make_engine(url: Optional[str] = None, **kwargs) -> Engine:
    """Create an engine for the given URL (defaults to the configured database)."""
    url = url or database_url()
    if url.startswith("sqlite"):
        # Allow multi-threaded access
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    return create_engine(url, echo=False, **kwargs)


def make_session_factory(bind: Engine) -> sessionmaker:
    """Session factory bound to an engine."""
    return sessionmaker(bind=bind, autocommit=False, autoflush=False, expire_on_commit=False)


# Default engine and session factory; the sqlite file lives under the data dir
PATHS.data_dir.mkdir(parents=True, exist_ok=True)
engine = make_engine()
SessionLocal = make_session_factory(engine)


@contextmanager
def get_session(factory: Optional[sessionmaker] = None) -> Generator[Session, None, None]:
    """
    Context manager for one unit of work.

    Commits when the block exits normally, rolls back on any exception.
    """
    session = (factory or SessionLocal)()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(bind: Optional[Engine] = None) -> None:
    """Initialize the database, creating all tables."""
    # Import models so their tables register on the metadata
    import models  # noqa: F401
    Base.metadata.create_all(bind=bind or engine)


def reset_db(bind: Optional[Engine] = None) -> None:
    """Drop and recreate all tables. USE WITH CAUTION."""
    import models  # noqa: F401
    Base.metadata.drop_all(bind=bind or engine)
    Base.metadata.create_all(bind=bind or engine)
