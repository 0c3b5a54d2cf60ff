"""Database engine, session management, and initialization for SQLAlchemy."""

import logging
import os
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "sqlite:///data/gapfinder.db"


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""
    pass


def _sqlite_pragmas(dbapi_conn, connection_record):
    """Turn on foreign keys so ON DELETE CASCADE is honoured by SQLite."""
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON;")
    cursor.execute("PRAGMA busy_timeout=5000;")
    cursor.close()


def create_db_engine(database_url: str | None = None, echo: bool = False) -> Engine:
    """Build a new SQLAlchemy engine.

    Args:
        database_url: Connection string.  Falls back to the ``DATABASE_URL``
                      env-var or ``sqlite:///data/gapfinder.db``.
        echo: Whether to log every SQL statement.

    The engine is returned to the caller rather than cached, so separate
    stores (and separate tests) never share a connection pool.
    """
    if database_url is None:
        database_url = os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL)

    kwargs: dict = {"echo": echo}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in database_url or database_url == "sqlite://":
            # One shared connection, otherwise every checkout sees an empty db.
            kwargs["poolclass"] = StaticPool
        else:
            db_path = database_url.replace("sqlite:///", "")
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    else:
        kwargs["pool_pre_ping"] = True

    engine = create_engine(database_url, **kwargs)
    if database_url.startswith("sqlite"):
        event.listen(engine, "connect", _sqlite_pragmas)
    logger.info("Database engine created: %s", database_url)
    return engine


def create_session_factory(engine: Engine) -> sessionmaker:
    """Return a session factory bound to *engine*."""
    return sessionmaker(bind=engine, expire_on_commit=False)


@contextmanager
def session_scope(factory: sessionmaker) -> Generator[Session, None, None]:
    """Provide a transactional database session via context manager.

    Everything done inside the block is committed together, or rolled
    back together if any statement raises.

    Usage::

        with session_scope(factory) as session:
            session.add(obj)
    """
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(engine: Engine) -> None:
    """Create all tables that do not yet exist.

    Imports the model package so that ``Base.metadata`` is fully
    populated before issuing ``CREATE TABLE`` statements.
    """
    import gapfinder.models  # noqa: F401
    Base.metadata.create_all(bind=engine)
    logger.info("All database tables created / verified.")


def reset_db(engine: Engine) -> None:
    """Drop and recreate every table.  **Destructive** -- use only in tests."""
    import gapfinder.models  # noqa: F401
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    logger.warning("Database has been reset (all tables dropped and recreated).")
