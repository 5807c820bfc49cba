# relaydrop/infra/database.py

import logging
from contextlib import contextmanager

from sqlalchemy import create_engine, event, text
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import sessionmaker

from relaydrop.core.errors import StoreUnavailable
from relaydrop.models.base import Base

logger = logging.getLogger(__name__)

# =========================
# ENGINE CONFIGURATION
# =========================

def make_engine(database_url: str, pool_size: int = 5, max_overflow: int = 10, echo: bool = False):
    """
    Build an engine for SQLite or PostgreSQL.

    SQLite transactions are opened with BEGIN IMMEDIATE so that concurrent
    writers queue on the database lock (busy timeout) instead of failing
    with "database is locked" on lock upgrade.
    """
    if database_url.startswith("sqlite"):
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False, "timeout": 15},
            echo=echo,
        )

        @event.listens_for(engine, "connect")
        def _disable_pysqlite_begin(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None

        @event.listens_for(engine, "begin")
        def _begin_immediate(conn):
            conn.exec_driver_sql("BEGIN IMMEDIATE")

        return engine

    return create_engine(
        database_url,
        pool_pre_ping=True,  # Check connections before using them
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_recycle=3600,   # Recycle connections every hour
        echo=echo,
    )


def make_session_factory(engine):
    return sessionmaker(autoflush=False, bind=engine)


# =========================
# DATABASE FUNCTIONS
# =========================

@contextmanager
def db_session(session_factory):
    """
    Context manager for a single store round trip.
    Usage:
        with db_session(factory) as db:
            db.execute(stmt)
    Driver and connection failures surface as StoreUnavailable.
    """
    session = session_factory()
    try:
        yield session
        session.commit()
    except DBAPIError as e:
        session.rollback()
        logger.error("Backing store error: %s", e.__class__.__name__)
        raise StoreUnavailable() from e
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(engine):
    """Create all tables for registered models."""
    from relaydrop.models.kv_entry import KVEntry  # noqa: F401 - registers the table

    Base.metadata.create_all(bind=engine)


def check_connection(engine) -> bool:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except DBAPIError as e:
        logger.error("Database connection failed: %s", e)
        return False
