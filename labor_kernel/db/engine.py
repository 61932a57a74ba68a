"""
Module: labor_kernel.db.engine
Responsibility: SQLAlchemy engine initialization, session factory management,
    and transactional scope utilities.  Single point of database connection
    configuration for the tracker.
Architecture position: Kernel > DB.  May import from db/base.py.  Only
    create_tables reaches outward, to the ORM registry, so that every table
    is known to Base.metadata.

Failure modes:
    - RuntimeError if get_engine/get_session/get_session_factory is called
      before init_engine_from_url().
"""

import atexit
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from labor_kernel.logging_config import configure_logging, get_logger

logger = get_logger("db.engine")

_engine: Engine | None = None
_SessionFactory: sessionmaker[Session] | None = None


def _is_sqlite_memory(database_url: str) -> bool:
    url = make_url(database_url)
    return url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:")


def init_engine_from_url(database_url: str, echo: bool = False) -> Engine:
    """
    Initialize the SQLAlchemy engine from a database URL.

    An in-memory SQLite URL (``sqlite://``) gets a single shared connection
    so every session sees the same database.  Any other URL uses the
    dialect's default pool with pre-ping.

    Calling again overwrites the previous engine; call reset_engine() first
    to dispose it.
    """
    global _engine, _SessionFactory

    if _is_sqlite_memory(database_url):
        _engine = create_engine(
            database_url,
            echo=echo,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    else:
        _engine = create_engine(database_url, echo=echo, pool_pre_ping=True)

    _SessionFactory = sessionmaker(bind=_engine, expire_on_commit=False)

    configure_logging()
    logger.info(
        "engine_initialized",
        extra={"dialect": _engine.dialect.name, "echo": echo},
    )
    return _engine


def get_engine() -> Engine:
    """Get the current engine instance."""
    if _engine is None:
        raise RuntimeError("Engine not initialized. Call init_engine_from_url() first.")
    return _engine


def get_session() -> Session:
    """Get a new session instance."""
    if _SessionFactory is None:
        raise RuntimeError("Engine not initialized. Call init_engine_from_url() first.")
    return _SessionFactory()


def get_session_factory() -> sessionmaker[Session]:
    """Get the session factory for creating sessions."""
    if _SessionFactory is None:
        raise RuntimeError("Engine not initialized. Call init_engine_from_url() first.")
    return _SessionFactory


@contextmanager
def session_scope() -> Generator[Session, None, None]:
    """
    Provide a transactional scope around a series of operations.

    Commits and closes on normal exit; rolls back, closes and re-raises on
    exception.

    Usage:
        with session_scope() as session:
            session.add(project)
    """
    session = get_session()
    logger.debug("transaction_started")
    try:
        yield session
        session.commit()
        logger.debug("transaction_committed")
    except Exception:
        session.rollback()
        logger.warning("transaction_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def create_tables() -> None:
    """Create every table registered by the labor_modules ORM registry."""
    from labor_kernel.db.base import Base
    from labor_modules._orm_registry import import_all_orm_models

    engine = get_engine()
    import_all_orm_models()
    Base.metadata.create_all(engine)
    logger.info(
        "tables_created",
        extra={"table_count": len(Base.metadata.tables)},
    )


def drop_tables() -> None:
    """Drop all tables. Use with caution - primarily for testing."""
    from labor_kernel.db.base import Base

    Base.metadata.drop_all(get_engine())


def reset_engine() -> None:
    """Dispose the engine and forget the session factory."""
    global _engine, _SessionFactory

    if _engine is not None:
        _engine.dispose()
        _engine = None

    _SessionFactory = None


def _atexit_dispose():
    """Dispose the engine on process exit to release pooled connections."""
    if _engine is not None:
        _engine.dispose()


atexit.register(_atexit_dispose)
