"""
Creation of database, connection to database, sessions for use of database
"""
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

BASE = declarative_base()


def make_engine(url: str):
    """
    SQLite in-memory databases need a single shared connection so every
    session sees the same tables.
    """
    kwargs = {"future": True}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if url in ("sqlite://", "sqlite:///:memory:"):
            from sqlalchemy.pool import StaticPool
            kwargs["poolclass"] = StaticPool
    else:
        kwargs["pool_recycle"] = 120
    return create_engine(url, **kwargs)


def create_tables(engine) -> None:
    from . import tables  # noqa: F401  registers the tables on BASE
    BASE.metadata.create_all(engine)


def make_session_factory(engine):
    return sessionmaker(bind=engine, expire_on_commit=False)


@contextmanager
def session_scope(factory):
    """Provide a transactional scope around a series of operations."""
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
