"""Database session configuration."""

from __future__ import annotations

from sqlalchemy import Engine, MetaData
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from bookstore_fixtures.db.filters import install_soft_delete_filter


class Base(DeclarativeBase):
    """Declarative base shared by all book store models."""


# Ensure model modules are imported so that metadata is populated when create_all runs.
import bookstore_fixtures.models  # noqa: E402,F401


def make_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Return a session factory bound to `engine` with the soft-delete filter installed."""
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    install_soft_delete_filter(factory)
    return factory


def create_tables(engine: Engine, metadata: MetaData | None = None) -> None:
    """Create all tables of `metadata` (the book store schema by default)."""
    (metadata or Base.metadata).create_all(bind=engine)
