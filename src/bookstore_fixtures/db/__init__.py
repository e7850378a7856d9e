# src/bookstore_fixtures/db/__init__.py
"""Database configuration and utilities."""

from .naming import IsolatedDatabaseNamer, IsolatedDatabaseUrl, derive
from .registry import DatabaseRegistry
from .session import Base, make_session_factory

__all__ = [
    "Base",
    "DatabaseRegistry",
    "IsolatedDatabaseNamer",
    "IsolatedDatabaseUrl",
    "derive",
    "make_session_factory",
]
