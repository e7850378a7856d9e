"""Create, drop and connect to isolated databases.

PostgreSQL databases are managed through psycopg on the maintenance database,
SQLite databases through the filesystem. Shared in-memory SQLite databases
live as long as their engine, so provisioning them is a no-op.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit, urlunsplit

import psycopg
from psycopg import sql
from sqlalchemy import Engine, create_engine, event
from sqlalchemy.engine import URL, make_url
from sqlalchemy.pool import StaticPool

from bookstore_fixtures.db.naming import is_memory_database

logger = logging.getLogger(__name__)

MAINTENANCE_DATABASE = "postgres"


def normalize_to_psycopg(uri: str) -> str:
    """Return a Postgres URI suitable for psycopg.connect().

    - Strips quotes and whitespace.
    - Converts SQLAlchemy schemes (postgresql+*) to plain "postgresql".
    """
    uri = (uri or "").strip()
    if (uri.startswith("'") and uri.endswith("'")) or (uri.startswith('"') and uri.endswith('"')):
        uri = uri[1:-1]
    if not uri:
        raise ValueError("Database URL is empty")

    parts = urlsplit(uri)
    scheme = parts.scheme
    if scheme.startswith("postgresql+"):
        scheme = "postgresql"

    return urlunsplit((scheme, parts.netloc, parts.path, parts.query, parts.fragment))


def _split_db_url(db_url: str) -> tuple[str, str]:
    """Return `(admin_url, target_db)` using the maintenance database."""
    parts = urlsplit(normalize_to_psycopg(db_url))

    if not parts.scheme.startswith("postgresql"):
        raise ValueError(f"Unparseable database URL (no postgres scheme): {db_url!r}")

    target_db = parts.path.lstrip("/") or MAINTENANCE_DATABASE
    if parts.netloc:
        admin_url = urlunsplit(
            ("postgresql", parts.netloc, f"/{MAINTENANCE_DATABASE}", parts.query, parts.fragment)
        )
    else:
        # hostless/local-socket style
        admin_url = f"postgresql:///{MAINTENANCE_DATABASE}"

    return admin_url, target_db


def _sqlite_path(url: URL) -> Path | None:
    if is_memory_database(url):
        return None
    database = url.database or ""
    if database.startswith("file:"):
        database = database[len("file:"):]
    return Path(database)


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(db_url: str, echo: bool = False) -> Engine:
    """Create an engine for `db_url`.

    In-memory SQLite databases share one connection for the engine's lifetime,
    which keeps their content alive between sessions.
    """
    url = make_url(db_url)
    if url.get_backend_name() == "sqlite":
        kwargs: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if is_memory_database(url):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, echo=echo, **kwargs)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine
    return create_engine(url, echo=echo, pool_pre_ping=True)


def ensure_database_exists(db_url: str) -> None:
    """Create the database behind `db_url` if it is missing."""
    url = make_url(db_url)
    backend = url.get_backend_name()

    if backend == "sqlite":
        path = _sqlite_path(url)
        if path is not None and path.parent != Path(""):
            path.parent.mkdir(parents=True, exist_ok=True)
        return

    if backend != "postgresql":
        raise ValueError(f"Unsupported database backend: {backend!r}")

    admin_url, target_db = _split_db_url(url.render_as_string(hide_password=False))
    logger.debug("admin_url=%r, target_db=%r", admin_url, target_db)

    with psycopg.connect(admin_url, autocommit=True) as conn, conn.cursor() as cur:
        cur.execute("SELECT 1 FROM pg_database WHERE datname = %s", (target_db,))
        if cur.fetchone() is None:
            cur.execute(sql.SQL("CREATE DATABASE {}").format(sql.Identifier(target_db)))
            logger.info("Created database %s", target_db)
        else:
            logger.debug("Database %s already exists", target_db)


def drop_database(db_url: str) -> None:
    """Drop the database behind `db_url` if it exists."""
    url = make_url(db_url)
    backend = url.get_backend_name()

    if backend == "sqlite":
        path = _sqlite_path(url)
        if path is not None:
            path.unlink(missing_ok=True)
            logger.debug("Removed SQLite file %s", path)
        return

    if backend != "postgresql":
        raise ValueError(f"Unsupported database backend: {backend!r}")

    admin_url, target_db = _split_db_url(url.render_as_string(hide_password=False))
    with psycopg.connect(admin_url, autocommit=True) as conn, conn.cursor() as cur:
        cur.execute(
            sql.SQL("DROP DATABASE IF EXISTS {} WITH (FORCE)").format(sql.Identifier(target_db))
        )
    logger.info("Dropped database %s", target_db)


def recreate_database(db_url: str) -> None:
    """Drop then create the database behind `db_url`, leaving it empty."""
    drop_database(db_url)
    ensure_database_exists(db_url)
