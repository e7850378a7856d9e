"""Registry of initialized test databases.

A `DatabaseRegistry` is created by the test layer (usually a session-scoped
pytest fixture) and passed to whoever needs sessions. It remembers which
isolated databases have already been provisioned and seeded, so a database is
built once per run no matter how many tests ask for it.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable, Iterable

from sqlalchemy import Engine, MetaData
from sqlalchemy.orm import Session, sessionmaker

from bookstore_fixtures.core.errors import DatabaseNotInitializedError
from bookstore_fixtures.core.settings import settings
from bookstore_fixtures.db.naming import IsolatedDatabaseUrl
from bookstore_fixtures.db.provision import build_engine, drop_database, recreate_database
from bookstore_fixtures.db.session import Base, make_session_factory
from bookstore_fixtures.db.sql_log import LineWriter, start_logging

logger = logging.getLogger(__name__)

OnInitAction = Callable[[Engine], None]
DatabaseKey = str | IsolatedDatabaseUrl


def _key(url: DatabaseKey) -> str:
    return str(url)


class DatabaseRegistry:
    """Provisions isolated databases on first use and hands out sessions for them.

    Args:
        metadata: Schema created in every database. Defaults to the book store models.
        echo: Passed through to `create_engine`.
    """

    def __init__(self, metadata: MetaData | None = None, echo: bool | None = None) -> None:
        self.metadata = metadata if metadata is not None else Base.metadata
        self.echo = settings.sql_debug if echo is None else echo
        self._engines: dict[str, Engine] = {}
        self._factories: dict[str, sessionmaker[Session]] = {}
        self._url_locks: dict[str, threading.Lock] = {}
        self._lock = threading.Lock()
        self._on_init: tuple[OnInitAction, ...] = ()

    def register_on_init(self, action: OnInitAction) -> None:
        """Run `action` against every database initialized from now on."""
        with self._lock:
            self._on_init = self._on_init + (action,)

    def clear_registration(self) -> None:
        """Forget all on-init actions."""
        with self._lock:
            self._on_init = ()

    def _url_lock(self, key: str) -> threading.Lock:
        with self._lock:
            return self._url_locks.setdefault(key, threading.Lock())

    def init_db(self, url: DatabaseKey) -> Engine:
        """Provision and seed the database at `url` unless that already happened.

        The database is dropped if present, recreated, given the registry's
        schema, and handed to each on-init action in registration order.
        """
        key = _key(url)
        with self._url_lock(key):
            existing = self._engines.get(key)
            if existing is not None:
                return existing

            actions = self._on_init
            recreate_database(key)
            engine = build_engine(key, echo=self.echo)
            try:
                self.metadata.create_all(bind=engine)
                for action in actions:
                    action(engine)
            except Exception:
                engine.dispose()
                raise

            with self._lock:
                self._engines[key] = engine
                self._factories[key] = make_session_factory(engine)
            logger.info("Initialized database %s (%d on-init actions)", key, len(actions))
            return engine

    def init_many(self, urls: Iterable[DatabaseKey]) -> list[Engine]:
        """Initialize each of `urls` in turn."""
        return [self.init_db(url) for url in urls]

    async def init_db_async(self, url: DatabaseKey) -> Engine:
        """Initialize `url` in a worker thread."""
        return await asyncio.to_thread(self.init_db, url)

    async def init_many_async(self, urls: Iterable[DatabaseKey]) -> list[Engine]:
        """Initialize all of `urls` concurrently."""
        return list(await asyncio.gather(*(self.init_db_async(url) for url in urls)))

    def is_initialized(self, url: DatabaseKey) -> bool:
        with self._lock:
            return _key(url) in self._engines

    def lookup(self, url: DatabaseKey) -> Engine:
        """Return the engine of an initialized database.

        Raises:
            DatabaseNotInitializedError: If `init_db` was never called for `url`.
        """
        with self._lock:
            engine = self._engines.get(_key(url))
        if engine is None:
            raise DatabaseNotInitializedError(f"Database not initialized: {_key(url)}")
        return engine

    def create_session(self, url: DatabaseKey, log_sink: LineWriter | None = None) -> Session:
        """Open a new session on an initialized database.

        Args:
            url: Database URL previously passed to `init_db`.
            log_sink: When given, every statement the session runs is written to it.

        Raises:
            DatabaseNotInitializedError: If `init_db` was never called for `url`.
        """
        with self._lock:
            factory = self._factories.get(_key(url))
        if factory is None:
            raise DatabaseNotInitializedError(f"Database not initialized: {_key(url)}")
        session = factory()
        if log_sink is not None:
            start_logging(session, log_sink)
        return session

    def urls(self) -> list[str]:
        with self._lock:
            return list(self._engines)

    def reset(self, drop: bool = False) -> None:
        """Dispose every engine and forget every database.

        Per-URL locks are kept, so an `init_db` running concurrently still
        serialises with later calls for the same URL.

        Args:
            drop: Also drop the databases themselves.
        """
        with self._lock:
            engines = dict(self._engines)
            self._engines.clear()
            self._factories.clear()

        for key, engine in engines.items():
            engine.dispose()
            if drop:
                drop_database(key)
        logger.debug("Registry reset, %d databases released", len(engines))
