# tests/conftest.py
from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from sqlalchemy.orm import Session

from bookstore_fixtures.core.settings import Settings
from bookstore_fixtures.db.naming import IsolatedDatabaseNamer, IsolatedDatabaseUrl
from bookstore_fixtures.db.registry import DatabaseRegistry
from bookstore_fixtures.db.seeding import seed_from_file
from bookstore_fixtures.db.sql_log import LineWriter, LoggingLineWriter, StringLineWriter

DATA_DIR = Path(__file__).parent / "data"
SEED_FILE = DATA_DIR / "raw_test_data1.json"
SEED_BOOK_COUNT = 4

SQL_LOGGER = logging.getLogger("tests.sql")

OpenSession = Callable[..., Session]


def _scope_for(request: pytest.FixtureRequest) -> str:
    """Return the test class name, or the module name for module-level tests."""
    if request.cls is not None:
        return request.cls.__name__
    return request.module.__name__.rsplit(".", 1)[-1]


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return Settings()


@pytest.fixture(scope="session")
def base_database_url(tmp_path_factory: pytest.TempPathFactory) -> str:
    """Base URL every isolated test database is derived from.

    Set TEST_DATABASE_URL to run the suite against a real server.
    """
    override = os.getenv("TEST_DATABASE_URL")
    if override:
        return override
    return f"sqlite:///{tmp_path_factory.mktemp('databases') / 'bookstore.db'}"


@pytest.fixture(scope="session")
def namer(base_database_url: str) -> IsolatedDatabaseNamer:
    return IsolatedDatabaseNamer(base_database_url)


@pytest.fixture(scope="session")
def registry() -> Iterator[DatabaseRegistry]:
    """Registry that seeds every database with the four-book test data."""
    registry = DatabaseRegistry()
    registry.register_on_init(seed_from_file(SEED_FILE))
    try:
        yield registry
    finally:
        registry.reset(drop=True)


@pytest.fixture()
def isolated_url(request: pytest.FixtureRequest, namer: IsolatedDatabaseNamer) -> IsolatedDatabaseUrl:
    """URL of the database owned by the current test alone."""
    return namer.derive(_scope_for(request), request.node.name)


@pytest.fixture(scope="class")
def class_url(request: pytest.FixtureRequest, namer: IsolatedDatabaseNamer) -> IsolatedDatabaseUrl:
    """URL of a database shared by the read-only tests of one class."""
    return namer.derive(_scope_for(request))


@pytest.fixture()
def sql_log() -> StringLineWriter:
    return StringLineWriter()


def _session_opener(registry: DatabaseRegistry, url: IsolatedDatabaseUrl) -> Iterator[OpenSession]:
    sessions: list[Session] = []

    def _open(log_sink: LineWriter | None = None) -> Session:
        session = registry.create_session(url, log_sink or LoggingLineWriter(SQL_LOGGER))
        sessions.append(session)
        return session

    try:
        yield _open
    finally:
        for session in sessions:
            session.close()


@pytest.fixture()
def open_session(registry: DatabaseRegistry, isolated_url: IsolatedDatabaseUrl) -> Iterator[OpenSession]:
    """Factory for sessions on this test's freshly seeded database."""
    registry.init_db(isolated_url)
    yield from _session_opener(registry, isolated_url)


@pytest.fixture()
def open_shared_session(registry: DatabaseRegistry, class_url: IsolatedDatabaseUrl) -> Iterator[OpenSession]:
    """Factory for sessions on the seeded database shared by the test class."""
    registry.init_db(class_url)
    yield from _session_opener(registry, class_url)
