"""Seed freshly created databases with book store data."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from os import PathLike

from sqlalchemy import Engine
from sqlalchemy.orm import Session

from bookstore_fixtures.loaders.book_json import load_books
from bookstore_fixtures.models import Book

logger = logging.getLogger(__name__)


def seed_books(engine: Engine, books: Iterable[Book]) -> int:
    """Insert `books` (with their authors, reviews and promotions) and commit.

    Returns:
        The number of books written.
    """
    books = list(books)
    with Session(engine) as session:
        session.add_all(books)
        session.commit()
    logger.info("Seeded %d books into %s", len(books), engine.url)
    return len(books)


def seed_from_file(path: str | PathLike[str]) -> Callable[[Engine], None]:
    """Return an on-init action that seeds a database from the JSON file at `path`.

    The file is parsed again for every database so that no ORM instance is
    shared between sessions.
    """

    def _seed(engine: Engine) -> None:
        seed_books(engine, load_books(path))

    return _seed
