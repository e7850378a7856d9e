"""Soft-deleted books are hidden by the global query filter."""

from sqlalchemy import func, select
from sqlalchemy.orm import selectinload

from bookstore_fixtures.db.filters import INCLUDE_DELETED_OPTION
from bookstore_fixtures.models import Book, BookAuthor, Review

from tests.conftest import SEED_BOOK_COUNT


def _soft_delete(open_session, title: str) -> int:
    with open_session() as session:
        book = session.scalars(select(Book).where(Book.title == title)).one()
        book.soft_deleted = True
        session.commit()
        return book.book_id


def test_soft_deleted_book_is_excluded_from_queries(open_session):
    book_id = _soft_delete(open_session, "Pro PayPal E-Commerce")

    with open_session() as session:
        titles = session.scalars(select(Book.title)).all()
        count = session.scalar(select(func.count()).select_from(Book))

    assert "Pro PayPal E-Commerce" not in titles
    assert count == SEED_BOOK_COUNT - 1

    with open_session() as session:
        assert session.get(Book, book_id) is None


def test_include_deleted_option_shows_every_book(open_session):
    _soft_delete(open_session, "Pro PayPal E-Commerce")

    with open_session() as session:
        books = session.scalars(
            select(Book).execution_options(**{INCLUDE_DELETED_OPTION: True})
        ).all()

    assert len(books) == SEED_BOOK_COUNT
    assert [b.title for b in books if b.soft_deleted] == ["Pro PayPal E-Commerce"]


def test_filter_applies_to_joined_entities(open_session):
    _soft_delete(open_session, "Pro ASP.NET MVC 2 Framework")

    with open_session() as session:
        reviewed_titles = session.scalars(
            select(Book.title).join(Book.reviews).distinct().order_by(Book.title)
        ).all()

    assert reviewed_titles == ["Advanced Android 4 Games", "Pro PayPal E-Commerce"]


def test_rows_are_kept_in_the_table(open_session):
    book_id = _soft_delete(open_session, "Advanced Android 4 Games")

    with open_session() as session:
        reviews = session.scalar(select(func.count()).select_from(Review).where(Review.book_id == book_id))
        links = session.scalars(
            select(BookAuthor).where(BookAuthor.book_id == book_id).options(selectinload(BookAuthor.author))
        ).all()

    assert reviews == 5
    assert len(links) == 2
