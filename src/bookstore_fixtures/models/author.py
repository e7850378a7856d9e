"""SQLAlchemy models for authors and the book/author link table."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Integer, SmallInteger, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookstore_fixtures.db.session import Base

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from .book import Book


class Author(Base):
    """A person credited on one or more books."""

    __tablename__ = "authors"

    author_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)

    books_link: Mapped[list[BookAuthor]] = relationship("BookAuthor", back_populates="author")

    def __repr__(self) -> str:
        return f"Author(author_id={self.author_id!r}, name={self.name!r})"


class BookAuthor(Base):
    """Many-to-many link between books and authors.

    `order` keeps the author credit order as printed on the cover.
    """

    __tablename__ = "book_authors"

    book_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("books.book_id", ondelete="CASCADE"),
        primary_key=True,
    )
    author_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("authors.author_id", ondelete="CASCADE"),
        primary_key=True,
    )
    order: Mapped[int] = mapped_column(SmallInteger, nullable=False, default=0)

    book: Mapped[Book] = relationship("Book", back_populates="authors_link")
    author: Mapped[Author] = relationship("Author", back_populates="books_link")
