"""SQLAlchemy model for individual book reviews."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookstore_fixtures.db.session import Base

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from .book import Book


class Review(Base):
    """A single star rating left for a book."""

    __tablename__ = "reviews"

    review_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    voter_name: Mapped[str] = mapped_column(String(100), nullable=False)
    num_stars: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    book_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("books.book_id", ondelete="CASCADE"),
        nullable=False,
    )

    book: Mapped[Book] = relationship("Book", back_populates="reviews")
