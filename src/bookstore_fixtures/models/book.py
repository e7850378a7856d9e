"""SQLAlchemy models for books and their promotions."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Date, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookstore_fixtures.db.session import Base

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from .author import BookAuthor
    from .review import Review

PRICE_PRECISION = 9
PRICE_SCALE = 2


class Book(Base):
    """A book in the store catalogue.

    Books are soft-deleted: setting `soft_deleted` hides the row from ORM
    queries without removing it (see `bookstore_fixtures.db.filters`).
    """

    __tablename__ = "books"

    book_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(256), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    published_on: Mapped[date] = mapped_column(Date, nullable=False)
    publisher: Mapped[str | None] = mapped_column(String(128), nullable=True)
    # -1 marks a book without a list price in the seed data.
    price: Mapped[Decimal] = mapped_column(
        Numeric(PRICE_PRECISION, PRICE_SCALE), nullable=False, default=Decimal("0")
    )
    image_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    soft_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    reviews: Mapped[list[Review]] = relationship(
        "Review",
        back_populates="book",
        cascade="all, delete-orphan",
    )
    authors_link: Mapped[list[BookAuthor]] = relationship(
        "BookAuthor",
        back_populates="book",
        cascade="all, delete-orphan",
        order_by="BookAuthor.order",
    )
    promotion: Mapped[PriceOffer | None] = relationship(
        "PriceOffer",
        back_populates="book",
        cascade="all, delete-orphan",
        uselist=False,
    )

    def __repr__(self) -> str:
        return f"Book(book_id={self.book_id!r}, title={self.title!r})"


class PriceOffer(Base):
    """Optional promotion attached to at most one book."""

    __tablename__ = "price_offers"

    price_offer_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    new_price: Mapped[Decimal] = mapped_column(Numeric(PRICE_PRECISION, PRICE_SCALE), nullable=False)
    promotional_text: Mapped[str] = mapped_column(String(200), nullable=False)
    # Unique: a book carries one promotion at a time.
    book_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("books.book_id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    book: Mapped[Book] = relationship("Book", back_populates="promotion")
