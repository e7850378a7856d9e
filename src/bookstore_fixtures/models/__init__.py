# src/bookstore_fixtures/models/__init__.py
"""SQLAlchemy models for the book store schema."""

from .author import Author, BookAuthor
from .book import Book, PriceOffer
from .review import Review

__all__ = [
    "Author", "BookAuthor",
    "Book", "PriceOffer",
    "Review",
]
