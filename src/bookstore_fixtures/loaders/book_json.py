"""Load book store seed data from a Google-Books-style JSON export.

The file holds a list of records like::

    {
        "title": "Pro ASP.NET MVC 2 Framework",
        "authors": ["Steven Sanderson"],
        "publishedDate": "2010-06",
        "averageRating": 4.5,
        "ratingsCount": 2,
        "saleInfoListPriceAmount": 59.99,
        ...
    }

Authors are shared by name across books, and the aggregate rating of each
record is expanded into individual `Review` rows.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from os import PathLike
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from bookstore_fixtures.core.errors import SeedDataError
from bookstore_fixtures.models import Author, Book, BookAuthor
from bookstore_fixtures.services.review_synthesizer import ReviewSynthesizer

logger = logging.getLogger(__name__)

MISSING_PRICE = Decimal("-1")


class BookInfoJson(BaseModel):
    """One record of the seed file."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: str
    description: str | None = None
    published_date: str = Field(alias="publishedDate")
    publisher: str | None = None
    authors: list[str] = Field(default_factory=list)
    average_rating: float | None = Field(
        default=None, ge=0, allow_inf_nan=False, alias="averageRating"
    )
    ratings_count: int | None = Field(default=None, ge=0, alias="ratingsCount")
    sale_info_list_price_amount: Decimal | None = Field(
        default=None, alias="saleInfoListPriceAmount"
    )
    image_links_thumbnail: str | None = Field(default=None, alias="imageLinksThumbnail")


_RECORDS = TypeAdapter(list[BookInfoJson])


def decode_publish_date(published_date: str) -> date:
    """Decode ``YYYY``, ``YYYY-MM`` or ``YYYY-MM-DD``; missing parts default to 1.

    Raises:
        SeedDataError: For any other shape or an impossible date.
    """
    parts = published_date.split("-")
    if not 1 <= len(parts) <= 3:
        raise SeedDataError(f"The JSON publishedDate failed to decode: string was {published_date!r}")
    try:
        numbers = [int(part) for part in parts]
        numbers.extend([1] * (3 - len(numbers)))
        return date(*numbers)
    except ValueError as exc:
        raise SeedDataError(
            f"The JSON publishedDate failed to decode: string was {published_date!r}"
        ) from exc


def parse_records(raw: str | bytes) -> list[BookInfoJson]:
    """Validate the raw JSON text of a seed file."""
    try:
        return _RECORDS.validate_json(raw)
    except ValidationError as exc:
        raise SeedDataError(f"Seed data does not match the expected shape: {exc}") from exc


def create_book(
    info: BookInfoJson,
    authors: dict[str, Author],
    synthesizer: ReviewSynthesizer,
) -> Book:
    """Build an unsaved `Book` graph for one seed record."""
    book = Book(
        title=info.title,
        description=info.description,
        published_on=decode_publish_date(info.published_date),
        publisher=info.publisher,
        price=info.sale_info_list_price_amount
        if info.sale_info_list_price_amount is not None
        else MISSING_PRICE,
        image_url=info.image_links_thumbnail,
    )
    book.authors_link = [
        BookAuthor(author=authors[name], order=order) for order, name in enumerate(info.authors)
    ]
    if info.average_rating is not None:
        book.reviews = synthesizer.build_reviews(info.average_rating, info.ratings_count or 0)
    return book


def books_from_records(
    records: list[BookInfoJson],
    synthesizer: ReviewSynthesizer | None = None,
) -> list[Book]:
    """Turn parsed records into books sharing one `Author` per distinct name."""
    synthesizer = synthesizer or ReviewSynthesizer()
    authors: dict[str, Author] = {}
    for record in records:
        for name in record.authors:
            if name not in authors:
                authors[name] = Author(name=name)
    return [create_book(record, authors, synthesizer) for record in records]


def load_books(
    file_path: str | PathLike[str],
    synthesizer: ReviewSynthesizer | None = None,
) -> list[Book]:
    """Read the seed file at `file_path` and return its books, ready to be added.

    Raises:
        SeedDataError: If the file is not valid seed JSON.
    """
    path = Path(file_path)
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise SeedDataError(f"Cannot read seed file {path}: {exc}") from exc

    books = books_from_records(parse_records(raw), synthesizer)
    logger.debug("Loaded %d books from %s", len(books), path)
    return books
