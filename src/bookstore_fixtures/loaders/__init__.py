"""Seed data loaders."""

from .book_json import BookInfoJson, decode_publish_date, load_books

__all__ = ["BookInfoJson", "decode_publish_date", "load_books"]
