# src/bookstore_fixtures/services/__init__.py
"""Data generation services for the book store fixtures."""

from .review_synthesizer import ReviewSynthesizer, SyntheticRating

__all__ = [
    "ReviewSynthesizer",
    "SyntheticRating",
]
