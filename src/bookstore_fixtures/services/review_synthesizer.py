"""Synthetic reviews matching an aggregate rating.

Seed records only carry an average rating and a ratings count. To give each
seeded book real `Review` rows, we generate `count` integer ratings whose
running mean tracks the average: whenever the mean so far is above the
target the next rating rounds the target down, otherwise it rounds up.

    >>> generate(4.5, 4)
    [5, 4, 5, 4]
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from bookstore_fixtures.core.errors import InvalidArgumentError
from bookstore_fixtures.core.settings import settings
from bookstore_fixtures.models import Review

DEFAULT_VOTER_NAME = "anonymous"

__all__ = ["SyntheticRating", "ReviewSynthesizer", "generate", "synthesize"]


@dataclass(frozen=True)
class SyntheticRating:
    """One generated star rating and the name it is attributed to."""

    num_stars: int
    voter_name: str = DEFAULT_VOTER_NAME


def generate(target_average: float, count: int) -> list[int]:
    """Return `count` integer ratings whose mean converges to `target_average`.

    Args:
        target_average: Aggregate rating to reproduce, typically 1.0 to 5.0.
        count: Number of ratings to produce.

    Returns:
        The ratings in generation order.

    Raises:
        InvalidArgumentError: If `count` is negative or `target_average` is not finite.
    """
    if not math.isfinite(target_average):
        raise InvalidArgumentError(f"target_average must be finite, got {target_average!r}")
    if count < 0:
        raise InvalidArgumentError(f"count must be >= 0, got {count}")

    ratings: list[int] = []
    # Starting at the target sends the first rating through the ceiling branch.
    running_mean = target_average
    total = 0
    for _ in range(count):
        if running_mean > target_average:
            stars = math.trunc(target_average)
        else:
            stars = math.ceil(target_average)
        ratings.append(stars)
        total += stars
        running_mean = total / len(ratings)
    return ratings


def synthesize(
    target_average: float,
    count: int,
    voter_name: str = DEFAULT_VOTER_NAME,
) -> list[SyntheticRating]:
    """Return `generate(target_average, count)` as labelled ratings."""
    return [SyntheticRating(stars, voter_name) for stars in generate(target_average, count)]


class ReviewSynthesizer:
    """Builds review rows for seed records that only have an aggregate rating."""

    def __init__(self, voter_name: str | None = None) -> None:
        self.voter_name = voter_name or settings.default_voter_name

    def generate(self, target_average: float, count: int) -> list[int]:
        return generate(target_average, count)

    def synthesize(self, target_average: float, count: int) -> list[SyntheticRating]:
        return synthesize(target_average, count, self.voter_name)

    def build_reviews(self, target_average: float, count: int) -> list[Review]:
        """Return unsaved `Review` rows for the synthesized ratings."""
        return [
            Review(voter_name=rating.voter_name, num_stars=rating.num_stars)
            for rating in self.synthesize(target_average, count)
        ]
