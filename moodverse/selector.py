"""
Random quote selection for a canonical mood.
"""

import random
from collections.abc import Iterable

from .models import CanonicalMood, QuoteRecord
from .moods import resolve


class NoMatchingQuote(LookupError):
    """The corpus holds no record for the requested mood."""

    def __init__(self, mood: CanonicalMood) -> None:
        super().__init__(f"No quote found for mood {mood.key!r}")
        self.mood = mood


def candidates(mood: CanonicalMood, corpus: Iterable[QuoteRecord]) -> list[QuoteRecord]:
    """Records that belong to ``mood``, in corpus order."""
    return [
        record
        for record in corpus
        if resolve(record.mood) == mood or mood.key in record.mood
    ]


def select(
    mood: CanonicalMood,
    corpus: Iterable[QuoteRecord],
    rng: random.Random | None = None,
) -> QuoteRecord:
    """
    Draw one record for ``mood`` uniformly at random.

    Draws are independent, so the same record may come back on consecutive
    calls.

    Raises:
        NoMatchingQuote: If no record belongs to ``mood``
    """
    pool = candidates(mood, corpus)
    if not pool:
        raise NoMatchingQuote(mood)

    rng = rng or random.Random()
    return pool[rng.randrange(len(pool))]
