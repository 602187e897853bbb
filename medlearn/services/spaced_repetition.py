"""
Spaced-repetition scheduling for flashcards.

Confidence levels map to a fixed review interval; anything outside 1-5
schedules the card for tomorrow.
"""
from datetime import datetime, timedelta
from typing import Optional

from medlearn.models.flashcard import Flashcard

REVIEW_INTERVALS_DAYS = {
    1: 1,   # Very low confidence - review tomorrow
    2: 3,
    3: 7,
    4: 14,
    5: 30,  # Very high confidence - review in a month
}
DEFAULT_INTERVAL_DAYS = 1


def is_valid_confidence(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 1 <= value <= 5


def next_review_date(confidence_level: int, now: Optional[datetime] = None) -> datetime:
    """
    Calculate the next review date for a confidence level.

    Args:
        confidence_level: User's self-rated recall strength (1-5)
        now: Reference time, defaults to the current time

    Returns:
        The datetime the card is next due
    """
    now = now or datetime.now()
    days = REVIEW_INTERVALS_DAYS.get(confidence_level, DEFAULT_INTERVAL_DAYS)
    return now + timedelta(days=days)


def apply_confidence(card: Flashcard, confidence_level: int, now: Optional[datetime] = None) -> Flashcard:
    """Record a review on ``card`` and reschedule it."""
    now = now or datetime.now()
    card.confidence_level = confidence_level  # type: ignore
    card.next_review_date = next_review_date(confidence_level, now)  # type: ignore
    card.last_reviewed = now  # type: ignore
    card.review_count = (card.review_count or 0) + 1  # type: ignore
    return card
