"""Streak-based review scheduling for flashcards.

Each correct answer extends the card's streak and pushes its next review
date further out along a fixed interval ladder. A miss resets the streak
and makes the card due again immediately.

Key concepts:
- Streak: consecutive correct answers since the last miss.
- Review date: when the card next becomes due (None = never reviewed).
- Status: UNSEEN until first answered, KNOWN once the streak reaches
  ``known_streak``, LEARNING otherwise.
"""

from dataclasses import replace
from datetime import datetime, timedelta

from backend.config import settings, utcnow
from backend.srs.cards import Card, CardStatus

# Days until the next review, indexed by the streak *before* the answer
INTERVAL_LADDER_DAYS = [1, 3, 7, 14, 30, 60]


def next_interval(streak: int) -> timedelta:
    """Return the review interval for a card answered correctly at ``streak``."""
    index = max(0, min(streak, len(INTERVAL_LADDER_DAYS) - 1))
    return timedelta(days=INTERVAL_LADDER_DAYS[index])


def update_card(
    card: Card,
    correct: bool,
    now: datetime | None = None,
    known_streak: int | None = None,
) -> Card:
    """Apply one review outcome to a card.

    Args:
        card: The card being answered. Never modified.
        correct: Whether the learner knew the card.
        now: Review time (defaults to utcnow).
        known_streak: Streak at which a card counts as known
            (defaults to ``settings.known_streak``).

    Returns:
        A new Card carrying the updated streak, review date and status.
    """
    now = now or utcnow()
    known_streak = known_streak if known_streak is not None else settings.known_streak

    if not correct:
        return replace(card, streak=0, review_date=now, status=CardStatus.LEARNING)

    streak = card.streak + 1
    status = CardStatus.KNOWN if streak >= known_streak else CardStatus.LEARNING
    return replace(
        card,
        streak=streak,
        review_date=now + next_interval(card.streak),
        status=status,
    )
