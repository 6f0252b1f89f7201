"""Upstream card-list filtering and deck statistics."""

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

from backend.config import utcnow
from backend.srs.cards import Card, CardStatus


@dataclass
class DeckStats:
    """Card counts per learning state."""

    total: int = 0
    known: int = 0
    learning: int = 0
    unseen: int = 0


def is_due(card: Card, now: datetime) -> bool:
    return card.review_date is None or card.review_date <= now


def due_cards(
    cards: Iterable[Card],
    ignore_date: bool = False,
    now: datetime | None = None,
) -> list[Card]:
    """Return the cards to study, in deck order.

    Cards never reviewed or whose review date has passed are due.
    With ``ignore_date`` every card is returned.
    """
    if ignore_date:
        return list(cards)
    now = now or utcnow()
    return [card for card in cards if is_due(card, now)]


def deck_stats(cards: Iterable[Card]) -> DeckStats:
    stats = DeckStats()
    for card in cards:
        stats.total += 1
        if card.status == CardStatus.KNOWN:
            stats.known += 1
        elif card.status == CardStatus.LEARNING:
            stats.learning += 1
        else:
            stats.unseen += 1
    return stats
