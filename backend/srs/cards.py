"""Card value type shared by the session engine and question generator."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class CardStatus(Enum):
    """Learning state of a card."""

    UNSEEN = "unseen"
    LEARNING = "learning"
    KNOWN = "known"


@dataclass(frozen=True)
class Card:
    """An immutable snapshot of a term/definition pair and its review state."""

    id: str
    term: str
    definition: str
    streak: int = 0  # Consecutive correct answers
    review_date: datetime | None = None  # None = never reviewed
    status: CardStatus = CardStatus.UNSEEN
