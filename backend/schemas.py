"""Pydantic schemas for deck files and answer payloads."""

from datetime import datetime

from pydantic import BaseModel, Field

from backend.srs.cards import Card, CardStatus

# --- Answers ---


class CardPayload(BaseModel):
    """A card's review state as sent to storage."""

    id: str
    term: str
    definition: str
    streak: int = Field(default=0, ge=0)
    review_date: datetime | None = None
    status: CardStatus = CardStatus.UNSEEN

    @classmethod
    def from_card(cls, card: Card) -> "CardPayload":
        return cls(
            id=card.id,
            term=card.term,
            definition=card.definition,
            streak=card.streak,
            review_date=card.review_date,
            status=card.status,
        )


class AnswerBatch(BaseModel):
    """A batch of buffered answers, one entry per card."""

    answers: list[CardPayload]


# --- Deck files ---


class DeckFileCard(BaseModel):
    term: str = Field(min_length=1)
    definition: str = Field(min_length=1)


class DeckFile(BaseModel):
    """A deck as read from a JSON import file."""

    name: str = Field(min_length=1)
    slug: str | None = None
    description: str | None = None
    cards: list[DeckFileCard] = Field(default_factory=list)
