"""Stored flashcard with its review state."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from backend.models.base import Base, TimestampMixin


class CardRecord(Base, TimestampMixin):
    """A flashcard row belonging to a deck."""

    __tablename__ = "cards"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    deck_id: Mapped[str] = mapped_column(ForeignKey("decks.id"), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)  # Order within the deck
    term: Mapped[str] = mapped_column(Text, nullable=False)
    definition: Mapped[str] = mapped_column(Text, nullable=False)
    streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    review_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="unseen"
    )  # unseen, learning, known

    deck: Mapped["Deck"] = relationship(back_populates="cards")  # type: ignore[name-defined] # noqa: F821
