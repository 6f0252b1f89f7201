"""SQLAlchemy ORM models for the flashdeck database."""

from backend.models.base import Base
from backend.models.card import CardRecord
from backend.models.deck import Deck

__all__ = ["Base", "CardRecord", "Deck"]
