"""Deck storage: loading cards for a session and saving answered cards."""

import logging
import re
from collections.abc import Iterable, Sequence

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from backend.database import async_session
from backend.models.card import CardRecord
from backend.models.deck import Deck
from backend.schemas import AnswerBatch, CardPayload
from backend.srs.cards import Card, CardStatus
from backend.srs.errors import PersistenceError
from backend.srs.flush import AnswerPersister

logger = logging.getLogger(__name__)


def slugify(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return slug or "deck"


def to_card(record: CardRecord) -> Card:
    return Card(
        id=record.id,
        term=record.term,
        definition=record.definition,
        streak=record.streak,
        review_date=record.review_date,
        status=CardStatus(record.status),
    )


class DeckStore:
    """Reads decks and writes answer batches through SQLAlchemy."""

    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession] = async_session) -> None:
        self.sessionmaker = sessionmaker

    async def create_deck(
        self,
        name: str,
        cards: Iterable[tuple[str, str]],
        slug: str | None = None,
        description: str | None = None,
    ) -> Deck:
        """Create a deck from (term, definition) pairs."""
        async with self.sessionmaker() as db:
            deck = Deck(name=name, slug=slug or slugify(name), description=description)
            db.add(deck)
            await db.flush()
            count = 0
            for position, (term, definition) in enumerate(cards):
                db.add(
                    CardRecord(deck_id=deck.id, position=position, term=term, definition=definition)
                )
                count += 1
            await db.commit()

        logger.info("Created deck %s (%s) with %d cards", deck.slug, deck.id, count)
        return deck

    async def list_decks(self) -> list[Deck]:
        async with self.sessionmaker() as db:
            result = await db.execute(select(Deck).order_by(Deck.name.asc()))
            return list(result.scalars().all())

    async def get_deck(self, key: str) -> Deck | None:
        """Look up a deck by slug or id."""
        async with self.sessionmaker() as db:
            stmt = select(Deck).where((Deck.slug == key) | (Deck.id == key))
            result = await db.execute(stmt)
            return result.scalar_one_or_none()

    async def load_cards(self, deck_id: str) -> list[Card]:
        """Return the deck's cards in deck order."""
        async with self.sessionmaker() as db:
            stmt = (
                select(CardRecord)
                .where(CardRecord.deck_id == deck_id)
                .order_by(CardRecord.position.asc())
            )
            result = await db.execute(stmt)
            return [to_card(record) for record in result.scalars().all()]

    async def save_answers(self, deck_id: str, answers: Sequence[Card]) -> None:
        """Write the review state of answered cards.

        Raises:
            PersistenceError: If the database write fails.
        """
        batch = AnswerBatch(answers=[CardPayload.from_card(card) for card in answers])
        try:
            async with self.sessionmaker() as db:
                for payload in batch.answers:
                    result = await db.execute(
                        update(CardRecord)
                        .where(CardRecord.id == payload.id, CardRecord.deck_id == deck_id)
                        .values(
                            streak=payload.streak,
                            review_date=payload.review_date,
                            status=payload.status.value,
                        )
                    )
                    if result.rowcount == 0:
                        logger.warning("Card %s not found in deck %s", payload.id, deck_id)
                await db.commit()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not save answers for deck {deck_id}", str(e)) from e

        logger.info("Saved %d answers for deck %s", len(batch.answers), deck_id)

    async def restart_deck(self, deck_id: str) -> int:
        """Reset every card of the deck to unseen. Returns the number of cards reset."""
        try:
            async with self.sessionmaker() as db:
                result = await db.execute(
                    update(CardRecord)
                    .where(CardRecord.deck_id == deck_id)
                    .values(streak=0, review_date=None, status=CardStatus.UNSEEN.value)
                )
                await db.commit()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not restart deck {deck_id}", str(e)) from e

        logger.info("Restarted deck %s: %d cards reset", deck_id, result.rowcount)
        return result.rowcount

    def persister(self, deck_id: str) -> AnswerPersister:
        """Return an answer persister bound to one deck."""

        async def persist(answers: list[Card]) -> None:
            await self.save_answers(deck_id, answers)

        return persist
