"""Studying one deck: load, filter, run a session, and save answers.

Wires a DeckStore to a SessionEngine and an AnswerSaver. Every load
produces a fresh filtered card list, which starts a fresh session.
"""

import logging

from backend.srs.cards import Card
from backend.srs.errors import PersistenceError
from backend.srs.filters import DeckStats, deck_stats, due_cards
from backend.srs.flush import AnswerSaver, ErrorReporter, log_error_reporter
from backend.srs.session import CardUpdater, SessionEngine
from backend.srs.store import DeckStore
from backend.srs.updater import update_card

logger = logging.getLogger(__name__)


class DeckStudy:
    """A learner's study of a single deck."""

    def __init__(
        self,
        store: DeckStore,
        deck_id: str,
        reporter: ErrorReporter = log_error_reporter,
        card_updater: CardUpdater = update_card,
        debounce: float | None = None,
        max_wait: float | None = None,
    ) -> None:
        self.store = store
        self.deck_id = deck_id
        self.reporter = reporter
        self.engine = SessionEngine(card_updater)
        self.saver = AnswerSaver(
            self.engine,
            store.persister(deck_id),
            reporter,
            debounce=debounce,
            max_wait=max_wait,
        )
        self.is_ignore_date = False
        self.deck_cards: list[Card] = []
        self.cards: list[Card] = []

    @property
    def current_card(self) -> Card | None:
        return self.engine.current_card

    @property
    def known_count(self) -> int:
        return self.engine.known_count

    @property
    def skipped_count(self) -> int:
        return self.engine.skipped_count

    @property
    def total_cards(self) -> int:
        return self.engine.total_cards

    @property
    def progress(self) -> float:
        return self.engine.progress()

    @property
    def saved_answers(self) -> list[Card]:
        return self.saver.saved_answers

    @property
    def is_saving(self) -> bool:
        return self.saver.is_saving

    @property
    def stats(self) -> DeckStats:
        return deck_stats(self.deck_cards)

    async def load(self) -> list[Card]:
        """Fetch the deck and start a session over its due cards."""
        self.deck_cards = await self.store.load_cards(self.deck_id)
        self.cards = due_cards(self.deck_cards, ignore_date=self.is_ignore_date)
        logger.info(
            "Loaded deck %s: %d cards, %d to study (ignore_date=%s)",
            self.deck_id,
            len(self.deck_cards),
            len(self.cards),
            self.is_ignore_date,
        )
        self.engine.initialize(self.cards)
        return self.cards

    async def ignore_date(self) -> None:
        """Study every card regardless of its review date."""
        self.is_ignore_date = True
        await self.load()

    async def restart(self) -> bool:
        """Reset the deck's progress and start over.

        Returns:
            False if the store could not reset the deck.
        """
        try:
            await self.store.restart_deck(self.deck_id)
        except PersistenceError as e:
            self.reporter("Error restarting deck", e.detail if e.detail is not None else str(e))
            return False

        self.is_ignore_date = False
        await self.load()
        return True

    def answer(self, correct: bool) -> Card | None:
        return self.engine.answer(correct)

    async def flush(self) -> None:
        """Save buffered answers now."""
        await self.saver.flush_now()

    def close(self) -> None:
        self.saver.close()
