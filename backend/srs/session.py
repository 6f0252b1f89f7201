"""Study-session engine.

Turns a deck of cards into an ordered review queue, routes missed cards
into a retry cycle, and buffers answered cards until they are persisted.
"""

from __future__ import annotations

import logging
import uuid
from collections import deque
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field

from backend.srs.cards import Card
from backend.srs.updater import update_card

logger = logging.getLogger(__name__)

CardUpdater = Callable[[Card, bool], Card]
SessionListener = Callable[["Session"], None]


@dataclass
class Session:
    """The mutable state of one pass through a deck."""

    total_cards: int = 0
    queue: deque[Card] = field(default_factory=deque)
    retry_queue: list[Card] = field(default_factory=list)
    answers: dict[str, Card] = field(default_factory=dict)  # Card id -> latest state
    current_card: Card | None = None
    known_count: int = 0
    skipped_count: int = 0
    session_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def pending_answers(self) -> list[Card]:
        """Return a snapshot of the buffered answers."""
        return list(self.answers.values())

    def acknowledge(self, flushed: Iterable[Card] | None = None) -> None:
        """Drop persisted answers from the buffer.

        Only entries still holding the exact flushed value are removed, so a
        card answered again while the flush was in flight stays buffered.
        With no argument the whole buffer is cleared.
        """
        if flushed is None:
            self.answers.clear()
            return
        for card in flushed:
            if self.answers.get(card.id) is card:
                del self.answers[card.id]


class SessionEngine:
    """Drives a Session: initialization, answering, and derived stats."""

    def __init__(self, card_updater: CardUpdater = update_card) -> None:
        self.card_updater = card_updater
        self.session = Session()
        self._listeners: list[SessionListener] = []

    def add_listener(self, listener: SessionListener) -> None:
        """Register a callback invoked with the session after every answer."""
        self._listeners.append(listener)

    def remove_listener(self, listener: SessionListener) -> None:
        self._listeners.remove(listener)

    # --- Derived state ---

    @property
    def current_card(self) -> Card | None:
        return self.session.current_card

    @property
    def known_count(self) -> int:
        return self.session.known_count

    @property
    def skipped_count(self) -> int:
        return self.session.skipped_count

    @property
    def total_cards(self) -> int:
        return self.session.total_cards

    @property
    def queue(self) -> list[Card]:
        return list(self.session.queue)

    @property
    def retry_queue(self) -> list[Card]:
        return list(self.session.retry_queue)

    @property
    def is_complete(self) -> bool:
        """Return True once every card has been settled."""
        return self.session.current_card is None

    def progress(self) -> float:
        """Return known cards as a percentage of the session's total.

        Not clamped. A card missed and later known on a retry pass counts
        once, at the moment it is finally answered correctly.
        """
        if not self.session.total_cards:
            return 0
        return (self.session.known_count / self.session.total_cards) * 100

    # --- Actions ---

    def initialize(self, cards: Sequence[Card]) -> None:
        """Start a new session from ``cards``.

        An empty list only clears the current card; counters are kept.
        """
        if not cards:
            self.session.current_card = None
            return

        session = Session(queue=deque(cards))
        session.total_cards = len(session.queue)
        session.current_card = session.queue.popleft()
        self.session = session

        logger.info(
            "Started session %s: %d cards queued",
            session.session_id,
            session.total_cards,
        )

    def answer(self, correct: bool) -> Card | None:
        """Record an answer for the current card and advance.

        Returns:
            The updated card, or None if there was no card to answer.
        """
        session = self.session
        card = session.current_card
        if card is None:
            logger.warning("Ignoring answer for session %s: no current card", session.session_id)
            return None

        updated = self.card_updater(card, correct)

        if correct:
            session.known_count += 1
        else:
            session.skipped_count += 1
            session.retry_queue.append(updated)

        session.answers[updated.id] = updated
        self._advance(session)

        for listener in list(self._listeners):
            listener(session)
        return updated

    def _advance(self, session: Session) -> None:
        if not session.queue:
            if not session.retry_queue:
                session.current_card = None
                logger.info(
                    "Session %s complete: %d known, %d skipped",
                    session.session_id,
                    session.known_count,
                    session.skipped_count,
                )
                return
            session.queue = deque(session.retry_queue)
            session.retry_queue = []
        session.current_card = session.queue.popleft()

    # --- Flush seam ---

    def get_pending_answers(self) -> list[Card]:
        return self.session.pending_answers()

    def on_flush_succeeded(self, flushed: Iterable[Card] | None = None) -> None:
        self.session.acknowledge(flushed)
