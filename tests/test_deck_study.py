"""Tests for studying a stored deck end to end."""

from dataclasses import replace
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from backend.config import utcnow
from backend.srs.cards import CardStatus
from backend.srs.deck_study import DeckStudy
from backend.srs.errors import PersistenceError
from backend.srs.store import DeckStore

PAIRS = [("uno", "one"), ("dos", "two"), ("tres", "three")]


async def _deck_with_future_card(store: DeckStore) -> str:
    deck = await store.create_deck("Numbers", PAIRS)
    cards = await store.load_cards(deck.id)
    future = replace(cards[2], streak=1, review_date=utcnow() + timedelta(days=3), status=CardStatus.LEARNING)
    await store.save_answers(deck.id, [future])
    return deck.id


@pytest.mark.asyncio
async def test_load_studies_due_cards(store: DeckStore) -> None:
    deck_id = await _deck_with_future_card(store)
    study = DeckStudy(store, deck_id)

    cards = await study.load()
    assert [c.term for c in cards] == ["uno", "dos"]
    assert study.total_cards == 2
    assert study.current_card.term == "uno"
    assert study.stats.total == 3
    assert study.stats.learning == 1
    study.close()


@pytest.mark.asyncio
async def test_ignore_date_starts_new_session(store: DeckStore) -> None:
    deck_id = await _deck_with_future_card(store)
    study = DeckStudy(store, deck_id)
    await study.load()
    study.answer(True)
    old_session = study.engine.session

    await study.ignore_date()
    assert study.is_ignore_date
    assert study.engine.session is not old_session
    assert study.total_cards == 3
    assert study.known_count == 0
    assert study.current_card.term == "uno"
    study.close()


@pytest.mark.asyncio
async def test_answers_are_saved(store: DeckStore) -> None:
    deck = await store.create_deck("Numbers", PAIRS)
    study = DeckStudy(store, deck.id, debounce=10, max_wait=10)
    await study.load()

    study.answer(True)
    study.answer(False)
    assert study.is_saving
    await study.flush()

    assert not study.is_saving
    assert [c.term for c in study.saved_answers] == ["uno", "dos"]
    saved = {c.term: c for c in await store.load_cards(deck.id)}
    assert saved["uno"].streak == 1
    assert saved["uno"].status == CardStatus.LEARNING
    assert saved["dos"].status == CardStatus.LEARNING
    assert saved["tres"].status == CardStatus.UNSEEN
    study.close()


@pytest.mark.asyncio
async def test_finished_cards_are_no_longer_due(store: DeckStore) -> None:
    deck = await store.create_deck("Numbers", PAIRS)
    study = DeckStudy(store, deck.id, debounce=10, max_wait=10)
    await study.load()
    while study.current_card is not None:
        study.answer(True)
    assert study.progress == 100
    await study.flush()

    await study.load()
    assert study.cards == []
    assert study.current_card is None
    study.close()


@pytest.mark.asyncio
async def test_restart_resets_progress(store: DeckStore) -> None:
    deck_id = await _deck_with_future_card(store)
    study = DeckStudy(store, deck_id)
    await study.ignore_date()

    assert await study.restart()
    assert not study.is_ignore_date
    assert study.total_cards == 3
    assert study.stats.unseen == 3
    study.close()


@pytest.mark.asyncio
async def test_restart_failure_is_reported(store: DeckStore) -> None:
    deck = await store.create_deck("Numbers", PAIRS)
    reports = []
    study = DeckStudy(store, deck.id, reporter=lambda context, detail: reports.append((context, detail)))
    await study.load()

    store.restart_deck = AsyncMock(side_effect=PersistenceError("boom", "database is locked"))
    assert not await study.restart()
    assert reports == [("Error restarting deck", "database is locked")]
    assert study.current_card.term == "uno"
    study.close()


@pytest.mark.asyncio
async def test_saved_answers_cleared_on_reload(store: DeckStore) -> None:
    deck = await store.create_deck("Numbers", PAIRS)
    study = DeckStudy(store, deck.id, debounce=10, max_wait=10)
    await study.load()
    study.answer(True)
    await study.flush()
    assert [c.term for c in study.saved_answers] == ["uno"]

    await study.ignore_date()
    assert study.saved_answers == []
    study.close()
