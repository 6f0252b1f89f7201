"""Tests for deck storage and answer persistence."""

from dataclasses import replace
from datetime import datetime
from pathlib import Path

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from backend.database import make_sessionmaker
from backend.srs.cards import Card, CardStatus
from backend.srs.errors import PersistenceError
from backend.srs.store import DeckStore, slugify

PAIRS = [("uno", "one"), ("dos", "two"), ("tres", "three")]


def test_slugify() -> None:
    assert slugify("Spanish Numbers 1-10") == "spanish-numbers-1-10"
    assert slugify("  ¡Hola!  ") == "hola"
    assert slugify("???") == "deck"


@pytest.mark.asyncio
async def test_create_and_load_deck(store: DeckStore) -> None:
    deck = await store.create_deck("Spanish Numbers", PAIRS)
    assert deck.slug == "spanish-numbers"

    cards = await store.load_cards(deck.id)
    assert [(c.term, c.definition) for c in cards] == PAIRS
    assert all(c.status == CardStatus.UNSEEN and c.streak == 0 for c in cards)
    assert len({c.id for c in cards}) == 3


@pytest.mark.asyncio
async def test_get_deck_by_slug_or_id(store: DeckStore) -> None:
    deck = await store.create_deck("Numbers", PAIRS, slug="nums")
    assert (await store.get_deck("nums")).id == deck.id
    assert (await store.get_deck(deck.id)).slug == "nums"
    assert await store.get_deck("missing") is None


@pytest.mark.asyncio
async def test_list_decks(store: DeckStore) -> None:
    await store.create_deck("Verbs", PAIRS)
    await store.create_deck("Animals", PAIRS)
    assert [d.name for d in await store.list_decks()] == ["Animals", "Verbs"]


@pytest.mark.asyncio
async def test_save_answers(store: DeckStore) -> None:
    deck = await store.create_deck("Numbers", PAIRS)
    cards = await store.load_cards(deck.id)
    review_date = datetime(2026, 5, 1, 9, 30)
    answered = replace(cards[1], streak=2, review_date=review_date, status=CardStatus.LEARNING)

    await store.save_answers(deck.id, [answered])

    reloaded = await store.load_cards(deck.id)
    assert reloaded[1] == answered
    assert reloaded[0] == cards[0]


@pytest.mark.asyncio
async def test_persister_is_bound_to_deck(store: DeckStore) -> None:
    deck = await store.create_deck("Numbers", PAIRS)
    other = await store.create_deck("Other", PAIRS)
    cards = await store.load_cards(deck.id)
    answered = replace(cards[0], streak=1, status=CardStatus.LEARNING)

    # Saving through another deck's persister touches nothing
    await store.persister(other.id)([answered])
    assert (await store.load_cards(deck.id))[0].streak == 0

    await store.persister(deck.id)([answered])
    assert (await store.load_cards(deck.id))[0].streak == 1


@pytest.mark.asyncio
async def test_restart_deck(store: DeckStore) -> None:
    deck = await store.create_deck("Numbers", PAIRS)
    cards = await store.load_cards(deck.id)
    await store.save_answers(
        deck.id,
        [replace(c, streak=3, review_date=datetime(2026, 6, 1), status=CardStatus.KNOWN) for c in cards],
    )

    assert await store.restart_deck(deck.id) == 3
    for card in await store.load_cards(deck.id):
        assert card.streak == 0
        assert card.review_date is None
        assert card.status == CardStatus.UNSEEN


@pytest.mark.asyncio
async def test_database_errors_become_persistence_errors(tmp_path: Path) -> None:
    # No tables created: every write fails
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}")
    broken = DeckStore(make_sessionmaker(engine))
    try:
        with pytest.raises(PersistenceError) as exc_info:
            await broken.restart_deck("deck")
        assert exc_info.value.detail

        with pytest.raises(PersistenceError):
            await broken.save_answers("deck", [Card(id="1", term="uno", definition="one")])
    finally:
        await engine.dispose()
