"""CLI interface for flashdeck.

Usage:
    python -m flashdeck import deck.json        Import a deck from a JSON file
    python -m flashdeck decks                   List decks
    python -m flashdeck study SLUG              Study the cards due in a deck
    python -m flashdeck quiz SLUG               Take a quiz over a deck
    python -m flashdeck restart SLUG            Reset a deck's progress
    python -m flashdeck stats SLUG              Show deck statistics
"""

import argparse
import asyncio
import logging
import random
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from backend.config import settings
from backend.database import create_tables
from backend.models.deck import Deck
from backend.schemas import DeckFile
from backend.srs.deck_study import DeckStudy
from backend.srs.errors import StudyError
from backend.srs.filters import deck_stats
from backend.srs.questions import QuestionDirection, QuestionType, generate_questions
from backend.srs.store import DeckStore

QUESTION_TYPES = {
    "mc": QuestionType.MULTIPLE_CHOICES,
    "written": QuestionType.WRITTEN,
}

DIRECTIONS = {
    "term": QuestionDirection.TERM_TO_DEF,
    "def": QuestionDirection.DEF_TO_TERM,
    "both": QuestionDirection.BOTH,
}


def print_error(context: str, detail: Any) -> None:
    """Report an error to the terminal."""
    print(f"\n  ! {context}: {detail}", file=sys.stderr)


async def ask(prompt: str) -> str:
    # Read on a worker thread so flush timers keep running while we wait.
    return (await asyncio.to_thread(input, prompt)).strip()


async def find_deck(store: DeckStore, key: str) -> Deck | None:
    await create_tables()
    deck = await store.get_deck(key)
    if deck is None:
        print(f"  No deck named '{key}'. Run 'decks' to list them.")
    return deck


async def cmd_import(args: argparse.Namespace) -> None:
    """Import a deck from a JSON file."""
    await create_tables()
    path = Path(args.file)
    try:
        deck_file = DeckFile.model_validate_json(path.read_text(encoding="utf-8"))
    except ValidationError as e:
        print(f"  Invalid deck file {path}:\n{e}")
        return

    store = DeckStore()
    deck = await store.create_deck(
        deck_file.name,
        [(card.term, card.definition) for card in deck_file.cards],
        slug=deck_file.slug,
        description=deck_file.description,
    )
    print(f"  Imported '{deck.name}' as {deck.slug} ({len(deck_file.cards)} cards)")


async def cmd_decks(args: argparse.Namespace) -> None:
    """List all decks."""
    await create_tables()
    decks = await DeckStore().list_decks()
    if not decks:
        print("  No decks yet. Import one with 'import FILE'.")
        return
    for deck in decks:
        print(f"  {deck.slug:<24} {deck.name}")


async def cmd_study(args: argparse.Namespace) -> None:
    """Run an interactive study session over a deck's due cards."""
    store = DeckStore()
    deck = await find_deck(store, args.deck)
    if deck is None:
        return

    study = DeckStudy(store, deck.id, reporter=print_error)
    if args.ignore_date:
        await study.ignore_date()
    else:
        await study.load()

    if study.current_card is None:
        print("\n  No cards due in this deck. Use --ignore-date to study them all.")
        return

    print(f"\n  Study: {deck.name}")
    print(f"  {study.total_cards} cards. Answer y (knew it), n (didn't), q (quit)\n")

    try:
        while (card := study.current_card) is not None:
            print(f"  [{study.progress:.0f}%] {card.term}")
            await ask("  (press enter to reveal) ")
            print(f"  -> {card.definition}")

            response = await ask("  Knew it? [y/n/q]: ")
            if response.lower() == "q":
                print("\n  Session ended early.")
                break
            study.answer(response.lower() in ("y", "yes"))
            print()
    finally:
        await study.flush()
        study.close()

    if study.current_card is None:
        print("\n  Session Complete!")
    print(f"  Known: {study.known_count}  Missed: {study.skipped_count}  Progress: {study.progress:.0f}%\n")


async def cmd_quiz(args: argparse.Namespace) -> None:
    """Run a quiz over a deck."""
    store = DeckStore()
    deck = await find_deck(store, args.deck)
    if deck is None:
        return

    cards = await store.load_cards(deck.id)
    random.shuffle(cards)
    types = [QUESTION_TYPES[t] for t in args.type or ["mc", "written"]]
    try:
        # Distractors come from the whole deck, not just the asked cards
        questions = generate_questions(cards, types, DIRECTIONS[args.direction])[: args.count]
    except StudyError as e:
        print(f"  Cannot build quiz: {e}")
        return

    correct = 0
    for i, question in enumerate(questions, 1):
        print(f"\n  [{i}/{len(questions)}] {question.question}")
        if question.choices:
            for j, choice in enumerate(question.choices, 1):
                print(f"    {j}. {choice}")

        response = await ask("  Your answer: ")
        if question.choices and response.isdigit() and 1 <= int(response) <= len(question.choices):
            response = question.choices[int(response) - 1]

        if response.lower() == question.answer.lower():
            print("  Correct!")
            correct += 1
        else:
            print(f"  Expected: {question.answer}")

    accuracy = correct / len(questions) * 100 if questions else 0
    print(f"\n  Score: {correct}/{len(questions)} ({accuracy:.0f}%)\n")


async def cmd_restart(args: argparse.Namespace) -> None:
    """Reset every card in a deck to unseen."""
    store = DeckStore()
    deck = await find_deck(store, args.deck)
    if deck is None:
        return
    try:
        count = await store.restart_deck(deck.id)
    except StudyError as e:
        print(f"  Cannot restart deck: {e}")
        return
    print(f"  Restarted '{deck.name}': {count} cards reset")


async def cmd_stats(args: argparse.Namespace) -> None:
    """Show deck statistics."""
    store = DeckStore()
    deck = await find_deck(store, args.deck)
    if deck is None:
        return
    stats = deck_stats(await store.load_cards(deck.id))

    print(f"\n  {deck.name}")
    print(f"  {'Total cards:':<20} {stats.total}")
    print(f"  {'Known:':<20} {stats.known}")
    print(f"  {'Learning:':<20} {stats.learning}")
    print(f"  {'Unseen:':<20} {stats.unseen}")
    print()


def main() -> None:
    """Entry point for the flashdeck CLI application."""
    parser = argparse.ArgumentParser(prog="flashdeck", description="Flashcard study sessions")
    parser.add_argument("-v", "--verbose", action="store_true")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    import_parser = subparsers.add_parser("import", help="Import a deck from a JSON file")
    import_parser.add_argument("file", help="Deck file: {name, cards: [{term, definition}]}")

    subparsers.add_parser("decks", help="List decks")

    study_parser = subparsers.add_parser("study", help="Study the cards due in a deck")
    study_parser.add_argument("deck", help="Deck slug or id")
    study_parser.add_argument(
        "--ignore-date", action="store_true", help="Study every card, due or not"
    )

    quiz_parser = subparsers.add_parser("quiz", help="Take a quiz over a deck")
    quiz_parser.add_argument("deck", help="Deck slug or id")
    quiz_parser.add_argument(
        "-t", "--type", action="append", choices=sorted(QUESTION_TYPES), help="Question type (repeatable)"
    )
    quiz_parser.add_argument("-d", "--direction", choices=sorted(DIRECTIONS), default="both")
    quiz_parser.add_argument("-n", "--count", type=int, default=10, help="Max questions")

    restart_parser = subparsers.add_parser("restart", help="Reset a deck's progress")
    restart_parser.add_argument("deck", help="Deck slug or id")

    stats_parser = subparsers.add_parser("stats", help="Show deck statistics")
    stats_parser.add_argument("deck", help="Deck slug or id")

    args = parser.parse_args()

    if args.verbose or settings.debug:
        logging.basicConfig(level=logging.DEBUG)

    if not args.command:
        parser.print_help()
        return

    cmd_map = {
        "import": cmd_import,
        "decks": cmd_decks,
        "study": cmd_study,
        "quiz": cmd_quiz,
        "restart": cmd_restart,
        "stats": cmd_stats,
    }

    asyncio.run(cmd_map[args.command](args))


if __name__ == "__main__":
    main()
