"""Quiz question generation from deck cards.

Each card becomes one question with a randomly chosen type and, when
requested, a randomly chosen direction. Multiple-choice questions draw
their distractors from the other cards of the same deck.
"""

import logging
import random
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from backend.config import settings
from backend.srs.cards import Card
from backend.srs.errors import InsufficientDataError, InvalidArgumentError

logger = logging.getLogger(__name__)


class QuestionType(Enum):
    MULTIPLE_CHOICES = "multiple choices"
    WRITTEN = "written"


class QuestionDirection(Enum):
    TERM_TO_DEF = "term to def"
    DEF_TO_TERM = "def to term"
    BOTH = "both"


@dataclass(frozen=True)
class Question:
    """A quiz question derived from a single card."""

    id: str  # Id of the source card
    type: QuestionType
    direction: QuestionDirection  # Never BOTH
    question: str
    answer: str
    choices: list[str] | None = None  # Multiple choice only, shuffled


def _answer_text(card: Card, direction: QuestionDirection) -> str:
    if direction == QuestionDirection.TERM_TO_DEF:
        return card.definition
    return card.term


def _check_choice_pool(cards: Sequence[Card], direction: QuestionDirection, choice_count: int) -> None:
    """Ensure each direction questions may take can yield a full choice set."""
    if direction == QuestionDirection.BOTH:
        directions = [QuestionDirection.TERM_TO_DEF, QuestionDirection.DEF_TO_TERM]
    else:
        directions = [direction]

    for resolved in directions:
        distinct = {_answer_text(card, resolved) for card in cards}
        if len(distinct) < choice_count:
            raise InsufficientDataError(
                f"Multiple choice needs {choice_count} cards with distinct answers, "
                f"deck has {len(distinct)}"
            )


def _pick_distractors(
    cards: Sequence[Card],
    index: int,
    direction: QuestionDirection,
    count: int,
    rng: random.Random,
) -> list[str]:
    """Pick ``count`` distinct wrong answers from the cards other than ``cards[index]``."""
    answer = _answer_text(cards[index], direction)
    others = [card for i, card in enumerate(cards) if i != index]
    rng.shuffle(others)

    distractors: list[str] = []
    for card in others:
        text = _answer_text(card, direction)
        if text != answer and text not in distractors:
            distractors.append(text)
            if len(distractors) == count:
                break
    return distractors


def generate_questions(
    cards: Sequence[Card],
    types: Sequence[QuestionType],
    direction: QuestionDirection,
    rng: random.Random | None = None,
    choice_count: int | None = None,
) -> list[Question]:
    """Generate one question per card, in card order.

    Args:
        cards: The deck's cards.
        types: Question types to pick from, uniformly per card.
        direction: Fixed direction, or BOTH to pick one per card.
        rng: Random source (defaults to the module-level generator).
        choice_count: Size of each multiple-choice set, including the answer.

    Raises:
        InvalidArgumentError: If ``types`` is empty.
        InsufficientDataError: If multiple choice is allowed but the deck
            cannot supply enough distinct distractors.
    """
    if not types:
        raise InvalidArgumentError("At least one question type is required")

    rng = rng or random.Random()
    choice_count = choice_count or settings.choice_count
    if QuestionType.MULTIPLE_CHOICES in types:
        _check_choice_pool(cards, direction, choice_count)

    questions: list[Question] = []
    for index, card in enumerate(cards):
        question_type = rng.choice(list(types))

        if direction == QuestionDirection.BOTH:
            resolved = rng.choice([QuestionDirection.TERM_TO_DEF, QuestionDirection.DEF_TO_TERM])
        else:
            resolved = direction

        if resolved == QuestionDirection.TERM_TO_DEF:
            question, answer = card.term, card.definition
        else:
            question, answer = card.definition, card.term

        choices = None
        if question_type == QuestionType.MULTIPLE_CHOICES:
            choices = [answer, *_pick_distractors(cards, index, resolved, choice_count - 1, rng)]
            rng.shuffle(choices)

        questions.append(
            Question(
                id=card.id,
                type=question_type,
                direction=resolved,
                question=question,
                answer=answer,
                choices=choices,
            )
        )

    logger.debug("Generated %d questions (%s)", len(questions), direction.value)
    return questions
