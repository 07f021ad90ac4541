"""
Question selection and answer evaluation.

Distance thresholds walk down a fixed ladder while the hider keeps
answering "yes", and back off one rung after repeated misses. Letter
questions are an occasional bonus once the seeker is close.
"""

import logging
import random
from typing import Sequence

from hideout.geo import distance_miles
from hideout.models import (
    Address,
    AnswerRecord,
    AnswerResult,
    Coordinate,
    DistanceQuestion,
    LetterQuestion,
    Question,
)

logger = logging.getLogger(__name__)

LADDER: tuple[float, ...] = (5.0, 3.0, 1.0, 0.5, 0.25)
LETTER_ELIGIBLE_DISTANCES = frozenset({1.0, 0.5})
LETTER_MIN_HISTORY = 3
LETTER_POSITIONS = (1, 2, 3)
LETTER_POOL = ("A", "E", "I", "O", "S", "T", "R", "N", "L", "M")
MISSES_BEFORE_RETREAT = 2

DISTANCE_POINTS = 30
LETTER_POINTS = 50


def next_distance(history: Sequence[AnswerRecord]) -> float:
    """
    Pick the next distance threshold from the answer history.

    Advances one rung after a "yes", stays at the bottom rung once reached,
    and retreats one rung once two "no" answers have been given at the
    current rung.
    """
    asked = [r for r in history if r.distance_asked is not None]
    if not asked:
        return LADDER[0]

    last = asked[-1]
    if last.distance_asked not in LADDER:
        return LADDER[0]
    i = LADDER.index(last.distance_asked)

    if last.was_within:
        return LADDER[min(i + 1, len(LADDER) - 1)]

    misses = sum(
        1 for r in asked
        if r.distance_asked == last.distance_asked and not r.was_within
    )
    if misses >= MISSES_BEFORE_RETREAT and i > 0:
        return LADDER[i - 1]
    return LADDER[i]


def should_ask_letter_instead(candidate_distance: float, history: Sequence[AnswerRecord]) -> bool:
    """Letter questions only unlock at the 1 and 0.5 mile rungs with some history behind them."""
    return candidate_distance in LETTER_ELIGIBLE_DISTANCES and len(history) >= LETTER_MIN_HISTORY


def points_for(question: Question) -> int:
    """Points awarded when a question is generated, regardless of its answer."""
    if isinstance(question, LetterQuestion):
        return LETTER_POINTS
    return DISTANCE_POINTS


class QuestionSelector:
    """Chooses the seeker's next question."""

    def __init__(self, rng: random.Random | None = None, letter_probability: float = 0.3):
        self.rng = rng or random.Random()
        self.letter_probability = letter_probability

    def next_question(self, history: Sequence[AnswerRecord]) -> tuple[Question, int]:
        """
        Choose the next question.

        Returns:
            (question, points) - points to award for asking it
        """
        distance = next_distance(history)
        question: Question
        if should_ask_letter_instead(distance, history) and self.rng.random() < self.letter_probability:
            question = LetterQuestion(
                position=self.rng.choice(LETTER_POSITIONS),
                letter=self.rng.choice(LETTER_POOL),
            )
        else:
            question = DistanceQuestion(threshold_miles=distance)

        points = points_for(question)
        logger.debug(f"Selected {question} worth {points} points")
        return question, points


def letter_at(label: str, position: int) -> str | None:
    """The `position`-th (1-based) alphabetic character of a label, upper-cased."""
    letters = [ch for ch in label if ch.isalpha()]
    if position < 1 or position > len(letters):
        return None
    return letters[position - 1].upper()


def evaluate(
    question: Question,
    hideout: Address,
    seeker_position: Coordinate,
    auto: bool = False,
) -> AnswerResult:
    """
    Answer a question truthfully from the real hideout.

    Human and timed-out answers both go through here, so neither can differ.
    Only distance questions produce an AnswerRecord.
    """
    if isinstance(question, DistanceQuestion):
        true_distance = distance_miles(seeker_position, hideout.coordinate)
        within = true_distance <= question.threshold_miles
        record = AnswerRecord(
            distance_asked=question.threshold_miles,
            was_within=within,
            seeker_position_at_ask=seeker_position,
        )
        return AnswerResult(
            question=question,
            answer=within,
            auto=auto,
            seeker_position_at_ask=seeker_position,
            true_distance_miles=true_distance,
            record=record,
        )

    true_letter = letter_at(hideout.label, question.position)
    return AnswerResult(
        question=question,
        answer=true_letter == question.letter.upper(),
        auto=auto,
        seeker_position_at_ask=seeker_position,
        true_letter=true_letter,
    )
