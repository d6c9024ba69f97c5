"""Write Mode session: type the answer for each card in deck order."""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from unibrain.domain.constants import FEEDBACK_FALLBACK, FEEDBACK_TIERS
from unibrain.domain.exceptions import BlankAnswerError, SessionStateError
from unibrain.domain.models import Flashcard, GradeResult

from .grader import grade_answer, override_to_correct

logger = logging.getLogger(__name__)


@dataclass
class WriteResult:
    card: Flashcard
    grade: GradeResult

    @property
    def correct(self) -> bool:
        return self.grade.is_correct


class WriteSession:
    """
    Walks the deck once, grading each typed answer.

    The flow per card is submit -> (optional override) -> advance.
    """

    def __init__(self, flashcards: Sequence[Flashcard]):
        self.flashcards = list(flashcards)
        self.index = 0
        self.results: list[WriteResult] = []
        self.complete = not self.flashcards
        self._awaiting_advance = False

    @property
    def is_empty(self) -> bool:
        return not self.flashcards

    @property
    def current(self) -> Flashcard | None:
        if self.complete:
            return None
        return self.flashcards[self.index]

    @property
    def answered_current(self) -> bool:
        return self._awaiting_advance

    def submit(self, answer: str) -> GradeResult:
        """
        Grade ``answer`` against the current card and record the result.

        Raises:
            BlankAnswerError: ``answer`` is empty or whitespace.
            SessionStateError: The session is complete or the card was already answered.
        """
        if self.complete:
            raise SessionStateError("Session is complete")
        if self._awaiting_advance:
            raise SessionStateError("Current card was already answered")
        if not answer.strip():
            raise BlankAnswerError("Answer must not be blank")

        card = self.flashcards[self.index]
        result = grade_answer(answer, card.answer)
        self.results.append(WriteResult(card=card, grade=result))
        self._awaiting_advance = True
        logger.debug(
            f"Card {self.index}: similarity={result.similarity:.2f} correct={result.is_correct}"
        )
        return result

    def override_last(self) -> GradeResult:
        """Mark the result for the card on screen correct."""
        if not self._awaiting_advance:
            raise SessionStateError("No answer is awaiting review")
        return override_to_correct(self.results[-1].grade)

    def advance(self) -> bool:
        """
        Move past the answered card.

        Returns:
            True when the last card has been passed and the session is complete.
        """
        if not self._awaiting_advance:
            raise SessionStateError("Submit an answer before moving on")
        self._awaiting_advance = False
        if self.index < len(self.flashcards) - 1:
            self.index += 1
        else:
            self.complete = True
        return self.complete

    def restart(self) -> None:
        self.index = 0
        self.results = []
        self.complete = self.is_empty
        self._awaiting_advance = False

    @property
    def correct_count(self) -> int:
        return sum(1 for r in self.results if r.correct)

    @property
    def accuracy(self) -> int:
        if not self.results:
            return 0
        return round(self.correct_count / len(self.results) * 100)

    def feedback(self) -> str:
        for minimum, message in FEEDBACK_TIERS:
            if self.accuracy >= minimum:
                return message
        return FEEDBACK_FALLBACK
