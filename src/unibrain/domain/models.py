"""
Domain models for study sessions.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Flashcard:
    """
    A question/answer pair produced by the content generator.

    Attributes:
        question: Prompt shown to the learner.
        answer: Reference answer revealed or graded against.
    """

    question: str
    answer: str


@dataclass
class CardState:
    """
    Per-card mastery tracking for one Learn Mode session.

    Keyed by ``card_id``, the position of the card in the deck at session start,
    so two cards with identical text are still tracked separately.
    """

    card_id: int
    card: Flashcard
    mastery: int = 0  # 0-100
    times_correct: int = 0
    times_incorrect: int = 0
    last_seen_at: datetime | None = None  # None until first presentation is answered

    @property
    def seen(self) -> bool:
        return self.last_seen_at is not None


@dataclass
class SessionStats:
    """Running counters for a session; reset only on restart."""

    cards_studied: int = 0
    correct_count: int = 0
    current_streak: int = 0
    best_streak: int = 0

    @property
    def accuracy(self) -> int:
        """Percentage of responses marked correct, rounded."""
        if self.cards_studied == 0:
            return 0
        return round(self.correct_count / self.cards_studied * 100)


@dataclass
class GradeResult:
    """
    Outcome of grading one typed answer.

    Attributes:
        user_answer: Raw text the learner submitted.
        reference_answer: Raw reference answer.
        normalized_user: ``user_answer`` after normalization.
        normalized_reference: ``reference_answer`` after normalization.
        similarity: Edit-distance similarity of the normalized strings (0.0-1.0).
        is_correct: Verdict; may be flipped to True by a manual override.
        overridden: True once the learner overrode an incorrect verdict.
    """

    user_answer: str
    reference_answer: str
    normalized_user: str
    normalized_reference: str
    similarity: float
    is_correct: bool
    overridden: bool = False
