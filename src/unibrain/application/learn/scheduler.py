"""
Mastery scheduler for Learn Mode.

Tracks a 0-100 mastery score per card, picks the next card with a weighted
random draw that favors low mastery, and decides when a session is complete.

This is a pure computation module with no I/O; randomness and time are injected.
"""

import logging
import random
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol

from unibrain.domain.constants import (
    COMPLETION_AVG_MASTERY,
    MASTERY_CORRECT_DELTA,
    MASTERY_INCORRECT_DELTA,
    MASTERY_MAX,
    MASTERY_MIN,
    SELECTION_JITTER,
)
from unibrain.domain.exceptions import UnknownCardError
from unibrain.domain.models import CardState, Flashcard, SessionStats

logger = logging.getLogger(__name__)


class RandomSource(Protocol):
    def uniform(self, a: float, b: float) -> float: ...


Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class SchedulerState:
    """
    Working set for one Learn Mode session.

    ``cards`` maps the stable card id to its state and is mutated in place.
    """

    cards: dict[int, CardState] = field(default_factory=dict)
    current: CardState | None = None
    complete: bool = False
    stats: SessionStats = field(default_factory=SessionStats)

    @property
    def is_empty(self) -> bool:
        return not self.cards

    @property
    def avg_mastery(self) -> float:
        if not self.cards:
            return 0.0
        return sum(s.mastery for s in self.cards.values()) / len(self.cards)

    @property
    def all_seen(self) -> bool:
        return all(s.seen for s in self.cards.values())

    def unmastered(self) -> list[CardState]:
        return [s for s in self.cards.values() if s.mastery < MASTERY_MAX]


class MasteryScheduler:
    """
    Weighted-random card selection driven by per-card mastery.

    Stateless apart from its injected random source and clock; all session data
    lives in the ``SchedulerState`` it returns.
    """

    def __init__(self, rng: RandomSource | None = None, clock: Clock | None = None):
        """
        Args:
            rng: Source of selection jitter; any object with ``uniform(a, b)``.
            clock: Zero-argument callable returning the time to stamp on responses.
        """
        self._rng = rng or random.Random()
        self._clock = clock or _utc_now

    def start_session(self, flashcards: Sequence[Flashcard]) -> SchedulerState:
        """
        Create fresh card states for ``flashcards`` and select the first card.

        An empty deck yields a complete state with no current card.
        """
        state = SchedulerState(
            cards={i: CardState(card_id=i, card=card) for i, card in enumerate(flashcards)}
        )
        if state.is_empty:
            logger.info("No flashcards available; nothing to study.")
            state.complete = True
            return state

        logger.debug(f"Starting learn session with {len(state.cards)} cards")
        self.select_next(state)
        return state

    def reset_session(self, flashcards: Sequence[Flashcard]) -> SchedulerState:
        """Discard all mastery data and start over."""
        return self.start_session(flashcards)

    def select_next(self, state: SchedulerState) -> CardState | None:
        """
        Pick the next card to present.

        Weight = (100 - mastery) + uniform(0, 20); the highest weight wins.
        Returns None and marks the session complete once every card is mastered.
        """
        candidates = state.unmastered()
        if not candidates:
            state.current = None
            state.complete = True
            logger.info("All cards mastered; session complete.")
            return None

        best: CardState | None = None
        best_weight = float("-inf")
        for card_state in candidates:
            weight = (MASTERY_MAX - card_state.mastery) + self._rng.uniform(
                0, SELECTION_JITTER
            )
            if weight > best_weight:
                best, best_weight = card_state, weight

        state.current = best
        logger.debug(f"Selected card {best.card_id} (mastery={best.mastery})")
        return best

    def record_response(self, state: SchedulerState, card_id: int, knew_it: bool) -> bool:
        """
        Apply a self-rated response to ``card_id`` and update session stats.

        Correct: mastery +25 (capped at 100). Incorrect: mastery -15 (floored at 0).

        Returns:
            True when every card has been seen and average mastery is at least 80.

        Raises:
            UnknownCardError: ``card_id`` does not belong to this session.
        """
        card_state = state.cards.get(card_id)
        if card_state is None:
            raise UnknownCardError(card_id)

        if knew_it:
            card_state.mastery = min(MASTERY_MAX, card_state.mastery + MASTERY_CORRECT_DELTA)
            card_state.times_correct += 1
        else:
            card_state.mastery = max(MASTERY_MIN, card_state.mastery - MASTERY_INCORRECT_DELTA)
            card_state.times_incorrect += 1
        card_state.last_seen_at = self._clock()

        stats = state.stats
        stats.cards_studied += 1
        if knew_it:
            stats.correct_count += 1
            stats.current_streak += 1
            stats.best_streak = max(stats.best_streak, stats.current_streak)
        else:
            stats.current_streak = 0

        # Average-based on purpose: individual cards may still sit below 80.
        state.complete = state.all_seen and state.avg_mastery >= COMPLETION_AVG_MASTERY
        if state.complete:
            state.current = None
            logger.info(
                f"Session complete after {stats.cards_studied} responses "
                f"(avg mastery {state.avg_mastery:.1f})"
            )
        return state.complete
