"""
Learn Mode session handle.

Drives the select -> respond -> select loop on behalf of a UI caller so that
the CLI and the HTTP server share one flow.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from unibrain.domain.exceptions import SessionStateError
from unibrain.domain.models import CardState, Flashcard, SessionStats

from .scheduler import MasteryScheduler, SchedulerState


@dataclass
class CardMastery:
    card_id: int
    question: str
    mastery: int


@dataclass
class LearnSummary:
    """End-of-session figures shown on the completion screen."""

    avg_mastery: int
    cards_studied: int
    accuracy: int
    best_streak: int
    cards: list[CardMastery]


class LearnSession:
    def __init__(
        self,
        flashcards: Sequence[Flashcard],
        scheduler: MasteryScheduler | None = None,
    ):
        self.flashcards = list(flashcards)
        self.scheduler = scheduler or MasteryScheduler()
        self.state: SchedulerState = self.scheduler.start_session(self.flashcards)

    @property
    def current(self) -> CardState | None:
        return self.state.current

    @property
    def complete(self) -> bool:
        return self.state.complete

    @property
    def is_empty(self) -> bool:
        return self.state.is_empty

    @property
    def stats(self) -> SessionStats:
        return self.state.stats

    def answer(self, knew_it: bool) -> CardState | None:
        """
        Record a response for the card on screen and move to the next one.

        Returns the next card, or None once the session is complete.
        """
        if self.state.current is None:
            raise SessionStateError("No card is being presented")
        return self.respond(self.state.current.card_id, knew_it)

    def respond(self, card_id: int, knew_it: bool) -> CardState | None:
        """
        Record a response for any card of an ongoing session.

        Raises:
            SessionStateError: The session is already complete.
            UnknownCardError: ``card_id`` is not part of the deck.
        """
        if self.state.complete:
            raise SessionStateError("Session is complete")

        done = self.scheduler.record_response(self.state, card_id, knew_it)
        if done:
            return None
        return self.scheduler.select_next(self.state)

    def restart(self) -> CardState | None:
        self.state = self.scheduler.reset_session(self.flashcards)
        return self.state.current

    def summary(self) -> LearnSummary:
        return LearnSummary(
            avg_mastery=round(self.state.avg_mastery),
            cards_studied=self.stats.cards_studied,
            accuracy=self.stats.accuracy,
            best_streak=self.stats.best_streak,
            cards=[
                CardMastery(card_id=s.card_id, question=s.card.question, mastery=s.mastery)
                for s in self.state.cards.values()
            ],
        )
