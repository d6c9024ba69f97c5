"""Exceptions raised across UniBrain layers."""


class UnibrainError(Exception):
    """Base class for UniBrain errors."""


class UnknownCardError(UnibrainError, LookupError):
    """A response referenced a card id that is not part of the session."""

    def __init__(self, card_id: int):
        super().__init__(f"Card {card_id} is not part of this session")
        self.card_id = card_id


class BlankAnswerError(UnibrainError, ValueError):
    """A typed answer was submitted with no content."""


class SessionStateError(UnibrainError):
    """An operation was attempted in a session phase that does not allow it."""


class DeckLoadError(UnibrainError):
    """Flashcard input could not be read or did not have the expected shape."""
