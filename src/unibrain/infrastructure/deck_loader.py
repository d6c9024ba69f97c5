"""
Reads flashcards produced by the content generator.

Accepts JSON or YAML (JSON parses as YAML) holding either a bare list of cards
or a course mapping with a ``flashcards`` list. Cards use ``q``/``a`` or
``question``/``answer`` keys.
"""

import logging
from pathlib import Path
from typing import Any

import yaml  # type: ignore

from unibrain.domain.exceptions import DeckLoadError
from unibrain.domain.models import Flashcard

logger = logging.getLogger(__name__)

_KEY_PAIRS = [("q", "a"), ("question", "answer")]


def parse_flashcards(data: Any) -> list[Flashcard]:
    """Convert already-decoded content into Flashcards."""
    if isinstance(data, dict):
        if "flashcards" not in data:
            raise DeckLoadError("Expected a 'flashcards' list in the course data")
        data = data["flashcards"]

    if data is None:
        return []
    if not isinstance(data, list):
        raise DeckLoadError(f"Expected a list of flashcards, got {type(data).__name__}")

    cards = []
    for i, raw in enumerate(data):
        if not isinstance(raw, dict):
            raise DeckLoadError(f"Flashcard #{i} is not a mapping")
        cards.append(_to_flashcard(i, raw))
    return cards


def _to_flashcard(index: int, raw: dict[str, Any]) -> Flashcard:
    for q_key, a_key in _KEY_PAIRS:
        if q_key in raw and a_key in raw:
            return Flashcard(question=str(raw[q_key]), answer=str(raw[a_key]))
    raise DeckLoadError(
        f"Flashcard #{index} needs 'q'/'a' or 'question'/'answer' keys, got {sorted(raw)}"
    )


def load_flashcards(path: Path) -> list[Flashcard]:
    """
    Load a deck from ``path``.

    Raises:
        DeckLoadError: The file is missing, unparsable, or has the wrong shape.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise DeckLoadError(f"Cannot read deck {path}: {e}") from e

    # Handle potential BOM (Byte Order Mark)
    text = text.lstrip("\ufeff")

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise DeckLoadError(f"Cannot parse deck {path}: {e}") from e

    cards = parse_flashcards(data)
    logger.info(f"Loaded {len(cards)} flashcards from {path}")
    return cards
