"""
Fuzzy grader for typed answers.

An answer is accepted when, after normalization, it equals the reference,
either string contains the other, or their edit-distance similarity is
strictly above 0.8.
"""

import re

from unibrain.domain.constants import SIMILARITY_THRESHOLD
from unibrain.domain.models import GradeResult

_NON_WORD = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize(text: str) -> str:
    """Lowercase, trim, strip punctuation, then collapse whitespace runs."""
    text = text.lower().strip()
    text = _NON_WORD.sub("", text)
    return _WHITESPACE.sub(" ", text)


def levenshtein_distance(a: str, b: str) -> int:
    """Classic Levenshtein distance with unit insert/delete/substitute costs."""
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            if ca == cb:
                current.append(previous[j - 1])
            else:
                current.append(1 + min(previous[j - 1], previous[j], current[j - 1]))
        previous = current
    return previous[-1]


def similarity(a: str, b: str) -> float:
    """
    Edit-distance similarity in [0, 1].

    (max_len - distance) / max_len; two empty strings are identical (1.0).
    """
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return (longest - levenshtein_distance(a, b)) / longest


def _is_match(user: str, reference: str, score: float) -> bool:
    return (
        user == reference
        or user in reference
        or reference in user
        or score > SIMILARITY_THRESHOLD
    )


def grade(user_answer: str, reference_answer: str) -> bool:
    """Return True when ``user_answer`` is close enough to ``reference_answer``."""
    return grade_answer(user_answer, reference_answer).is_correct


def grade_answer(user_answer: str, reference_answer: str) -> GradeResult:
    user = normalize(user_answer)
    reference = normalize(reference_answer)
    score = similarity(user, reference)
    return GradeResult(
        user_answer=user_answer,
        reference_answer=reference_answer,
        normalized_user=user,
        normalized_reference=reference,
        similarity=score,
        is_correct=_is_match(user, reference, score),
    )


def override_to_correct(result: GradeResult) -> GradeResult:
    """
    Accept a result the learner judged correct despite the verdict.

    Mutates and returns ``result``; does not re-grade. Calling it on a result
    that is already correct leaves it unchanged.
    """
    if not result.is_correct:
        result.is_correct = True
        result.overridden = True
    return result
