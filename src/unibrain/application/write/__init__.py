# Write Mode Package
from .grader import (
    grade,
    grade_answer,
    levenshtein_distance,
    normalize,
    override_to_correct,
    similarity,
)
from .session import WriteSession

__all__ = [
    "normalize",
    "levenshtein_distance",
    "similarity",
    "grade",
    "grade_answer",
    "override_to_correct",
    "WriteSession",
]
