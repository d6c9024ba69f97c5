# Domain Package
from .models import CardState, Flashcard, GradeResult, SessionStats

__all__ = ["Flashcard", "CardState", "SessionStats", "GradeResult"]
