"""Centralized constants for UniBrain.

All magic numbers live here so every layer imports from a single source of truth.
"""

# ---------- Mastery ----------
MASTERY_MIN = 0
MASTERY_MAX = 100
MASTERY_CORRECT_DELTA = 25
MASTERY_INCORRECT_DELTA = 15

# ---------- Selection ----------
SELECTION_JITTER = 20.0

# ---------- Session Completion ----------
COMPLETION_AVG_MASTERY = 80

# ---------- Answer Grading ----------
SIMILARITY_THRESHOLD = 0.8

# ---------- Write Mode Feedback ----------
FEEDBACK_TIERS = [
    (90, "Outstanding!"),
    (70, "Great job!"),
    (50, "Good effort!"),
]
FEEDBACK_FALLBACK = "Keep practicing!"

# ---------- Server ----------
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8787
