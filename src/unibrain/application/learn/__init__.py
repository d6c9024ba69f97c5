# Learn Mode Package
from .scheduler import MasteryScheduler, SchedulerState
from .session import LearnSession, LearnSummary

__all__ = ["MasteryScheduler", "SchedulerState", "LearnSession", "LearnSummary"]
