"""Persistence collaborator: key-value store and repositories."""

from .store import KeyValueStore
from .repository import (
    ActivityRepository,
    ProgramRepository,
    SessionRepository,
    WorkoutDayRepository,
)

__all__ = [
    "KeyValueStore",
    "ActivityRepository",
    "ProgramRepository",
    "SessionRepository",
    "WorkoutDayRepository",
]
