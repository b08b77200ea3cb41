"""Error types raised by the practice planner."""

from typing import Iterable, List


class PlannerError(Exception):
    """Base class for all practice planner errors."""


class ValidationError(PlannerError):
    """A rejected operation: bad input, bad config or an invalid transition."""


class NotFoundError(ValidationError):
    """An operation required a program, activity or session that does not exist."""


class IncompleteSessionError(ValidationError):
    """Completion was refused because some activities have no satisfying log."""

    def __init__(self, missing_activity_ids: Iterable[str]):
        self.missing_activity_ids: List[str] = list(missing_activity_ids)
        super().__init__(
            "Cannot complete session; unfinished activities: "
            + ", ".join(self.missing_activity_ids)
        )


class StorageError(PlannerError):
    """The persistence layer failed to read, write or delete a key."""
