"""Repositories for programs, activities, sessions and GZCLP workout days.

Key layout in the key-value store:

    programs:list               ordered list of program ids
    programs:{id}               Program
    activities:{programId}      list of Activity
    sessions:{date}:{programId} Session
    gzclp:{programId}:days      list of GZCLPWorkoutDay
"""

import logging
from datetime import date
from typing import Dict, List, Optional

from ..errors import NotFoundError, StorageError
from ..models import Activity, GZCLPWorkoutDay, Program, Session, SessionKey
from .store import KeyValueStore

logger = logging.getLogger(__name__)

PROGRAM_LIST_KEY = "programs:list"
SESSION_PREFIX = "sessions:"


def program_key(program_id: str) -> str:
    return f"programs:{program_id}"


def activities_key(program_id: str) -> str:
    return f"activities:{program_id}"


def workout_days_key(program_id: str) -> str:
    return f"gzclp:{program_id}:days"


class _Repository:
    """Shared write helpers turning a failed store call into StorageError."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    def _write(self, key: str, value) -> None:
        if not self.store.set(key, value):
            raise StorageError(f"Failed to write {key}")

    def _remove(self, key: str) -> None:
        if not self.store.delete(key):
            raise StorageError(f"Failed to delete {key}")


class ProgramRepository(_Repository):
    """Programs, kept in user-created order."""

    def _ids(self) -> List[str]:
        return list(self.store.get(PROGRAM_LIST_KEY) or [])

    def get(self, program_id: str) -> Optional[Program]:
        data = self.store.get(program_key(program_id))
        return Program.from_dict(data) if data else None

    def require(self, program_id: str) -> Program:
        program = self.get(program_id)
        if program is None:
            raise NotFoundError(f"Program not found: {program_id}")
        return program

    def get_all(self) -> List[Program]:
        """Get all programs in the order they were created."""
        programs = []
        for program_id in self._ids():
            program = self.get(program_id)
            if program is None:
                logger.warning(f"Program {program_id} is listed but missing from storage")
                continue
            programs.append(program)
        return programs

    def names(self) -> List[str]:
        return [program.name for program in self.get_all()]

    def save(self, program: Program) -> None:
        """Save a program, appending it to the program list on first save."""
        self._write(program_key(program.id), program.to_dict())
        ids = self._ids()
        if program.id not in ids:
            ids.append(program.id)
            self._write(PROGRAM_LIST_KEY, ids)

    def delete(self, program_id: str) -> None:
        """Delete a program with its activities and workout days.

        Historical sessions are left in place.
        """
        ids = self._ids()
        if program_id in ids:
            ids.remove(program_id)
            self._write(PROGRAM_LIST_KEY, ids)
        self._remove(program_key(program_id))
        self._remove(activities_key(program_id))
        self._remove(workout_days_key(program_id))


class ActivityRepository(_Repository):
    """Activity lists, one per program, in user order."""

    def get_by_program(self, program_id: str) -> List[Activity]:
        return [Activity.from_dict(a) for a in self.store.get(activities_key(program_id)) or []]

    def get(self, program_id: str, activity_id: str) -> Optional[Activity]:
        for activity in self.get_by_program(program_id):
            if activity.id == activity_id:
                return activity
        return None

    def save_all(self, program_id: str, activities: List[Activity]) -> None:
        self._write(activities_key(program_id), [a.to_dict() for a in activities])


class SessionRepository(_Repository):
    """Sessions keyed by (date, program)."""

    def get(self, key: SessionKey) -> Optional[Session]:
        data = self.store.get(key.storage_key())
        return Session.from_dict(data) if data else None

    def save(self, session: Session) -> None:
        self._write(session.key.storage_key(), session.to_dict())

    def delete(self, key: SessionKey) -> None:
        self._remove(key.storage_key())

    def _load_all(self) -> List[Session]:
        sessions = []
        for storage_key in self.store.list(SESSION_PREFIX):
            data = self.store.get(storage_key)
            if data:
                sessions.append(Session.from_dict(data))
        return sessions

    def get_by_date_range(self, start: date, end: date) -> Dict[SessionKey, Session]:
        """Get sessions dated between start and end, both inclusive."""
        result = {}
        for storage_key in self.store.list(SESSION_PREFIX):
            key = SessionKey.from_storage_key(storage_key)
            if start <= key.date <= end:
                session = self.get(key)
                if session is not None:
                    result[key] = session
        return result

    def get_by_program(self, program_id: str) -> List[Session]:
        """Get all sessions of a program, oldest first."""
        sessions = [s for s in self._load_all() if s.program_id == program_id]
        return sorted(sessions, key=lambda s: s.date)


class WorkoutDayRepository(_Repository):
    """GZCLP day definitions."""

    def get(self, program_id: str) -> List[GZCLPWorkoutDay]:
        days = [GZCLPWorkoutDay.from_dict(d) for d in self.store.get(workout_days_key(program_id)) or []]
        return sorted(days, key=lambda d: d.day_number)

    def save(self, program_id: str, days: List[GZCLPWorkoutDay]) -> None:
        self._write(workout_days_key(program_id), [d.to_dict() for d in days])
