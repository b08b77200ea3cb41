"""Practice planner service.

Loads programs and sessions from storage, runs the scheduling and session
rules over them, and writes the results back.
"""

import logging
from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from .config import config
from .errors import NotFoundError, StorageError, ValidationError
from .library import LibraryExercise
from .models import (
    Activity,
    DayAgenda,
    GZCLPTier,
    GZCLPWorkoutDay,
    Program,
    ProgramType,
    RotationSchedule,
    Schedule,
    Session,
    SessionKey,
    SessionStatus,
    new_id,
)
from .planning import sessions as lifecycle
from .planning.ballet import Routine, build_ballet_program
from .planning.calendar import project
from .planning.gzclp import build_gzclp_program, day_activities
from .planning.import_export import dumps_export, parse_import_text, prepare_imported_program
from .planning.progression import Prescription, last_cycle_sets, next_weight, prescribe
from .planning.rotation import next_day, record_completion, workout_for_day
from .planning.schedule import is_scheduled, validate_schedule
from .storage import (
    ActivityRepository,
    KeyValueStore,
    ProgramRepository,
    SessionRepository,
    WorkoutDayRepository,
)

logger = logging.getLogger(__name__)


class PracticePlanner:
    """Programs, agenda and session tracking over a key-value store."""

    def __init__(self, store: Optional[KeyValueStore] = None,
                 clock: Callable[[], datetime] = datetime.now):
        self.store = store or KeyValueStore()
        self.clock = clock
        self.programs = ProgramRepository(self.store)
        self.activities = ActivityRepository(self.store)
        self.sessions = SessionRepository(self.store)
        self.workout_days = WorkoutDayRepository(self.store)

    def today(self) -> date:
        return self.clock().date()

    # ------------------------------------------------------------------
    # Programs
    # ------------------------------------------------------------------

    def list_programs(self) -> List[Program]:
        return self.programs.get_all()

    def get_program(self, program_id: str) -> Program:
        return self.programs.require(program_id)

    def get_activities(self, program_id: str) -> List[Activity]:
        return self.activities.get_by_program(program_id)

    def create_program(
        self,
        name: str,
        program_type: ProgramType,
        schedule: Schedule,
        activities: Sequence[Activity] = (),
    ) -> Program:
        """Create a plain program (weightlifting, skill, cardio, custom or ballet).

        GZCLP programs go through ``create_gzclp_program``.
        """
        if not name or not name.strip():
            raise ValidationError("Program name is required")
        program_type = ProgramType(program_type)
        if program_type == ProgramType.GZCLP:
            raise ValidationError("Use the GZCLP setup to create GZCLP programs")
        validate_schedule(schedule)
        if isinstance(schedule, RotationSchedule):
            raise ValidationError("The rotation schedule is only available to GZCLP programs")

        program = Program(
            id=new_id("program"),
            name=name.strip(),
            type=program_type,
            schedule=schedule,
            created_at=self.today(),
        )
        bound = [replace(a, id=a.id or new_id("activity"), program_id=program.id) for a in activities]
        self._save_program(program, bound)
        return program

    def create_gzclp_program(
        self,
        name: str,
        starting_weights: Mapping[str, float],
        workout_days: Optional[Sequence[GZCLPWorkoutDay]] = None,
        custom_exercises: Optional[Sequence[LibraryExercise]] = None,
    ) -> Program:
        setup = build_gzclp_program(
            name,
            starting_weights,
            workout_days=workout_days,
            custom_exercises=custom_exercises,
            today=self.today(),
        )
        self._save_program(setup.program, setup.activities)
        self.workout_days.save(setup.program.id, setup.workout_days)
        return setup.program

    def create_ballet_program(self, name: str, routines: Sequence[Routine], schedule: Schedule) -> Program:
        program, activities = build_ballet_program(name, routines, schedule, today=self.today())
        self._save_program(program, activities)
        return program

    def _save_program(self, program: Program, activities: Sequence[Activity]) -> None:
        self.activities.save_all(program.id, list(activities))
        self.programs.save(program)
        logger.info(f"Created {program.type.value} program {program.id} ({program.name})")

    def set_active(self, program_id: str, is_active: bool) -> Program:
        program = replace(self.programs.require(program_id), is_active=is_active)
        self.programs.save(program)
        return program

    def delete_program(self, program_id: str) -> None:
        """Delete a program, its activities and GZCLP days. Sessions are kept."""
        self.programs.require(program_id)
        self.programs.delete(program_id)
        logger.info(f"Deleted program {program_id}")

    def import_program(self, text: str) -> Program:
        """Import a program from export file text.

        Raises:
            ValidationError: the file is malformed or unsupported
        """
        result = parse_import_text(text)
        if not result.success:
            raise ValidationError(result.error)

        program, activities = prepare_imported_program(
            result.program, result.activities, self.programs.names(), today=self.today()
        )
        self._save_program(program, activities)
        logger.info(f"Imported program {program.name} with {len(activities)} activities")
        return program

    def export_program(self, program_id: str) -> str:
        program = self.programs.require(program_id)
        return dumps_export(program, self.activities.get_by_program(program_id), now=self.clock())

    # ------------------------------------------------------------------
    # Calendar
    # ------------------------------------------------------------------

    def session_activities(self, program: Program, session: Optional[Session] = None) -> List[Activity]:
        """Activities a session of the program consists of.

        For GZCLP this is the workout day the session performs, or the next
        day in the rotation when no session has started.
        """
        activities = self.activities.get_by_program(program.id)
        if not program.is_gzclp:
            return activities

        day_number = session.workout_day if session and session.workout_day else next_day(program)
        day = workout_for_day(self.workout_days.get(program.id), day_number)
        if day is None:
            logger.warning(f"GZCLP program {program.id} has no definition for day {day_number}")
            return activities
        return day_activities(day, activities)

    def agenda(self, today: Optional[date] = None, num_days: Optional[int] = None) -> List[DayAgenda]:
        """Scheduled sessions for the rolling window starting today."""
        today = today or self.today()
        num_days = config.CALENDAR_DAYS if num_days is None else num_days
        if num_days <= 0:
            return []

        programs = self.programs.get_all()
        by_id = {p.id: p for p in programs}
        activities_by_program = {p.id: self.session_activities(p) for p in programs}
        existing = self.sessions.get_by_date_range(today, today + timedelta(days=num_days - 1))

        agenda = project(programs, activities_by_program, existing, today, num_days, today=today)
        for day in agenda:
            for scheduled in day.sessions:
                if scheduled.session is not None and scheduled.session.workout_day:
                    scheduled.activities = self.session_activities(by_id[scheduled.program_id], scheduled.session)
        return agenda

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def get_session(self, program_id: str, on_date: Optional[date] = None) -> Optional[Session]:
        return self.sessions.get(SessionKey(on_date or self.today(), program_id))

    def start_session(self, program_id: str, on_date: Optional[date] = None) -> Session:
        """Start (or resume) the program's session on a date."""
        program = self.programs.require(program_id)
        on_date = on_date or self.today()
        existing = self.sessions.get(SessionKey(on_date, program_id))
        if existing is None and not is_scheduled(program, on_date):
            raise ValidationError(f"{program.name} is not scheduled on {on_date}")

        session = lifecycle.start(program_id, on_date, existing=existing, now=self.clock())
        if session is existing:
            return session
        if program.is_gzclp:
            session = replace(session, workout_day=next_day(program))
        self.sessions.save(session)
        return session

    def skip_session(self, program_id: str, on_date: Optional[date] = None,
                     reason: Optional[str] = None) -> Session:
        self.programs.require(program_id)
        on_date = on_date or self.today()
        existing = self.sessions.get(SessionKey(on_date, program_id))
        session = lifecycle.skip(program_id, on_date, reason=reason, existing=existing)
        self.sessions.save(session)
        return session

    def _require_activity(self, program: Program, activity_id: str) -> Activity:
        for activity in self.activities.get_by_program(program.id):
            if activity.id == activity_id:
                return activity
        raise NotFoundError(f"Activity {activity_id} not found in {program.name}")

    def log_set(
        self,
        program_id: str,
        activity_id: str,
        weight: float,
        reps: int,
        on_date: Optional[date] = None,
        is_warmup: bool = False,
        is_amrap: bool = False,
        rpe: Optional[float] = None,
    ) -> Session:
        program = self.programs.require(program_id)
        activity = self._require_activity(program, activity_id)
        session = self.get_session(program_id, on_date)
        updated = lifecycle.log_set(
            session, activity, weight, reps,
            is_warmup=is_warmup, is_amrap=is_amrap, rpe=rpe, now=self.clock(),
        )
        self.sessions.save(updated)
        return updated

    def mark_activity_complete(self, program_id: str, activity_id: str,
                               on_date: Optional[date] = None,
                               duration: Optional[int] = None) -> Session:
        program = self.programs.require(program_id)
        activity = self._require_activity(program, activity_id)
        updated = lifecycle.mark_activity_complete(self.get_session(program_id, on_date), activity, duration)
        self.sessions.save(updated)
        return updated

    def complete_session(
        self,
        program_id: str,
        on_date: Optional[date] = None,
        notes: Optional[str] = None,
        practice_next: Optional[str] = None,
    ) -> Session:
        """Complete the session and, for GZCLP, advance the rotation."""
        program = self.programs.require(program_id)
        session = self.get_session(program_id, on_date)
        activities = self.session_activities(program, session)

        completed = lifecycle.complete(session, activities, notes=notes,
                                       practice_next=practice_next, now=self.clock())
        self.sessions.save(completed)

        if program.is_gzclp:
            day_number = completed.workout_day or next_day(program)
            self.programs.save(record_completion(program, day_number))
        return completed

    # ------------------------------------------------------------------
    # Progression and notes
    # ------------------------------------------------------------------

    def next_weight(self, program_id: str, activity_id: str,
                    tier: Optional[GZCLPTier] = None) -> Optional[float]:
        """Next weight for a GZCLP exercise from its last completed cycle in a tier's slot.

        ``tier`` defaults to the exercise's own tier.
        """
        program = self.programs.require(program_id)
        activity = self._require_activity(program, activity_id)
        tier = GZCLPTier(tier or activity.tier or GZCLPTier.T3)
        history = self.sessions.get_by_program(program_id)
        workout_days = self.workout_days.get(program_id)
        return next_weight(tier, last_cycle_sets(history, activity_id, tier, workout_days))

    def prescriptions(self, program_id: str) -> Dict[str, Prescription]:
        """Prescriptions for the exercises of the program's next session.

        Each exercise follows the scheme of the slot it fills on that day.
        """
        program = self.programs.require(program_id)
        history = self.sessions.get_by_program(program_id)
        workout_days = self.workout_days.get(program_id)
        day = workout_for_day(workout_days, next_day(program)) if program.is_gzclp else None

        result = {}
        for activity in self.session_activities(program):
            if activity.tier is None:
                continue
            slot = day.slot_tier(activity.id) if day is not None else None
            result[activity.id] = prescribe(activity, history, tier=slot, workout_days=workout_days)
        return result

    def last_practice_notes(self, program_id: str, before: Optional[date] = None) -> Optional[str]:
        """Return the "practice next" notes of the latest completed session before a date."""
        before = before or self.today()
        for session in reversed(self.sessions.get_by_program(program_id)):
            if session.date < before and session.status == SessionStatus.COMPLETED and session.practice_next:
                return session.practice_next
        return None

    def reset(self) -> None:
        """Delete all stored data."""
        if not self.store.clear():
            raise StorageError("Failed to clear stored data")
        logger.warning("All practice planner data deleted")
