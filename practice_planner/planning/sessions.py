"""Session lifecycle: start, skip, log and complete a scheduled occurrence.

States::

    absent --start--> in-progress --complete--> completed
       |                  |
       +------skip--------+-------skip--------> skipped

``start`` on an existing session resumes it unchanged, whatever its status.
All functions return new Session objects; persisting them is the caller's job.
"""

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import List, Optional, Sequence

from ..errors import IncompleteSessionError, NotFoundError, ValidationError
from ..models import (
    Activity,
    ActivityLog,
    Session,
    SessionKey,
    SessionStatus,
    SetLog,
    TrackingType,
    new_id,
)

logger = logging.getLogger(__name__)


def _require_session(session: Optional[Session]) -> Session:
    if session is None:
        raise NotFoundError("No session exists for this date; start it first")
    return session


def _require_in_progress(session: Session) -> None:
    if session.status != SessionStatus.IN_PROGRESS:
        raise ValidationError(
            f"Session {session.id} is {session.status.value}; only in-progress sessions can be changed"
        )


def start(
    program_id: str,
    on_date: date,
    existing: Optional[Session] = None,
    now: Optional[datetime] = None,
) -> Session:
    """Start the session for (date, program), or resume the one that exists.

    An existing session is returned unchanged in any status; a completed
    session is not reopened.
    """
    if existing is not None:
        if existing.key != SessionKey(on_date, program_id):
            raise ValidationError(f"Session {existing.id} does not belong to {program_id} on {on_date}")
        logger.debug(f"Resuming session {existing.id} ({existing.status.value})")
        return existing

    session = Session(
        id=new_id("session"),
        program_id=program_id,
        date=on_date,
        status=SessionStatus.IN_PROGRESS,
        start_time=now or datetime.now(),
        activities=[],
    )
    logger.info(f"Started session {session.id} for {program_id} on {on_date}")
    return session


def skip(
    program_id: str,
    on_date: date,
    reason: Optional[str] = None,
    existing: Optional[Session] = None,
) -> Session:
    """Mark (date, program) as skipped, replacing any unfinished session.

    Completed sessions cannot be skipped.
    """
    if existing is not None and existing.status == SessionStatus.COMPLETED:
        raise ValidationError(f"Session {existing.id} is already completed and cannot be skipped")

    session = Session(
        id=existing.id if existing is not None else new_id("session"),
        program_id=program_id,
        date=on_date,
        status=SessionStatus.SKIPPED,
        activities=[],
        skip_reason=reason or None,
    )
    logger.info(f"Skipped {program_id} on {on_date}" + (f": {reason}" if reason else ""))
    return session


def log_activity(session: Optional[Session], activity_id: str, entry: ActivityLog) -> Session:
    """Insert or replace the log for one activity. Status is unchanged."""
    session = _require_session(session)
    _require_in_progress(session)
    if entry.activity_id != activity_id:
        raise ValidationError(f"Log is for {entry.activity_id}, not {activity_id}")

    logs = [log for log in session.activities if log.activity_id != activity_id]
    position = next(
        (i for i, log in enumerate(session.activities) if log.activity_id == activity_id),
        len(logs),
    )
    logs.insert(position, entry)
    return replace(session, activities=logs)


def log_set(
    session: Optional[Session],
    activity: Activity,
    weight: float,
    reps: int,
    is_warmup: bool = False,
    is_amrap: bool = False,
    rpe: Optional[float] = None,
    now: Optional[datetime] = None,
) -> Session:
    """Append one set to a sets-reps-weight activity."""
    session = _require_session(session)
    if activity.tracking_type != TrackingType.SETS_REPS_WEIGHT:
        raise ValidationError(f"{activity.name} is not tracked by sets, reps and weight")
    if reps <= 0:
        raise ValidationError(f"Reps must be positive, got {reps}")
    if weight < 0:
        raise ValidationError(f"Weight cannot be negative, got {weight}")
    if rpe is not None and not 1 <= rpe <= 10:
        raise ValidationError(f"RPE must be between 1 and 10, got {rpe}")

    existing = session.get_log(activity.id)
    sets = list(existing.sets) if existing else []
    sets.append(SetLog(
        id=new_id("set"),
        set_number=len(sets) + 1,
        weight=weight,
        reps=reps,
        is_warmup=is_warmup,
        is_amrap=is_amrap,
        rpe=rpe,
        timestamp=now or datetime.now(),
    ))

    if existing:
        entry = replace(existing, sets=sets)
    else:
        entry = ActivityLog(activity_id=activity.id, tracking_type=activity.tracking_type, sets=sets)
    return log_activity(session, activity.id, entry)


def mark_activity_complete(
    session: Optional[Session],
    activity: Activity,
    duration: Optional[int] = None,
) -> Session:
    """Record a duration/completion/custom activity as done."""
    session = _require_session(session)
    if duration is not None and duration < 0:
        raise ValidationError(f"Duration cannot be negative, got {duration}")

    existing = session.get_log(activity.id)
    entry = ActivityLog(
        activity_id=activity.id,
        tracking_type=activity.tracking_type,
        sets=list(existing.sets) if existing else [],
        duration=duration,
        completed=True,
        custom_values=dict(existing.custom_values) if existing else {},
    )
    return log_activity(session, activity.id, entry)


def is_satisfied(activity: Activity, log: Optional[ActivityLog]) -> bool:
    """Whether a log entry satisfies an activity for completion."""
    if log is None:
        return False
    if activity.tracking_type == TrackingType.SETS_REPS_WEIGHT:
        return len(log.working_sets) > 0
    return bool(log.completed)


def missing_activities(session: Session, activities: Sequence[Activity]) -> List[str]:
    """Ids of activities without a satisfying log, in activity order."""
    return [a.id for a in activities if not is_satisfied(a, session.get_log(a.id))]


def can_complete(session: Session, activities: Sequence[Activity]) -> bool:
    return not missing_activities(session, activities)


def complete(
    session: Optional[Session],
    activities: Sequence[Activity],
    notes: Optional[str] = None,
    practice_next: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Session:
    """Complete an in-progress session.

    Every activity needs a satisfying log: at least one non-warmup set for
    sets-reps-weight activities, ``completed`` for every other type.

    Raises:
        NotFoundError: no session exists
        IncompleteSessionError: some activities are unmet
        ValidationError: the session is not in progress
    """
    session = _require_session(session)
    _require_in_progress(session)

    missing = missing_activities(session, activities)
    if missing:
        logger.warning(f"Refusing to complete session {session.id}: {len(missing)} activities unmet")
        raise IncompleteSessionError(missing)

    end_time = now or datetime.now()
    start_time = session.start_time or end_time
    duration = round((end_time - start_time).total_seconds() / 60)

    completed = replace(
        session,
        status=SessionStatus.COMPLETED,
        end_time=end_time,
        duration=duration,
        notes=notes if notes is not None else session.notes,
        practice_next=practice_next if practice_next is not None else session.practice_next,
    )
    logger.info(f"Completed session {session.id} in {duration} min")
    return completed
