"""Rolling calendar projection of scheduled sessions."""

from datetime import date, timedelta
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from ..models import Activity, DayAgenda, Program, ScheduledSession, Session, SessionKey
from .rotation import next_day
from .schedule import is_scheduled


def date_range(from_date: date, num_days: int) -> List[date]:
    """Dates in [from_date, from_date + num_days)."""
    return [from_date + timedelta(days=offset) for offset in range(max(0, num_days))]


def agenda_for_date(
    on_date: date,
    programs: Iterable[Program],
    activities_by_program: Mapping[str, Sequence[Activity]],
    sessions_by_key: Mapping[SessionKey, Session],
) -> List[ScheduledSession]:
    """Scheduled sessions for one date, in the order programs were given."""
    result = []
    for program in programs:
        if not is_scheduled(program, on_date):
            continue
        result.append(ScheduledSession(
            program_id=program.id,
            program_name=program.name,
            program_type=program.type,
            date=on_date,
            activities=list(activities_by_program.get(program.id, [])),
            session=sessions_by_key.get(SessionKey(on_date, program.id)),
            next_workout_day=next_day(program) if program.is_gzclp else None,
        ))
    return result


def project(
    programs: Sequence[Program],
    activities_by_program: Mapping[str, Sequence[Activity]],
    sessions_by_key: Mapping[SessionKey, Session],
    from_date: date,
    num_days: int,
    today: Optional[date] = None,
) -> List[DayAgenda]:
    """Build the day-by-day agenda for ``num_days`` days starting at ``from_date``.

    Days come out ascending and days with nothing scheduled are omitted.
    Within a day, programs keep the caller's order. Dates before ``today``
    (``from_date`` when not given) are never included.

    Args:
        programs: Programs in display order
        activities_by_program: Current activity list per program id
        sessions_by_key: Existing sessions by (date, program id)
        from_date: First date of the window
        num_days: Window length in days
        today: Current date; earlier dates are dropped

    Returns:
        List of DayAgenda, each with at least one ScheduledSession
    """
    today = today or from_date
    agenda: List[DayAgenda] = []
    for on_date in date_range(from_date, num_days):
        if on_date < today:
            continue
        sessions = agenda_for_date(on_date, programs, activities_by_program, sessions_by_key)
        if sessions:
            agenda.append(DayAgenda(date=on_date, sessions=sessions))
    return agenda


def count_by_status(agenda: Iterable[DayAgenda]) -> Dict[str, int]:
    """Tally scheduled sessions by status ('not-started' when no session exists)."""
    counts: Dict[str, int] = {}
    for day in agenda:
        for scheduled in day.sessions:
            label = scheduled.status.value if scheduled.status else "not-started"
            counts[label] = counts.get(label, 0) + 1
    return counts
