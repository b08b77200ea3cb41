"""Schedule evaluation: is a program due on a given date?"""

from datetime import date

from ..errors import ValidationError
from ..models import (
    FlexibleSchedule,
    IntervalSchedule,
    Program,
    RotationSchedule,
    Schedule,
    WeeklySchedule,
)

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


def weekday_index(on_date: date) -> int:
    """Weekday index with Sunday = 0 ... Saturday = 6."""
    return (on_date.weekday() + 1) % 7


def validate_schedule(schedule: Schedule) -> Schedule:
    """Reject schedules that cannot be evaluated.

    The schedule types validate their own fields; this guards against
    objects that are not schedules at all.
    """
    if not isinstance(schedule, (WeeklySchedule, IntervalSchedule, FlexibleSchedule, RotationSchedule)):
        raise ValidationError(f"Unsupported schedule: {schedule!r}")
    return schedule


def is_scheduled(program: Program, on_date: date) -> bool:
    """Decide whether a program is due on a date.

    Pure: depends only on the program and the date passed in.

    - weekly: the date's weekday is one of the schedule's days
    - interval: whole days since creation are >= 0 and a multiple of the interval
    - flexible: any date on or after creation
    - rotation: always; the GZCLP rotation decides which day comes next
    - inactive programs are never scheduled
    """
    if not program.is_active:
        return False

    schedule = program.schedule
    if isinstance(schedule, WeeklySchedule):
        return weekday_index(on_date) in schedule.days_of_week
    if isinstance(schedule, IntervalSchedule):
        days_since = (on_date - program.created_at).days
        interval = max(1, schedule.interval_days)
        return days_since >= 0 and days_since % interval == 0
    if isinstance(schedule, FlexibleSchedule):
        return on_date >= program.created_at
    if isinstance(schedule, RotationSchedule):
        return True
    raise ValidationError(f"Unsupported schedule: {schedule!r}")


def describe_schedule(schedule: Schedule) -> str:
    """Short human-readable description of a schedule."""
    if isinstance(schedule, WeeklySchedule):
        if not schedule.days_of_week:
            return "Weekly (no days)"
        return "Weekly: " + ", ".join(DAY_NAMES[d][:3] for d in sorted(schedule.days_of_week))
    if isinstance(schedule, IntervalSchedule):
        if schedule.interval_days == 1:
            return "Every day"
        return f"Every {schedule.interval_days} days"
    if isinstance(schedule, FlexibleSchedule):
        return "Flexible"
    return "4-day rotation"
