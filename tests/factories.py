"""Builders for test programs, activities and clocks."""

from datetime import date, datetime

from practice_planner.models import (
    Activity,
    Program,
    ProgramType,
    TrackingType,
    WeeklySchedule,
)


class FixedClock:
    """Clock returning a settable time."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def make_program(program_id="p1", name="Strength", schedule=None,
                 program_type=ProgramType.WEIGHTLIFTING, created_at=date(2024, 1, 1), **kwargs):
    return Program(
        id=program_id,
        name=name,
        type=program_type,
        schedule=schedule if schedule is not None else WeeklySchedule(frozenset({1, 3})),
        created_at=created_at,
        **kwargs,
    )


def make_activity(activity_id="a1", program_id="p1", tracking_type=TrackingType.SETS_REPS_WEIGHT, **kwargs):
    name = kwargs.pop("name", activity_id.title())
    return Activity(
        id=activity_id,
        name=name,
        program_id=program_id,
        tracking_type=tracking_type,
        **kwargs,
    )
