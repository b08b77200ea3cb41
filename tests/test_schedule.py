"""Tests for schedule evaluation."""

from datetime import date, timedelta

import pytest

from factories import make_program
from practice_planner.errors import ValidationError
from practice_planner.models import (
    FlexibleSchedule,
    IntervalSchedule,
    ProgramType,
    RotationSchedule,
    WeeklySchedule,
    schedule_from_dict,
)
from practice_planner.planning.schedule import describe_schedule, is_scheduled, weekday_index

START = date(2024, 1, 1)  # a Monday


class TestWeekdayIndex:
    """Test Sunday-based weekday numbering."""

    def test_sunday_is_zero(self):
        assert weekday_index(date(2024, 1, 7)) == 0

    def test_monday_is_one_and_saturday_six(self):
        assert weekday_index(date(2024, 1, 1)) == 1
        assert weekday_index(date(2024, 1, 6)) == 6


class TestWeeklySchedule:
    """Test weekly schedules."""

    def setup_method(self):
        self.program = make_program(schedule=WeeklySchedule(frozenset({1, 3})), created_at=START)

    def test_monday_wednesday(self):
        """Mon/Wed program is due on Monday and Wednesday only."""
        assert is_scheduled(self.program, date(2024, 1, 1))
        assert not is_scheduled(self.program, date(2024, 1, 2))
        assert is_scheduled(self.program, date(2024, 1, 3))
        assert not is_scheduled(self.program, date(2024, 1, 7))

    def test_same_result_one_week_later(self):
        for offset in range(60):
            day = START + timedelta(days=offset)
            assert is_scheduled(self.program, day) == is_scheduled(self.program, day + timedelta(days=7))

    def test_empty_days_never_scheduled(self):
        program = make_program(schedule=WeeklySchedule())
        assert not any(is_scheduled(program, START + timedelta(days=i)) for i in range(14))

    def test_inactive_program_never_scheduled(self):
        program = make_program(schedule=WeeklySchedule(frozenset(range(7))), is_active=False)
        assert not any(is_scheduled(program, START + timedelta(days=i)) for i in range(14))

    def test_rejects_out_of_range_weekday(self):
        with pytest.raises(ValidationError):
            WeeklySchedule(frozenset({7}))
        with pytest.raises(ValidationError):
            schedule_from_dict({"mode": "weekly", "daysOfWeek": [-1]})


class TestIntervalSchedule:
    """Test interval schedules anchored to the creation date."""

    def test_every_third_day(self):
        program = make_program(schedule=IntervalSchedule(3), created_at=START)
        for offset in range(-10, 31):
            expected = offset >= 0 and offset % 3 == 0
            assert is_scheduled(program, START + timedelta(days=offset)) == expected, offset

    def test_every_day(self):
        program = make_program(schedule=IntervalSchedule(1), created_at=START)
        assert is_scheduled(program, START)
        assert is_scheduled(program, START + timedelta(days=1))
        assert not is_scheduled(program, START - timedelta(days=1))

    def test_rejects_non_positive_interval(self):
        with pytest.raises(ValidationError):
            IntervalSchedule(0)
        with pytest.raises(ValidationError):
            IntervalSchedule(-2)
        with pytest.raises(ValidationError):
            schedule_from_dict({"mode": "interval"})
        with pytest.raises(ValidationError):
            schedule_from_dict({"mode": "interval", "intervalDays": 0})


class TestFlexibleAndRotation:
    """Test flexible and rotation schedules."""

    def test_flexible_from_creation_on(self):
        program = make_program(schedule=FlexibleSchedule(), created_at=START)
        for offset in range(-5, 20):
            assert is_scheduled(program, START + timedelta(days=offset)) == (offset >= 0)

    def test_rotation_always_scheduled(self):
        program = make_program(schedule=RotationSchedule(), program_type=ProgramType.GZCLP,
                               current_week=1, last_workout_day=0)
        assert is_scheduled(program, START - timedelta(days=30))
        assert is_scheduled(program, START + timedelta(days=100))

    def test_unknown_mode_rejected(self):
        with pytest.raises(ValidationError):
            schedule_from_dict({"mode": "monthly"})


class TestDescribeSchedule:
    def test_descriptions(self):
        assert describe_schedule(WeeklySchedule(frozenset({3, 1}))) == "Weekly: Mon, Wed"
        assert describe_schedule(IntervalSchedule(1)) == "Every day"
        assert describe_schedule(IntervalSchedule(3)) == "Every 3 days"
        assert describe_schedule(FlexibleSchedule()) == "Flexible"
        assert describe_schedule(RotationSchedule()) == "4-day rotation"
