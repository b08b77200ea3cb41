"""Tests for the rolling calendar projection."""

from datetime import date, timedelta

from factories import make_activity, make_program
from practice_planner.models import (
    FlexibleSchedule,
    IntervalSchedule,
    ProgramType,
    RotationSchedule,
    Session,
    SessionKey,
    SessionStatus,
    WeeklySchedule,
)
from practice_planner.planning.calendar import count_by_status, date_range, project

START = date(2024, 1, 1)


class TestProject:
    """Test day-by-day agenda projection."""

    def setup_method(self):
        self.weekly = make_program("weekly", "Weekly", WeeklySchedule(frozenset({1, 3})))
        self.interval = make_program("interval", "Interval", IntervalSchedule(3))
        self.flexible = make_program("flex", "Flex", FlexibleSchedule())
        self.activities = {
            "weekly": [make_activity("squat", "weekly")],
            "interval": [],
            "flex": [],
        }

    def test_days_are_never_empty(self):
        agenda = project([self.weekly, self.interval], self.activities, {}, START, 14)
        assert agenda
        assert all(day.sessions for day in agenda)

    def test_sparse_days_ascending(self):
        agenda = project([self.weekly], self.activities, {}, START, 7)
        assert [day.date for day in agenda] == [date(2024, 1, 1), date(2024, 1, 3)]

    def test_program_order_kept_within_a_day(self):
        agenda = project([self.interval, self.weekly], self.activities, {}, START, 1)
        assert [s.program_id for s in agenda[0].sessions] == ["interval", "weekly"]

        agenda = project([self.weekly, self.interval], self.activities, {}, START, 1)
        assert [s.program_id for s in agenda[0].sessions] == ["weekly", "interval"]

    def test_existing_session_attached(self):
        session = Session(id="s1", program_id="weekly", date=START, status=SessionStatus.SKIPPED)
        agenda = project([self.weekly], self.activities, {SessionKey(START, "weekly"): session}, START, 3)

        first = agenda[0].sessions[0]
        assert first.session is session
        assert first.status == SessionStatus.SKIPPED
        assert not first.is_open
        assert agenda[1].sessions[0].session is None
        assert agenda[1].sessions[0].is_open

    def test_activities_attached(self):
        agenda = project([self.weekly], self.activities, {}, START, 1)
        assert [a.id for a in agenda[0].sessions[0].activities] == ["squat"]

    def test_dates_before_today_dropped(self):
        agenda = project([self.flexible], self.activities, {}, START, 5, today=START + timedelta(days=2))
        assert [day.date for day in agenda] == [date(2024, 1, 3), date(2024, 1, 4), date(2024, 1, 5)]

    def test_non_positive_window_is_empty(self):
        assert project([self.flexible], self.activities, {}, START, 0) == []
        assert project([self.flexible], self.activities, {}, START, -3) == []

    def test_nothing_scheduled_is_empty(self):
        inactive = make_program("off", "Off", FlexibleSchedule(), is_active=False)
        assert project([inactive], {}, {}, START, 7) == []

    def test_gzclp_next_workout_day(self):
        gzclp = make_program("g", "GZCLP", RotationSchedule(), program_type=ProgramType.GZCLP,
                             current_week=1, last_workout_day=2)
        agenda = project([gzclp, self.flexible], {}, {}, START, 2)

        assert len(agenda) == 2
        assert agenda[0].sessions[0].next_workout_day == 3
        assert agenda[0].sessions[1].next_workout_day is None


class TestHelpers:
    def test_date_range(self):
        assert date_range(START, 3) == [date(2024, 1, 1), date(2024, 1, 2), date(2024, 1, 3)]
        assert date_range(START, 0) == []

    def test_count_by_status(self):
        program = make_program("flex", "Flex", FlexibleSchedule())
        done = Session(id="s1", program_id="flex", date=START, status=SessionStatus.COMPLETED)
        agenda = project([program], {}, {SessionKey(START, "flex"): done}, START, 3)

        assert count_by_status(agenda) == {"completed": 1, "not-started": 2}
