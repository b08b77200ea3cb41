"""Tests for GZCLP weight progression."""

from dataclasses import replace
from datetime import date, datetime

from factories import make_activity
from practice_planner.models import (
    ActivityLog,
    GZCLPTier,
    GZCLPWorkoutDay,
    Session,
    SessionStatus,
    SetLog,
    TrackingType,
)
from practice_planner.planning.progression import last_cycle_sets, next_weight, prescribe


def make_sets(*rows):
    """Build sets from (weight, reps, is_amrap) tuples, numbered in order."""
    return [
        SetLog(id=f"s{i}", set_number=i, weight=weight, reps=reps, is_amrap=amrap)
        for i, (weight, reps, amrap) in enumerate(rows, start=1)
    ]


def make_session(session_id, day, sets, status=SessionStatus.COMPLETED, activity_id="squat"):
    return Session(
        id=session_id,
        program_id="p1",
        date=day,
        status=status,
        end_time=datetime.combine(day, datetime.min.time()),
        activities=[ActivityLog(activity_id, TrackingType.SETS_REPS_WEIGHT, sets=sets)],
    )


class TestNextWeight:
    """Test the AMRAP progression rule per tier."""

    def test_t1_four_sets_then_amrap(self):
        """Four sets of 3 and an AMRAP of 5 at 135 earns 140."""
        sets = make_sets(*[(135, 3, False)] * 4, (135, 5, True))
        assert next_weight("T1", sets) == 140

    def test_t1_threshold(self):
        assert next_weight(GZCLPTier.T1, make_sets(*[(135, 3, False)] * 4, (135, 5, True))) == 140
        assert next_weight(GZCLPTier.T1, make_sets(*[(135, 3, False)] * 4, (135, 4, True))) == 135

    def test_t2_threshold(self):
        assert next_weight(GZCLPTier.T2, make_sets((95, 10, False), (95, 10, False), (95, 10, True))) == 100
        assert next_weight(GZCLPTier.T2, make_sets((95, 10, False), (95, 10, False), (95, 9, True))) == 95

    def test_t3_counts_all_sets(self):
        assert next_weight(GZCLPTier.T3, make_sets((50, 8, False), (50, 8, False), (50, 9, True))) == 55
        assert next_weight(GZCLPTier.T3, make_sets((50, 8, False), (50, 8, False), (50, 8, True))) == 50

    def test_no_sets(self):
        assert next_weight(GZCLPTier.T1, []) is None

    def test_no_amrap_holds_first_set_weight(self):
        assert next_weight(GZCLPTier.T1, make_sets((125, 3, False), (135, 3, False))) == 125

    def test_order_independent(self):
        sets = make_sets((125, 3, False), *[(135, 3, False)] * 3, (135, 5, True))
        assert next_weight(GZCLPTier.T1, list(reversed(sets))) == 140
        assert next_weight(GZCLPTier.T1, list(reversed(sets[:4]))) == 125

    def test_warmups_ignored(self):
        warmup = SetLog(id="w", set_number=0, weight=45, reps=10, is_warmup=True)
        sets = [warmup] + make_sets((95, 8, False), (95, 8, False), (95, 8, True))
        # 24 working reps; the warm-up would push it over 25
        assert next_weight(GZCLPTier.T3, sets) == 95
        assert next_weight(GZCLPTier.T1, [warmup]) is None


class TestLastCycleSets:
    """Test picking one cycle of sets from session history."""

    def test_most_recent_completed_session(self):
        older = make_session("old", date(2024, 1, 1), make_sets((130, 5, True)))
        newer = make_session("new", date(2024, 1, 8), make_sets((135, 4, True)))
        in_progress = make_session("now", date(2024, 1, 15), make_sets((140, 5, True)),
                                   status=SessionStatus.IN_PROGRESS)

        sets = last_cycle_sets([newer, in_progress, older], "squat")
        assert [s.weight for s in sets] == [135]

    def test_skips_sessions_without_the_activity(self):
        squat = make_session("old", date(2024, 1, 1), make_sets((130, 5, True)))
        bench = make_session("new", date(2024, 1, 8), make_sets((95, 5, True)), activity_id="bench")

        assert [s.weight for s in last_cycle_sets([squat, bench], "squat")] == [130]
        assert last_cycle_sets([bench], "squat") == []

    def test_filters_by_slot_tier(self):
        days = [
            GZCLPWorkoutDay(1, "Day 1", "squat", "bench", ["curl"]),
            GZCLPWorkoutDay(2, "Day 2", "bench", "rdl", ["curl"]),
        ]
        as_t1 = replace(make_session("d2", date(2024, 1, 2), make_sets((135, 5, True)), activity_id="bench"),
                        workout_day=2)
        as_t2 = replace(make_session("d1", date(2024, 1, 5), make_sets((95, 10, True)), activity_id="bench"),
                        workout_day=1)
        history = [as_t1, as_t2]

        assert [s.weight for s in last_cycle_sets(history, "bench", GZCLPTier.T1, days)] == [135]
        assert [s.weight for s in last_cycle_sets(history, "bench", GZCLPTier.T2, days)] == [95]
        assert [s.weight for s in last_cycle_sets(history, "bench")] == [95]

    def test_unknown_day_is_not_filtered(self):
        session = make_session("s", date(2024, 1, 1), make_sets((135, 5, True)))
        assert [s.weight for s in last_cycle_sets([session], "squat", GZCLPTier.T2, [])] == [135]


class TestPrescribe:
    """Test next-cycle prescriptions."""

    def test_falls_back_to_starting_weight(self):
        activity = make_activity("squat", tier=GZCLPTier.T1, starting_weight=135)
        prescription = prescribe(activity, [])

        assert prescription.weight == 135
        assert (prescription.sets, prescription.reps, prescription.amrap_set) == (5, 3, 5)
        assert prescription.scheme == "5x3+"

    def test_uses_last_cycle(self):
        activity = make_activity("squat", tier=GZCLPTier.T1, starting_weight=135)
        history = [make_session("s", date(2024, 1, 1), make_sets(*[(135, 3, False)] * 4, (135, 6, True)))]

        assert prescribe(activity, history).weight == 140

    def test_t2_scheme(self):
        activity = make_activity("rdl", tier=GZCLPTier.T2, starting_weight=95)
        assert prescribe(activity, []).scheme == "3x10+"

    def test_slot_tier_overrides_own_tier(self):
        activity = make_activity("bench", tier=GZCLPTier.T1, starting_weight=95)
        prescription = prescribe(activity, [], tier=GZCLPTier.T2)

        assert prescription.scheme == "3x10+"
        assert prescription.tier == GZCLPTier.T2
        assert prescription.to_dict()["tier"] == "T2"
