"""Tests for the key-value store and repositories."""

from datetime import date

import pytest
from sqlalchemy.exc import OperationalError

from factories import make_activity, make_program
from practice_planner.errors import NotFoundError, StorageError
from practice_planner.models import GZCLPWorkoutDay, Session, SessionKey, SessionStatus
from practice_planner.storage import (
    ActivityRepository,
    KeyValueStore,
    ProgramRepository,
    SessionRepository,
    WorkoutDayRepository,
)


class TestKeyValueStore:
    """Test the SQL-backed key-value store."""

    def test_set_get_roundtrip(self, store):
        assert store.set("programs:list", ["a", "b"])
        assert store.get("programs:list") == ["a", "b"]

    def test_missing_key(self, store):
        assert store.get("nope") is None

    def test_overwrite(self, store):
        store.set("k", {"v": 1})
        store.set("k", {"v": 2})
        assert store.get("k") == {"v": 2}

    def test_delete(self, store):
        store.set("k", 1)
        assert store.delete("k")
        assert store.get("k") is None
        assert store.delete("k")

    def test_list_by_prefix(self, store):
        for key in ("sessions:2024-01-02:p", "sessions:2024-01-01:p", "programs:p"):
            store.set(key, {})
        assert store.list("sessions:") == ["sessions:2024-01-01:p", "sessions:2024-01-02:p"]
        assert len(store.list()) == 3

    def test_list_prefix_is_literal(self, store):
        for key in ("gzclp:program_1:days", "gzclp:programX1:days", "GZCLP:program_1:days"):
            store.set(key, {})
        assert store.list("gzclp:program_1") == ["gzclp:program_1:days"]
        assert store.list("gzclp:program%") == []

    def test_unserializable_value_fails(self, store):
        assert store.set("k", object()) is False

    def test_clear(self, store):
        store.set("a", 1)
        store.set("b", 2)
        assert store.clear()
        assert store.list() == []

    def test_database_errors(self, db):
        store = KeyValueStore(db)
        db.drop_tables()

        assert store.set("k", 1) is False
        with pytest.raises(StorageError) as exc_info:
            store.get("k")
        assert isinstance(exc_info.value.__cause__, OperationalError)


class TestProgramRepository:
    """Test program persistence."""

    def setup_method(self):
        self.program = make_program("p1", "Strength")
        self.other = make_program("p2", "Cardio")

    def test_save_and_get(self, store):
        repo = ProgramRepository(store)
        repo.save(self.program)

        loaded = repo.get("p1")
        assert loaded == self.program

    def test_get_all_keeps_creation_order(self, store):
        repo = ProgramRepository(store)
        repo.save(self.other)
        repo.save(self.program)
        repo.save(self.other)

        assert [p.id for p in repo.get_all()] == ["p2", "p1"]
        assert repo.names() == ["Cardio", "Strength"]

    def test_require_missing(self, store):
        with pytest.raises(NotFoundError):
            ProgramRepository(store).require("missing")

    def test_delete_cascades_but_keeps_sessions(self, store):
        programs = ProgramRepository(store)
        activities = ActivityRepository(store)
        sessions = SessionRepository(store)
        days = WorkoutDayRepository(store)

        programs.save(self.program)
        activities.save_all("p1", [make_activity("a1")])
        days.save("p1", [GZCLPWorkoutDay(1, "Day 1", "a", "b", ["c"])])
        sessions.save(Session(id="s1", program_id="p1", date=date(2024, 1, 1), status=SessionStatus.SKIPPED))

        programs.delete("p1")

        assert programs.get("p1") is None
        assert programs.get_all() == []
        assert activities.get_by_program("p1") == []
        assert days.get("p1") == []
        assert sessions.get(SessionKey(date(2024, 1, 1), "p1")) is not None

    def test_write_failure_raises_storage_error(self, db):
        store = KeyValueStore(db)
        db.drop_tables()
        with pytest.raises(StorageError):
            ProgramRepository(store).save(self.program)


class TestActivityRepository:
    def test_order_preserved(self, store):
        repo = ActivityRepository(store)
        repo.save_all("p1", [make_activity("b"), make_activity("a")])

        assert [a.id for a in repo.get_by_program("p1")] == ["b", "a"]
        assert repo.get("p1", "a").name == "A"
        assert repo.get("p1", "zzz") is None


class TestSessionRepository:
    """Test sessions keyed by (date, program)."""

    def setup_method(self):
        self.sessions = [
            Session(id=f"s{day}", program_id=pid, date=date(2024, 1, day), status=SessionStatus.IN_PROGRESS)
            for day, pid in ((1, "p1"), (3, "p1"), (3, "p2"), (5, "p1"))
        ]

    def test_one_session_per_key(self, store):
        repo = SessionRepository(store)
        first = Session(id="a", program_id="p1", date=date(2024, 1, 1), status=SessionStatus.IN_PROGRESS)
        second = Session(id="b", program_id="p1", date=date(2024, 1, 1), status=SessionStatus.SKIPPED)
        repo.save(first)
        repo.save(second)

        assert repo.get(SessionKey(date(2024, 1, 1), "p1")).id == "b"
        assert len(store.list("sessions:")) == 1

    def test_date_range_inclusive(self, store):
        repo = SessionRepository(store)
        for session in self.sessions:
            repo.save(session)

        found = repo.get_by_date_range(date(2024, 1, 3), date(2024, 1, 5))
        assert set(found) == {
            SessionKey(date(2024, 1, 3), "p1"),
            SessionKey(date(2024, 1, 3), "p2"),
            SessionKey(date(2024, 1, 5), "p1"),
        }

    def test_get_by_program_sorted(self, store):
        repo = SessionRepository(store)
        for session in reversed(self.sessions):
            repo.save(session)

        assert [s.date.day for s in repo.get_by_program("p1")] == [1, 3, 5]

    def test_delete(self, store):
        repo = SessionRepository(store)
        repo.save(self.sessions[0])
        repo.delete(self.sessions[0].key)
        assert repo.get(self.sessions[0].key) is None
