"""Shared fixtures: an in-memory database per test."""

from datetime import datetime

import pytest

from factories import FixedClock
from practice_planner.db import Database
from practice_planner.planner import PracticePlanner
from practice_planner.storage import KeyValueStore


@pytest.fixture
def db():
    database = Database("sqlite://")
    database.create_tables()
    yield database
    database.close()


@pytest.fixture
def store(db):
    return KeyValueStore(db)


@pytest.fixture
def clock():
    return FixedClock(datetime(2024, 1, 1, 9, 0))


@pytest.fixture
def planner(store, clock):
    return PracticePlanner(store=store, clock=clock)
