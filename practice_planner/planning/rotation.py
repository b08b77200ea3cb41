"""GZCLP 4-day rotation pointer."""

import logging
from dataclasses import replace
from typing import List, Optional

from ..errors import ValidationError
from ..models import GZCLPWorkoutDay, Program

logger = logging.getLogger(__name__)

ROTATION_LENGTH = 4


def _last_day(program: Program) -> int:
    last = program.last_workout_day or 0
    if not 0 <= last <= ROTATION_LENGTH:
        raise ValidationError(f"Invalid lastWorkoutDay {last} for program {program.id}")
    return last


def next_day(program: Program) -> int:
    """Day number (1-4) the program should perform next.

    ``last_workout_day`` holds the day just completed, never the next one.
    """
    last = _last_day(program)
    if last == 0:
        return 1
    return (last % ROTATION_LENGTH) + 1


def record_completion(program: Program, day_number: int) -> Program:
    """Return a copy of the program with ``day_number`` recorded as completed.

    Completing the last day of the rotation starts a new week.
    """
    if not program.is_gzclp:
        raise ValidationError(f"Program {program.id} does not use the GZCLP rotation")
    if not 1 <= day_number <= ROTATION_LENGTH:
        raise ValidationError(f"Invalid GZCLP day {day_number} (expected 1-{ROTATION_LENGTH})")

    week = program.current_week or 1
    if day_number == ROTATION_LENGTH:
        week += 1

    updated = replace(program, last_workout_day=day_number, current_week=week)
    logger.info(f"GZCLP {program.id}: completed day {day_number}, next day {next_day(updated)}")
    return updated


def workout_for_day(days: List[GZCLPWorkoutDay], day_number: int) -> Optional[GZCLPWorkoutDay]:
    """Find the workout definition for a day number."""
    for day in days:
        if day.day_number == day_number:
            return day
    return None
