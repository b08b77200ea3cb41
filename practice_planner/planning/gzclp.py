"""GZCLP program setup: exercise selection per day and starting weights."""

import logging
from datetime import date
from typing import Dict, List, Mapping, NamedTuple, Optional, Sequence, Union

from ..errors import ValidationError
from ..library import DEFAULT_GZCLP_EXERCISES, LibraryExercise, custom_exercise_id
from ..models import (
    Activity,
    GZCLPTier,
    GZCLPWorkoutDay,
    Program,
    ProgramType,
    RotationSchedule,
    new_id,
)
from .rotation import ROTATION_LENGTH

logger = logging.getLogger(__name__)

MAX_T3_EXERCISES = 3

# Exercise ids here are library ids; build_gzclp_program binds them to a program.
DEFAULT_WORKOUT_DAYS: List[GZCLPWorkoutDay] = [
    GZCLPWorkoutDay(1, "Day 1 - Squat Focus", "squat", "bench", ["lat_pulldown"]),
    GZCLPWorkoutDay(2, "Day 2 - Bench Focus", "bench", "rdl", ["db_curl"]),
    GZCLPWorkoutDay(3, "Day 3 - Deadlift Focus", "deadlift", "ohp", ["leg_curl"]),
    GZCLPWorkoutDay(4, "Day 4 - OHP Focus", "ohp", "front_squat", ["tricep_pushdown"]),
]

# A T1 lift may be trained as another day's T2.
_SLOT_TIERS = {
    "T1": (GZCLPTier.T1,),
    "T2": (GZCLPTier.T1, GZCLPTier.T2),
    "T3": (GZCLPTier.T3,),
}


class GZCLPSetup(NamedTuple):
    program: Program
    activities: List[Activity]
    workout_days: List[GZCLPWorkoutDay]


def make_custom_exercise(name: str, tier: Union[GZCLPTier, str], suffix: Optional[str] = None) -> LibraryExercise:
    """Create a user-defined exercise for the GZCLP library."""
    if not name or not name.strip():
        raise ValidationError("Exercise name is required")
    return LibraryExercise(
        id=custom_exercise_id(name, suffix or new_id("x").split("_", 1)[1]),
        name=name.strip(),
        tier=GZCLPTier(tier),
        equipment="Other",
    )


def _check_slot(slot: str, exercise_id: str, day: GZCLPWorkoutDay,
                library: Mapping[str, LibraryExercise]) -> None:
    exercise = library.get(exercise_id)
    if exercise is None:
        raise ValidationError(f"{day.name}: unknown exercise {exercise_id!r}")
    if exercise.tier not in _SLOT_TIERS[slot]:
        raise ValidationError(
            f"{day.name}: {exercise.name} is a {exercise.tier.value} exercise and cannot fill the {slot} slot"
        )


def validate_workout_days(days: Sequence[GZCLPWorkoutDay], library: Mapping[str, LibraryExercise]) -> None:
    """Check that days 1-4 each have a T1, a T2 and 1-3 T3 exercises."""
    numbers = sorted(day.day_number for day in days)
    if numbers != list(range(1, ROTATION_LENGTH + 1)):
        raise ValidationError(f"GZCLP needs workout days 1-{ROTATION_LENGTH}, got {numbers}")

    for day in days:
        if not day.t1_exercise_id or not day.t2_exercise_id:
            raise ValidationError(f"{day.name}: T1 and T2 exercises are required")
        _check_slot("T1", day.t1_exercise_id, day, library)
        _check_slot("T2", day.t2_exercise_id, day, library)
        if day.t1_exercise_id == day.t2_exercise_id:
            raise ValidationError(f"{day.name}: T1 and T2 must be different exercises")

        t3_ids = day.t3_exercise_ids
        if not 1 <= len(t3_ids) <= MAX_T3_EXERCISES:
            raise ValidationError(f"{day.name}: choose 1-{MAX_T3_EXERCISES} T3 exercises")
        if len(set(t3_ids)) != len(t3_ids):
            raise ValidationError(f"{day.name}: duplicate T3 exercise")
        for exercise_id in t3_ids:
            _check_slot("T3", exercise_id, day, library)


def used_exercise_ids(days: Sequence[GZCLPWorkoutDay]) -> List[str]:
    """Exercise ids used by any day, in first-use order."""
    seen: List[str] = []
    for day in sorted(days, key=lambda d: d.day_number):
        for exercise_id in day.exercise_ids:
            if exercise_id not in seen:
                seen.append(exercise_id)
    return seen


def build_gzclp_program(
    name: str,
    starting_weights: Mapping[str, float],
    workout_days: Optional[Sequence[GZCLPWorkoutDay]] = None,
    custom_exercises: Optional[Sequence[LibraryExercise]] = None,
    today: Optional[date] = None,
    program_id: Optional[str] = None,
) -> GZCLPSetup:
    """Build a GZCLP program, its activities and its four workout days.

    Args:
        name: Program name
        starting_weights: Starting weight per library exercise id
        workout_days: Day definitions using library ids (default split if omitted)
        custom_exercises: User-added exercises available to the days
        today: Creation date
        program_id: Id to use instead of a generated one

    Returns:
        GZCLPSetup with activity ids of the form ``{programId}_{exerciseId}``
    """
    if not name or not name.strip():
        raise ValidationError("Program name is required")

    days = list(workout_days or DEFAULT_WORKOUT_DAYS)
    library: Dict[str, LibraryExercise] = {
        e.id: e for e in list(DEFAULT_GZCLP_EXERCISES) + list(custom_exercises or [])
    }
    validate_workout_days(days, library)

    used = used_exercise_ids(days)
    missing = [exercise_id for exercise_id in used if (starting_weights.get(exercise_id) or 0) <= 0]
    if missing:
        raise ValidationError("Starting weight required for: " + ", ".join(library[e].name for e in missing))

    program_id = program_id or new_id("program")
    program = Program(
        id=program_id,
        name=name.strip(),
        type=ProgramType.GZCLP,
        schedule=RotationSchedule(),
        is_active=True,
        created_at=today or date.today(),
        current_week=1,
        last_workout_day=0,
    )

    def bind(exercise_id: str) -> str:
        return f"{program_id}_{exercise_id}"

    activities = []
    for exercise_id in used:
        exercise = library[exercise_id]
        activities.append(Activity(
            id=bind(exercise_id),
            name=exercise.name,
            program_id=program_id,
            tracking_type=exercise.tracking_type,
            muscle_groups=list(exercise.muscle_groups),
            equipment=exercise.equipment,
            tier=exercise.tier,
            starting_weight=starting_weights[exercise_id],
        ))

    bound_days = [
        GZCLPWorkoutDay(
            day_number=day.day_number,
            name=day.name,
            t1_exercise_id=bind(day.t1_exercise_id),
            t2_exercise_id=bind(day.t2_exercise_id),
            t3_exercise_ids=[bind(e) for e in day.t3_exercise_ids],
        )
        for day in sorted(days, key=lambda d: d.day_number)
    ]

    logger.info(f"Built GZCLP program {program_id} with {len(activities)} exercises")
    return GZCLPSetup(program, activities, bound_days)


def day_activities(day: GZCLPWorkoutDay, activities: Sequence[Activity]) -> List[Activity]:
    """Activities performed on a workout day, in T1, T2, T3 order."""
    by_id = {activity.id: activity for activity in activities}
    result = []
    for exercise_id in day.exercise_ids:
        activity = by_id.get(exercise_id)
        if activity is None:
            logger.warning(f"{day.name} references missing activity {exercise_id}")
            continue
        result.append(activity)
    return result
