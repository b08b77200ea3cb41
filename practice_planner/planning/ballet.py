"""Ballet class setup: class type and level to routines of movements."""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple, Union

from ..errors import ValidationError
from ..library import (
    CLASS_SECTIONS,
    DEFAULT_BALLET_EXERCISES,
    BalletClassType,
    BalletExercise,
    BalletLevel,
    BalletSection,
    base_exercise_id,
)
from ..models import (
    Activity,
    Movement,
    Program,
    ProgramType,
    RotationSchedule,
    Schedule,
    TrackingType,
    new_id,
)
from .schedule import validate_schedule

logger = logging.getLogger(__name__)

SECTION_LABELS: Dict[BalletSection, str] = {
    BalletSection.BARRE: "Barre",
    BalletSection.CENTER: "Center",
    BalletSection.POINTE: "Pointe",
    BalletSection.COOLDOWN: "Cool-down",
}

CLASS_LABELS: Dict[BalletClassType, str] = {
    BalletClassType.FULL: "Full Class",
    BalletClassType.BARRE_ONLY: "Barre Only",
    BalletClassType.CENTER_ONLY: "Center Only",
    BalletClassType.POINTE: "Pointe",
}

LEVEL_LABELS: Dict[BalletLevel, str] = {
    BalletLevel.BEGINNER: "Beginner",
    BalletLevel.INTERMEDIATE: "Intermediate",
    BalletLevel.ADVANCED: "Advanced",
}

_DURATIONS: Dict[str, int] = {e.id: e.default_duration for e in DEFAULT_BALLET_EXERCISES}


@dataclass
class Routine:
    """A named group of movements, performed as one activity."""
    id: str
    name: str
    movements: List[Movement] = field(default_factory=list)
    section: Optional[BalletSection] = None
    notes: str = ""

    @property
    def estimated_duration(self) -> Optional[int]:
        """Sum of the library durations of known movements, in minutes."""
        minutes = [_DURATIONS.get(base_exercise_id(m.id)) for m in self.movements]
        known = [m for m in minutes if m is not None]
        return sum(known) if known else None


def exercises_for_class(
    class_type: Union[BalletClassType, str],
    level: Union[BalletLevel, str],
) -> List[BalletExercise]:
    """Library exercises taught in a class type at a level, in class order."""
    class_type = BalletClassType(class_type)
    level = BalletLevel(level)
    sections = CLASS_SECTIONS[class_type]
    return [e for e in DEFAULT_BALLET_EXERCISES if level in e.levels and e.section in sections]


def default_routines(
    class_type: Union[BalletClassType, str],
    level: Union[BalletLevel, str],
) -> List[Routine]:
    """One routine per class section, holding that section's exercises."""
    grouped: Dict[BalletSection, List[BalletExercise]] = {}
    for exercise in exercises_for_class(class_type, level):
        grouped.setdefault(exercise.section, []).append(exercise)

    return [
        Routine(
            id=f"routine_{section.value}",
            name=SECTION_LABELS[section],
            section=section,
            movements=[Movement(id=e.id, name=e.name) for e in exercises],
        )
        for section, exercises in grouped.items()
    ]


def default_program_name(class_type: Union[BalletClassType, str], level: Union[BalletLevel, str]) -> str:
    return f"{LEVEL_LABELS[BalletLevel(level)]} {CLASS_LABELS[BalletClassType(class_type)]}"


def build_ballet_program(
    name: str,
    routines: Sequence[Routine],
    schedule: Schedule,
    today: Optional[date] = None,
    program_id: Optional[str] = None,
) -> Tuple[Program, List[Activity]]:
    """Build a ballet program with one completion-tracked activity per routine.

    Raises:
        ValidationError: empty name, no movements, or a rotation schedule
    """
    if not name or not name.strip():
        raise ValidationError("Program name is required")
    if not routines or sum(len(r.movements) for r in routines) == 0:
        raise ValidationError("A ballet program needs at least one routine with movements")
    validate_schedule(schedule)
    if isinstance(schedule, RotationSchedule):
        raise ValidationError("The rotation schedule is only available to GZCLP programs")

    program_id = program_id or new_id("program")
    program = Program(
        id=program_id,
        name=name.strip(),
        type=ProgramType.BALLET,
        schedule=schedule,
        is_active=True,
        created_at=today or date.today(),
    )
    activities = [
        Activity(
            id=f"{program_id}_{routine.id}",
            name=routine.name,
            program_id=program_id,
            tracking_type=TrackingType.COMPLETION,
            target_duration=routine.estimated_duration,
            description=routine.notes or None,
            movements=list(routine.movements),
        )
        for routine in routines
    ]
    logger.info(f"Built ballet program {program_id} with {len(activities)} routines")
    return program, activities
