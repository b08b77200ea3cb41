"""Built-in exercise libraries for GZCLP and ballet programs."""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .models import GZCLPTier, TrackingType


@dataclass(frozen=True)
class LibraryExercise:
    """A GZCLP exercise template, not yet bound to a program."""
    id: str
    name: str
    tier: GZCLPTier
    muscle_groups: Tuple[str, ...] = ()
    equipment: Optional[str] = None
    tracking_type: TrackingType = TrackingType.SETS_REPS_WEIGHT


DEFAULT_GZCLP_EXERCISES: List[LibraryExercise] = [
    # T1
    LibraryExercise("squat", "Squat", GZCLPTier.T1, ("Quads", "Glutes"), "Barbell"),
    LibraryExercise("bench", "Bench Press", GZCLPTier.T1, ("Chest", "Triceps"), "Barbell"),
    LibraryExercise("deadlift", "Deadlift", GZCLPTier.T1, ("Back", "Hamstrings"), "Barbell"),
    LibraryExercise("ohp", "Overhead Press", GZCLPTier.T1, ("Shoulders", "Triceps"), "Barbell"),
    # T2
    LibraryExercise("rdl", "Romanian Deadlift", GZCLPTier.T2, ("Hamstrings", "Back"), "Barbell"),
    LibraryExercise("incline_bench", "Incline Bench Press", GZCLPTier.T2, ("Chest", "Shoulders"), "Barbell"),
    LibraryExercise("bb_row", "Barbell Row", GZCLPTier.T2, ("Back", "Biceps"), "Barbell"),
    LibraryExercise("front_squat", "Front Squat", GZCLPTier.T2, ("Quads", "Core"), "Barbell"),
    LibraryExercise("close_grip_bench", "Close-Grip Bench Press", GZCLPTier.T2, ("Triceps", "Chest"), "Barbell"),
    # T3
    LibraryExercise("lat_pulldown", "Lat Pulldown", GZCLPTier.T3, ("Back", "Biceps"), "Cable"),
    LibraryExercise("cable_fly", "Cable Fly", GZCLPTier.T3, ("Chest",), "Cable"),
    LibraryExercise("leg_curl", "Leg Curl", GZCLPTier.T3, ("Hamstrings",), "Machine"),
    LibraryExercise("leg_extension", "Leg Extension", GZCLPTier.T3, ("Quads",), "Machine"),
    LibraryExercise("face_pull", "Face Pull", GZCLPTier.T3, ("Shoulders", "Back"), "Cable"),
    LibraryExercise("db_curl", "Dumbbell Curl", GZCLPTier.T3, ("Biceps",), "Dumbbell"),
    LibraryExercise("tricep_pushdown", "Tricep Pushdown", GZCLPTier.T3, ("Triceps",), "Cable"),
]


def gzclp_exercises_by_tier(extra: Optional[List[LibraryExercise]] = None) -> Dict[GZCLPTier, List[LibraryExercise]]:
    """Group the default library (plus any custom exercises) by tier."""
    grouped: Dict[GZCLPTier, List[LibraryExercise]] = {tier: [] for tier in GZCLPTier}
    for exercise in DEFAULT_GZCLP_EXERCISES + list(extra or []):
        grouped[exercise.tier].append(exercise)
    return grouped


def custom_exercise_id(name: str, suffix: str) -> str:
    """Build the id of a user-added exercise, e.g. ``custom_hip_thrust_<suffix>``."""
    slug = re.sub(r"\s+", "_", name.strip().lower())
    return f"custom_{slug}_{suffix}"


class BalletClassType(Enum):
    FULL = "full"
    BARRE_ONLY = "barre-only"
    CENTER_ONLY = "center-only"
    POINTE = "pointe"


class BalletLevel(Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class BalletSection(Enum):
    BARRE = "barre"
    CENTER = "center"
    POINTE = "pointe"
    COOLDOWN = "cooldown"


@dataclass(frozen=True)
class BalletExercise:
    """A ballet class exercise and the levels it is taught at."""
    id: str
    name: str
    section: BalletSection
    default_duration: int  # minutes
    levels: Tuple[BalletLevel, ...]


_ALL = (BalletLevel.BEGINNER, BalletLevel.INTERMEDIATE, BalletLevel.ADVANCED)
_INT_ADV = (BalletLevel.INTERMEDIATE, BalletLevel.ADVANCED)

DEFAULT_BALLET_EXERCISES: List[BalletExercise] = [
    # Barre
    BalletExercise("plies", "Pliés", BalletSection.BARRE, 5, _ALL),
    BalletExercise("tendus", "Tendus", BalletSection.BARRE, 4, _ALL),
    BalletExercise("degages", "Dégagés", BalletSection.BARRE, 4, _ALL),
    BalletExercise("rond_de_jambe", "Rond de jambe", BalletSection.BARRE, 5, _ALL),
    BalletExercise("fondus", "Fondus", BalletSection.BARRE, 5, _INT_ADV),
    BalletExercise("frappes", "Frappés", BalletSection.BARRE, 4, _INT_ADV),
    BalletExercise("adagio_barre", "Adagio (Développés)", BalletSection.BARRE, 6, _INT_ADV),
    BalletExercise("grand_battement", "Grand battement", BalletSection.BARRE, 4, _ALL),
    # Center
    BalletExercise("adagio_center", "Adagio", BalletSection.CENTER, 6, _ALL),
    BalletExercise("pirouettes", "Pirouettes / Turns", BalletSection.CENTER, 8, _INT_ADV),
    BalletExercise("petit_allegro", "Petit allegro", BalletSection.CENTER, 8, _ALL),
    BalletExercise("grand_allegro", "Grand allegro", BalletSection.CENTER, 8, _INT_ADV),
    BalletExercise("reverence", "Révérence", BalletSection.CENTER, 3, _ALL),
    # Pointe
    BalletExercise("releves_barre", "Relevés at barre", BalletSection.POINTE, 5, _INT_ADV),
    BalletExercise("echappes", "Échappés", BalletSection.POINTE, 5, _INT_ADV),
    BalletExercise("bourrees", "Bourrées", BalletSection.POINTE, 5, _INT_ADV),
    BalletExercise("pointe_center", "Pointe center work", BalletSection.POINTE, 10, (BalletLevel.ADVANCED,)),
    # Cool-down
    BalletExercise("floor_stretches", "Floor stretches", BalletSection.COOLDOWN, 10, _ALL),
    BalletExercise("cooldown", "Cool-down", BalletSection.COOLDOWN, 5, _ALL),
]

CLASS_SECTIONS: Dict[BalletClassType, Tuple[BalletSection, ...]] = {
    BalletClassType.FULL: (BalletSection.BARRE, BalletSection.CENTER, BalletSection.COOLDOWN),
    BalletClassType.BARRE_ONLY: (BalletSection.BARRE, BalletSection.COOLDOWN),
    BalletClassType.CENTER_ONLY: (BalletSection.CENTER, BalletSection.COOLDOWN),
    BalletClassType.POINTE: (BalletSection.POINTE, BalletSection.COOLDOWN),
}

_INSTANCE_SUFFIX = re.compile(r"_\d+_[a-z0-9]+$")


def base_exercise_id(movement_id: str) -> str:
    """Strip the ``_<timestamp>_<random>`` suffix from a movement instance id."""
    return _INSTANCE_SUFFIX.sub("", movement_id)
