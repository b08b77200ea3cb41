"""Domain models for programs, activities, sessions and schedules.

All models serialize to the camelCase JSON shape used by the key-value
store and by program export files.
"""

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, ClassVar, Dict, FrozenSet, List, NamedTuple, Optional, Union

from .config import config
from .errors import ValidationError


class ProgramType(Enum):
    """Kinds of practice program."""

    WEIGHTLIFTING = "weightlifting"
    GZCLP = "gzclp"
    BALLET = "ballet"
    SKILL = "skill"
    CARDIO = "cardio"
    CUSTOM = "custom"


class TrackingType(Enum):
    """How a logged occurrence of an activity is recorded."""

    SETS_REPS_WEIGHT = "sets-reps-weight"
    DURATION = "duration"
    COMPLETION = "completion"
    CUSTOM = "custom"


class SessionStatus(Enum):
    """Status of a scheduled occurrence that has a Session row."""

    COMPLETED = "completed"
    SKIPPED = "skipped"
    PARTIAL = "partial"
    IN_PROGRESS = "in-progress"


class GZCLPTier(Enum):
    """GZCLP exercise tiers."""

    T1 = "T1"  # main compound lift, 5x3+
    T2 = "T2"  # secondary compound, 3x10+
    T3 = "T3"  # accessories, 3x15+


@dataclass(frozen=True)
class GZCLPTierConfig:
    """Set/rep scheme and progression rule for one GZCLP tier."""
    tier: GZCLPTier
    sets: int
    reps: int
    amrap_set: int  # 1-based index of the AMRAP set
    weight_increment: int
    progression_threshold: int


GZCLP_CONFIGS: Dict[GZCLPTier, GZCLPTierConfig] = {
    GZCLPTier.T1: GZCLPTierConfig(GZCLPTier.T1, sets=5, reps=3, amrap_set=5,
                                  weight_increment=5, progression_threshold=5),
    GZCLPTier.T2: GZCLPTierConfig(GZCLPTier.T2, sets=3, reps=10, amrap_set=3,
                                  weight_increment=5, progression_threshold=10),
    GZCLPTier.T3: GZCLPTierConfig(GZCLPTier.T3, sets=3, reps=15, amrap_set=3,
                                  weight_increment=5, progression_threshold=25),
}


def get_tier_config(tier: Union[GZCLPTier, str]) -> GZCLPTierConfig:
    """Get the tier table entry, with the configured weight increment applied."""
    tier = GZCLPTier(tier)
    base = GZCLP_CONFIGS[tier]
    increment = config.get_weight_increment(tier.value, base.weight_increment)
    if increment == base.weight_increment:
        return base
    return GZCLPTierConfig(
        tier=base.tier,
        sets=base.sets,
        reps=base.reps,
        amrap_set=base.amrap_set,
        weight_increment=increment,
        progression_threshold=base.progression_threshold,
    )


def new_id(prefix: str) -> str:
    """Generate a unique identifier such as ``session_3f2a9c0e1b4d``."""
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def parse_date(value: Union[str, date, datetime]) -> date:
    """Parse a calendar date from a date, datetime or ISO 8601 string.

    ISO datetimes are truncated to their date part.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or len(value) < 10:
        raise ValidationError(f"Invalid date: {value!r}")
    try:
        return date.fromisoformat(value[:10])
    except ValueError as e:
        raise ValidationError(f"Invalid date: {value!r}") from e


def parse_datetime(value: Optional[Union[str, datetime]]) -> Optional[datetime]:
    """Parse an ISO 8601 datetime, accepting a trailing ``Z``."""
    if value is None or isinstance(value, datetime):
        return value
    text = value[:-1] + "+00:00" if value.endswith("Z") else value
    try:
        return datetime.fromisoformat(text)
    except ValueError as e:
        raise ValidationError(f"Invalid datetime: {value!r}") from e


def _format_datetime(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _drop_none(data: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in data.items() if v is not None}


# ---------------------------------------------------------------------------
# Schedules
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class WeeklySchedule:
    """Scheduled on fixed weekdays (0-6, Sunday = 0)."""
    days_of_week: FrozenSet[int] = frozenset()

    mode: ClassVar[str] = "weekly"

    def __post_init__(self):
        days = frozenset(self.days_of_week)
        for day in days:
            if isinstance(day, bool) or not isinstance(day, int) or not 0 <= day <= 6:
                raise ValidationError(f"Invalid weekday index: {day!r} (expected 0-6)")
        object.__setattr__(self, "days_of_week", days)


@dataclass(frozen=True)
class IntervalSchedule:
    """Scheduled every N days, anchored to the program creation date."""
    interval_days: int

    mode: ClassVar[str] = "interval"

    def __post_init__(self):
        if isinstance(self.interval_days, bool) or not isinstance(self.interval_days, int):
            raise ValidationError(f"intervalDays must be an integer, got {self.interval_days!r}")
        if self.interval_days <= 0:
            raise ValidationError(f"intervalDays must be positive, got {self.interval_days}")


@dataclass(frozen=True)
class FlexibleSchedule:
    """Available every day from the program creation date on."""

    mode: ClassVar[str] = "flexible"


@dataclass(frozen=True)
class RotationSchedule:
    """GZCLP day rotation; advanced by completions, not by the calendar."""

    mode: ClassVar[str] = "rotation"


Schedule = Union[WeeklySchedule, IntervalSchedule, FlexibleSchedule, RotationSchedule]

SCHEDULE_MODES = ("weekly", "interval", "flexible", "rotation")


def schedule_from_dict(data: Any) -> Schedule:
    """Build a schedule from ``{mode, daysOfWeek?, intervalDays?}``."""
    if not isinstance(data, dict):
        raise ValidationError("Invalid schedule")

    mode = data.get("mode")
    if mode == "weekly":
        days = data.get("daysOfWeek") or []
        if not isinstance(days, (list, tuple, set, frozenset)):
            raise ValidationError("daysOfWeek must be a list of weekday indices")
        return WeeklySchedule(frozenset(days))
    if mode == "interval":
        if "intervalDays" not in data or data["intervalDays"] is None:
            raise ValidationError("Interval schedule requires intervalDays")
        return IntervalSchedule(data["intervalDays"])
    if mode == "flexible":
        return FlexibleSchedule()
    if mode == "rotation":
        return RotationSchedule()
    raise ValidationError(f"Unknown schedule mode: {mode!r}")


def schedule_to_dict(schedule: Schedule) -> Dict[str, Any]:
    """Serialize a schedule, emitting only the fields its mode uses."""
    if isinstance(schedule, WeeklySchedule):
        return {"mode": schedule.mode, "daysOfWeek": sorted(schedule.days_of_week)}
    if isinstance(schedule, IntervalSchedule):
        return {"mode": schedule.mode, "intervalDays": schedule.interval_days}
    return {"mode": schedule.mode}


# ---------------------------------------------------------------------------
# Programs and activities
# ---------------------------------------------------------------------------

@dataclass
class Program:
    """A recurring practice program."""
    id: str
    name: str
    type: ProgramType
    schedule: Schedule
    is_active: bool = True
    created_at: date = field(default_factory=date.today)
    # GZCLP only
    current_week: Optional[int] = None
    last_workout_day: Optional[int] = None

    @property
    def is_gzclp(self) -> bool:
        return self.type == ProgramType.GZCLP

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return _drop_none({
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "schedule": schedule_to_dict(self.schedule),
            "isActive": self.is_active,
            "createdAt": self.created_at.isoformat(),
            "currentWeek": self.current_week,
            "lastWorkoutDay": self.last_workout_day,
        })

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Program":
        try:
            program_type = ProgramType(data["type"])
        except (KeyError, ValueError) as e:
            raise ValidationError(f"Invalid program type: {data.get('type')!r}") from e
        if not data.get("name") or not isinstance(data["name"], str):
            raise ValidationError("Invalid program name")
        return cls(
            id=data.get("id") or new_id("program"),
            name=data["name"],
            type=program_type,
            schedule=schedule_from_dict(data.get("schedule")),
            is_active=bool(data.get("isActive", True)),
            created_at=parse_date(data["createdAt"]) if data.get("createdAt") else date.today(),
            current_week=data.get("currentWeek"),
            last_workout_day=data.get("lastWorkoutDay"),
        )


@dataclass
class Movement:
    """A named movement inside a ballet routine."""
    id: str
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Movement":
        return cls(id=data["id"], name=data["name"])


@dataclass
class Activity:
    """A single activity (exercise, routine, drill) belonging to one program."""
    id: str
    name: str
    program_id: str
    tracking_type: TrackingType
    muscle_groups: List[str] = field(default_factory=list)
    equipment: Optional[str] = None
    tier: Optional[GZCLPTier] = None
    starting_weight: Optional[float] = None
    target_duration: Optional[int] = None  # minutes
    description: Optional[str] = None
    movements: List[Movement] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        data = _drop_none({
            "id": self.id,
            "name": self.name,
            "programId": self.program_id,
            "trackingType": self.tracking_type.value,
            "equipment": self.equipment,
            "tier": self.tier.value if self.tier else None,
            "startingWeight": self.starting_weight,
            "targetDuration": self.target_duration,
            "description": self.description,
        })
        if self.muscle_groups:
            data["muscleGroups"] = list(self.muscle_groups)
        if self.movements:
            data["movements"] = [m.to_dict() for m in self.movements]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Activity":
        if not data.get("name") or not isinstance(data["name"], str):
            raise ValidationError("Activity missing name")
        try:
            tracking_type = TrackingType(data.get("trackingType", TrackingType.COMPLETION.value))
            tier = GZCLPTier(data["tier"]) if data.get("tier") else None
        except ValueError as e:
            raise ValidationError(f"Invalid activity {data['name']!r}: {e}") from e
        return cls(
            id=data.get("id") or new_id("activity"),
            name=data["name"],
            program_id=data.get("programId", ""),
            tracking_type=tracking_type,
            muscle_groups=list(data.get("muscleGroups") or []),
            equipment=data.get("equipment"),
            tier=tier,
            starting_weight=data.get("startingWeight"),
            target_duration=data.get("targetDuration"),
            description=data.get("description"),
            movements=[Movement.from_dict(m) for m in data.get("movements") or []],
        )


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------

class SessionKey(NamedTuple):
    """Composite (date, program) key identifying one scheduled occurrence."""
    date: date
    program_id: str

    def storage_key(self) -> str:
        return f"sessions:{self.date.isoformat()}:{self.program_id}"

    @classmethod
    def from_storage_key(cls, key: str) -> "SessionKey":
        prefix, day, program_id = key.split(":", 2)
        if prefix != "sessions":
            raise ValidationError(f"Not a session key: {key!r}")
        return cls(parse_date(day), program_id)


@dataclass
class SetLog:
    """One logged set."""
    id: str
    set_number: int
    weight: float
    reps: int
    is_warmup: bool = False
    is_amrap: bool = False
    rpe: Optional[float] = None  # 1-10 scale
    rest_duration: Optional[int] = None  # seconds
    timestamp: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({
            "id": self.id,
            "setNumber": self.set_number,
            "weight": self.weight,
            "reps": self.reps,
            "isWarmup": self.is_warmup,
            "isAmrap": self.is_amrap,
            "rpe": self.rpe,
            "restDuration": self.rest_duration,
            "timestamp": _format_datetime(self.timestamp),
        })

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SetLog":
        return cls(
            id=data.get("id") or new_id("set"),
            set_number=data.get("setNumber", 0),
            weight=data.get("weight", 0),
            reps=data.get("reps", 0),
            is_warmup=bool(data.get("isWarmup", False)),
            is_amrap=bool(data.get("isAmrap", False)),
            rpe=data.get("rpe"),
            rest_duration=data.get("restDuration"),
            timestamp=parse_datetime(data.get("timestamp")),
        )


@dataclass
class ActivityLog:
    """Logged data for one activity inside a session."""
    activity_id: str
    tracking_type: TrackingType
    sets: List[SetLog] = field(default_factory=list)
    duration: Optional[int] = None  # minutes
    completed: Optional[bool] = None
    custom_values: Dict[str, Any] = field(default_factory=dict)

    @property
    def working_sets(self) -> List[SetLog]:
        """Logged sets excluding warm-ups."""
        return [s for s in self.sets if not s.is_warmup]

    def to_dict(self) -> Dict[str, Any]:
        data = _drop_none({
            "activityId": self.activity_id,
            "trackingType": self.tracking_type.value,
            "duration": self.duration,
            "completed": self.completed,
        })
        if self.sets:
            data["sets"] = [s.to_dict() for s in self.sets]
        if self.custom_values:
            data["customValues"] = dict(self.custom_values)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ActivityLog":
        return cls(
            activity_id=data["activityId"],
            tracking_type=TrackingType(data.get("trackingType", TrackingType.COMPLETION.value)),
            sets=[SetLog.from_dict(s) for s in data.get("sets") or []],
            duration=data.get("duration"),
            completed=data.get("completed"),
            custom_values=dict(data.get("customValues") or {}),
        )


@dataclass
class Session:
    """One performed (or skipped) occurrence of a program on a date."""
    id: str
    program_id: str
    date: date
    status: SessionStatus
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    duration: Optional[int] = None  # minutes
    activities: List[ActivityLog] = field(default_factory=list)
    notes: Optional[str] = None
    skip_reason: Optional[str] = None
    practice_next: Optional[str] = None
    workout_day: Optional[int] = None  # GZCLP day performed

    @property
    def key(self) -> SessionKey:
        return SessionKey(self.date, self.program_id)

    def get_log(self, activity_id: str) -> Optional[ActivityLog]:
        for log in self.activities:
            if log.activity_id == activity_id:
                return log
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return _drop_none({
            "id": self.id,
            "programId": self.program_id,
            "date": self.date.isoformat(),
            "status": self.status.value,
            "startTime": _format_datetime(self.start_time),
            "endTime": _format_datetime(self.end_time),
            "duration": self.duration,
            "activities": [a.to_dict() for a in self.activities],
            "notes": self.notes,
            "skipReason": self.skip_reason,
            "practiceNext": self.practice_next,
            "workoutDay": self.workout_day,
        })

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Session":
        return cls(
            id=data["id"],
            program_id=data["programId"],
            date=parse_date(data["date"]),
            status=SessionStatus(data["status"]),
            start_time=parse_datetime(data.get("startTime")),
            end_time=parse_datetime(data.get("endTime")),
            duration=data.get("duration"),
            activities=[ActivityLog.from_dict(a) for a in data.get("activities") or []],
            notes=data.get("notes"),
            skip_reason=data.get("skipReason"),
            practice_next=data.get("practiceNext"),
            workout_day=data.get("workoutDay"),
        )


# ---------------------------------------------------------------------------
# Calendar projection
# ---------------------------------------------------------------------------

@dataclass
class ScheduledSession:
    """A program due on a date, with its session if one was started."""
    program_id: str
    program_name: str
    program_type: ProgramType
    date: date
    activities: List[Activity]
    session: Optional[Session] = None
    next_workout_day: Optional[int] = None  # GZCLP only

    @property
    def status(self) -> Optional[SessionStatus]:
        return self.session.status if self.session else None

    @property
    def is_open(self) -> bool:
        """True when the occurrence can still be started or continued."""
        return self.status in (None, SessionStatus.IN_PROGRESS)


@dataclass
class DayAgenda:
    """All scheduled sessions for one date (never empty)."""
    date: date
    sessions: List[ScheduledSession]


# ---------------------------------------------------------------------------
# GZCLP
# ---------------------------------------------------------------------------

@dataclass
class GZCLPWorkoutDay:
    """Exercise selection for one of the four GZCLP days."""
    day_number: int
    name: str
    t1_exercise_id: str
    t2_exercise_id: str
    t3_exercise_ids: List[str] = field(default_factory=list)

    @property
    def exercise_ids(self) -> List[str]:
        """T1, T2 then T3 exercise ids in training order."""
        return [self.t1_exercise_id, self.t2_exercise_id, *self.t3_exercise_ids]

    def slot_tier(self, exercise_id: str) -> Optional[GZCLPTier]:
        """Tier of the slot the exercise fills on this day, or None if unused."""
        if exercise_id == self.t1_exercise_id:
            return GZCLPTier.T1
        if exercise_id == self.t2_exercise_id:
            return GZCLPTier.T2
        if exercise_id in self.t3_exercise_ids:
            return GZCLPTier.T3
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dayNumber": self.day_number,
            "name": self.name,
            "t1ExerciseId": self.t1_exercise_id,
            "t2ExerciseId": self.t2_exercise_id,
            "t3ExerciseIds": list(self.t3_exercise_ids),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GZCLPWorkoutDay":
        return cls(
            day_number=data["dayNumber"],
            name=data.get("name", f"Day {data['dayNumber']}"),
            t1_exercise_id=data["t1ExerciseId"],
            t2_exercise_id=data["t2ExerciseId"],
            t3_exercise_ids=list(data.get("t3ExerciseIds") or []),
        )
