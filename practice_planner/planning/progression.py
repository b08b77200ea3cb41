"""GZCLP weight progression from AMRAP performance.

Each tier finishes with an AMRAP ("as many reps as possible") set. Reaching
the tier's threshold on that set (T1/T2) or across all sets (T3) earns the
tier's weight increment next time; otherwise the weight is held.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Optional, Sequence, Union

from ..models import (
    Activity,
    GZCLPTier,
    GZCLPWorkoutDay,
    Session,
    SessionStatus,
    SetLog,
    get_tier_config,
)

logger = logging.getLogger(__name__)


@dataclass
class Prescription:
    """What to load for an exercise's next cycle."""
    sets: int
    reps: int
    amrap_set: int
    weight: Optional[float]
    tier: Optional[GZCLPTier] = None

    @property
    def scheme(self) -> str:
        return f"{self.sets}x{self.reps}+"

    def to_dict(self):
        return {
            "sets": self.sets,
            "reps": self.reps,
            "amrapSet": self.amrap_set,
            "weight": self.weight,
            "tier": self.tier.value if self.tier else None,
        }


def _ordered(sets: Iterable[SetLog]) -> List[SetLog]:
    working = [s for s in sets if not s.is_warmup]
    return sorted(
        working,
        key=lambda s: (s.set_number, s.timestamp.timestamp() if s.timestamp else 0.0),
    )


def next_weight(tier: Union[GZCLPTier, str], last_cycle_sets: Sequence[SetLog]) -> Optional[float]:
    """Calculate the weight for the next cycle of one exercise.

    Args:
        tier: GZCLP tier of the exercise
        last_cycle_sets: Sets of exactly one cycle (the most recent completed one)

    Returns:
        Next weight, or None when there is nothing to base it on
    """
    sets = _ordered(last_cycle_sets)
    if not sets:
        return None

    amrap = next((s for s in reversed(sets) if s.is_amrap), None)
    if amrap is None:
        return sets[0].weight

    tier_config = get_tier_config(tier)
    if tier_config.tier == GZCLPTier.T3:
        achieved = sum(s.reps for s in sets)  # T3 counts the whole cycle
    else:
        achieved = amrap.reps

    if achieved >= tier_config.progression_threshold:
        logger.debug(f"{tier_config.tier.value}: {achieved} reps >= {tier_config.progression_threshold}, "
                     f"+{tier_config.weight_increment}")
        return amrap.weight + tier_config.weight_increment
    return amrap.weight


def _slot_tier(session: Session, activity_id: str,
               days_by_number: Mapping[int, GZCLPWorkoutDay]) -> Optional[GZCLPTier]:
    day = days_by_number.get(session.workout_day) if session.workout_day else None
    return day.slot_tier(activity_id) if day is not None else None


def last_cycle_sets(
    sessions: Iterable[Session],
    activity_id: str,
    tier: Optional[Union[GZCLPTier, str]] = None,
    workout_days: Sequence[GZCLPWorkoutDay] = (),
) -> List[SetLog]:
    """Sets of the most recent completed session that logged the activity.

    Only one session's sets are returned, so two cycles are never mixed.
    With ``tier``, only sessions where the activity filled that tier's slot
    count; the slot comes from the session's workout day in ``workout_days``.
    Sessions whose day is unknown are not filtered.
    """
    wanted = GZCLPTier(tier) if tier is not None else None
    days_by_number = {day.day_number: day for day in workout_days}

    completed = [s for s in sessions if s.status == SessionStatus.COMPLETED]
    completed.sort(key=lambda s: (s.date, s.end_time.timestamp() if s.end_time else 0.0), reverse=True)
    for session in completed:
        log = session.get_log(activity_id)
        if not log or not log.working_sets:
            continue
        if wanted is not None:
            slot = _slot_tier(session, activity_id, days_by_number)
            if slot is not None and slot != wanted:
                continue
        return list(log.sets)
    return []


def prescribe(
    activity: Activity,
    sessions: Iterable[Session],
    tier: Optional[Union[GZCLPTier, str]] = None,
    workout_days: Sequence[GZCLPWorkoutDay] = (),
) -> Prescription:
    """Prescribe the next cycle for a GZCLP activity.

    ``tier`` is the slot the activity fills next (a T1 lift trained as a T2
    follows the T2 scheme); it defaults to the activity's own tier. Falls
    back to the activity's starting weight before its first cycle in that slot.
    """
    tier_config = get_tier_config(tier or activity.tier or GZCLPTier.T3)
    history = last_cycle_sets(sessions, activity.id, tier_config.tier, workout_days)
    weight = next_weight(tier_config.tier, history)
    if weight is None:
        weight = activity.starting_weight or None
    return Prescription(
        sets=tier_config.sets,
        reps=tier_config.reps,
        amrap_set=tier_config.amrap_set,
        weight=weight,
        tier=tier_config.tier,
    )
