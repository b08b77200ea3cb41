"""Program export files and their validation on import.

File format (version 1)::

    {
      "version": 1,
      "exportedAt": "2024-01-01T12:00:00+00:00",
      "program": {...},
      "activities": [{...}, ...]
    }
"""

import json
import logging
import re
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from ..errors import ValidationError
from ..models import Activity, Program, ProgramType, new_id

logger = logging.getLogger(__name__)

EXPORT_VERSION = 1

IMPORTABLE_TYPES = (
    ProgramType.WEIGHTLIFTING.value,
    ProgramType.SKILL.value,
    ProgramType.CARDIO.value,
    ProgramType.CUSTOM.value,
)


@dataclass
class ImportResult:
    """Outcome of validating an export file."""
    success: bool
    program: Optional[Program] = None
    activities: List[Activity] = field(default_factory=list)
    error: Optional[str] = None

    @classmethod
    def failure(cls, error: str) -> "ImportResult":
        logger.warning(f"Import rejected: {error}")
        return cls(success=False, error=error)


def export_program(program: Program, activities: Sequence[Activity],
                   now: Optional[datetime] = None) -> Dict[str, Any]:
    """Build the export document for a program and its activities."""
    exported_at = now or datetime.now(timezone.utc)
    return {
        "version": EXPORT_VERSION,
        "exportedAt": exported_at.isoformat(),
        "program": program.to_dict(),
        "activities": [a.to_dict() for a in activities],
    }


def dumps_export(program: Program, activities: Sequence[Activity],
                 now: Optional[datetime] = None) -> str:
    return json.dumps(export_program(program, activities, now), indent=2, ensure_ascii=False)


def export_filename(program: Program) -> str:
    """File name for an export, e.g. ``my-program.json``."""
    return re.sub(r"\s+", "-", program.name.lower()) + ".json"


def validate_program_export(data: Any) -> ImportResult:
    """Validate a decoded export document.

    Only weightlifting, skill, cardio and custom programs can be imported;
    GZCLP and ballet programs are created through their setup flows.
    """
    if not data or not isinstance(data, dict):
        return ImportResult.failure("Invalid file format")

    version = data.get("version")
    if isinstance(version, bool) or version != EXPORT_VERSION:
        return ImportResult.failure("Unsupported export version")

    raw_program = data.get("program")
    if not raw_program or not isinstance(raw_program, dict):
        return ImportResult.failure("Missing program data")
    if not raw_program.get("name") or not isinstance(raw_program["name"], str):
        return ImportResult.failure("Invalid program name")
    if raw_program.get("type") not in IMPORTABLE_TYPES:
        return ImportResult.failure("Invalid program type")
    if not raw_program.get("schedule") or not isinstance(raw_program["schedule"], dict):
        return ImportResult.failure("Invalid schedule")

    raw_activities = data.get("activities")
    if not isinstance(raw_activities, list):
        return ImportResult.failure("Invalid activities data")
    for raw in raw_activities:
        if not raw or not isinstance(raw, dict):
            return ImportResult.failure("Invalid activity format")
        if not raw.get("name") or not isinstance(raw["name"], str):
            return ImportResult.failure("Activity missing name")

    try:
        program = Program.from_dict(raw_program)
    except ValidationError as e:
        return ImportResult.failure(f"Invalid schedule: {e}")

    try:
        activities = [Activity.from_dict(raw) for raw in raw_activities]
    except (ValidationError, KeyError, TypeError) as e:
        return ImportResult.failure(f"Invalid activity format: {e}")

    return ImportResult(success=True, program=program, activities=activities)


def parse_import_text(text: str) -> ImportResult:
    """Decode and validate the text of an export file."""
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as e:
        logger.error(f"Import parse error: {e}")
        return ImportResult.failure("Failed to parse JSON file")
    return validate_program_export(data)


def unique_name(name: str, existing_names: Iterable[str]) -> str:
    """Append `` (N)`` with the smallest N >= 1 that makes the name unique."""
    taken = set(existing_names)
    candidate = name
    counter = 1
    while candidate in taken:
        candidate = f"{name} ({counter})"
        counter += 1
    return candidate


def prepare_imported_program(
    program: Program,
    activities: Sequence[Activity],
    existing_names: Iterable[str],
    today: Optional[date] = None,
) -> Tuple[Program, List[Activity]]:
    """Give an imported program fresh ids, a unique name and today's date."""
    program_id = new_id("program")
    imported = replace(
        program,
        id=program_id,
        name=unique_name(program.name, existing_names),
        created_at=today or date.today(),
        is_active=True,
    )
    imported_activities = [
        replace(activity, id=new_id("activity"), program_id=program_id)
        for activity in activities
    ]
    return imported, imported_activities
