"""Planning module: scheduling, session lifecycle and progression."""

from .schedule import is_scheduled, describe_schedule, weekday_index
from .calendar import project, agenda_for_date, date_range
from .rotation import next_day, record_completion
from .progression import Prescription, next_weight, prescribe
from .import_export import ImportResult, export_program, parse_import_text, validate_program_export

__all__ = [
    "is_scheduled",
    "describe_schedule",
    "weekday_index",
    "project",
    "agenda_for_date",
    "date_range",
    "next_day",
    "record_completion",
    "Prescription",
    "next_weight",
    "prescribe",
    "ImportResult",
    "export_program",
    "parse_import_text",
    "validate_program_export",
]
