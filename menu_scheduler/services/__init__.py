"""Services for scheduling logic."""

from .availability import apply_preset, changed_items
from .conflicts import conflict_message, find_all_conflicts, find_conflict, windows_overlap
from .recurrence import add_one_month, advance_after_execution, next_occurrence
from .validation import (
    check_schedule_conflicts,
    upcoming_schedules,
    validate_preset_exists,
    validate_preset_items,
    validate_window,
)

__all__ = [
    "apply_preset",
    "changed_items",
    "conflict_message",
    "find_all_conflicts",
    "find_conflict",
    "windows_overlap",
    "add_one_month",
    "advance_after_execution",
    "next_occurrence",
    "check_schedule_conflicts",
    "upcoming_schedules",
    "validate_preset_exists",
    "validate_preset_items",
    "validate_window",
]
