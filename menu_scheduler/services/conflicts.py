"""Time-window conflict detection between schedules."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional

from menu_scheduler.domain.models import MenuSchedule


def windows_overlap(
    a_start: datetime,
    a_end: datetime,
    b_start: datetime,
    b_end: datetime,
) -> bool:
    """Closed-interval overlap: touching endpoints count as a conflict."""
    return a_start <= b_end and a_end >= b_start


def find_conflict(
    schedule: MenuSchedule,
    others: Iterable[MenuSchedule],
) -> Optional[MenuSchedule]:
    """
    Return the first schedule in ``others`` whose window overlaps ``schedule``.

    The schedule itself (same id) is skipped so it can be checked against a
    collection that already contains it.
    """
    for other in others:
        if other.id == schedule.id:
            continue
        if windows_overlap(schedule.start_time, schedule.end_time, other.start_time, other.end_time):
            return other
    return None


def find_all_conflicts(
    schedule: MenuSchedule,
    others: Iterable[MenuSchedule],
) -> List[MenuSchedule]:
    """Every schedule in ``others`` overlapping ``schedule`` (excluding itself)."""
    return [
        other
        for other in others
        if other.id != schedule.id
        and windows_overlap(schedule.start_time, schedule.end_time, other.start_time, other.end_time)
    ]


def conflict_message(conflicting: MenuSchedule) -> str:
    return f"Conflicts with schedule '{conflicting.name}' ({conflicting.id})"
