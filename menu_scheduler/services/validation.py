"""Caller-side validation for presets and schedules."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional
from uuid import UUID

from menu_scheduler.domain.errors import NotFoundError, ValidationError
from menu_scheduler.domain.models import MenuSchedule, ScheduleStatus, as_utc
from menu_scheduler.domain.store import EntityStore

from .conflicts import find_all_conflicts


def validate_preset_items(store: EntityStore, item_ids: Iterable[UUID]) -> None:
    """
    Check that every referenced menu item exists.

    Raises:
        ValidationError: Listing the unknown ids
    """
    known = {item.id for item in store.menu_items.list()}
    unknown = [str(item_id) for item_id in item_ids if item_id not in known]
    if unknown:
        raise ValidationError(f"Preset references unknown menu items: {', '.join(unknown)}")


def validate_preset_exists(store: EntityStore, preset_id: UUID) -> None:
    try:
        store.menu_presets.get(preset_id)
    except NotFoundError as exc:
        raise ValidationError(f"Schedule references unknown preset {preset_id}") from exc


def validate_window(start_time: datetime, end_time: datetime) -> None:
    if as_utc(end_time) <= as_utc(start_time):
        raise ValidationError("End time must be after start time")


def check_schedule_conflicts(
    store: EntityStore,
    schedule: MenuSchedule,
) -> List[MenuSchedule]:
    """
    Non-terminal schedules whose window overlaps ``schedule``.

    Used to warn before a schedule is saved; the engine makes the binding
    decision at activation time.
    """
    live = store.menu_schedules.find_by(lambda s: not s.status.is_terminal)
    return find_all_conflicts(schedule, live)


def upcoming_schedules(
    store: EntityStore,
    now: datetime,
    limit: Optional[int] = None,
) -> List[MenuSchedule]:
    """Pending schedules that start after ``now``, soonest first."""
    now = as_utc(now)
    pending = store.menu_schedules.find_by(
        lambda s: s.status is ScheduleStatus.PENDING and s.start_time > now
    )
    pending.sort(key=lambda s: s.start_time)
    return pending[:limit] if limit is not None else pending
