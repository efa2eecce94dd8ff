"""Tests for service layer (conflicts, recurrence, availability, validation)."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from menu_scheduler.domain.errors import ValidationError
from menu_scheduler.domain.models import MenuSchedule, ScheduleStatus
from menu_scheduler.services.availability import apply_preset, changed_items
from menu_scheduler.services.conflicts import (
    conflict_message,
    find_all_conflicts,
    find_conflict,
    windows_overlap,
)
from menu_scheduler.services.recurrence import (
    NEXT_OCCURRENCE_PAST_END,
    add_one_month,
    advance_after_execution,
    next_occurrence,
)
from menu_scheduler.services.validation import (
    check_schedule_conflicts,
    upcoming_schedules,
    validate_preset_exists,
    validate_preset_items,
    validate_window,
)

UTC = timezone.utc


def _schedule(start, end, recurrence="Custom", name="S", status=ScheduleStatus.PENDING):
    return MenuSchedule(
        preset_id=uuid4(),
        name=name,
        start_time=start,
        end_time=end,
        recurrence=recurrence,
        status=status,
    )


def test_windows_overlap_closed_intervals(base_time):
    hour = timedelta(hours=1)

    assert windows_overlap(base_time, base_time + hour, base_time + hour / 2, base_time + 2 * hour)
    # Touching endpoints count
    assert windows_overlap(base_time, base_time + hour, base_time + hour, base_time + 2 * hour)
    assert not windows_overlap(
        base_time, base_time + hour, base_time + hour + timedelta(seconds=1), base_time + 2 * hour
    )


def test_find_conflict_skips_self(base_time):
    s1 = _schedule(base_time, base_time + timedelta(hours=2), name="S1")
    s2 = _schedule(base_time + timedelta(hours=1), base_time + timedelta(hours=3), name="S2")
    s3 = _schedule(base_time + timedelta(days=1), base_time + timedelta(days=1, hours=1), name="S3")

    assert find_conflict(s1, [s1]) is None
    assert find_conflict(s2, [s1, s2, s3]) is s1
    assert find_all_conflicts(s3, [s1, s2]) == []
    assert "S1" in conflict_message(s1)
    assert str(s1.id) in conflict_message(s1)


def test_next_occurrence_daily_weekly(base_time):
    daily = _schedule(base_time, base_time + timedelta(days=10), "Daily")
    weekly = _schedule(base_time, base_time + timedelta(days=30), "Weekly")
    custom = _schedule(base_time, base_time + timedelta(days=1))

    assert next_occurrence(daily) == base_time + timedelta(days=1)
    assert next_occurrence(weekly) == base_time + timedelta(days=7)
    assert next_occurrence(custom) is None


def test_add_one_month_clamps_to_month_end():
    jan31 = datetime(2025, 1, 31, 9, 30, tzinfo=UTC)
    assert add_one_month(jan31) == datetime(2025, 2, 28, 9, 30, tzinfo=UTC)

    leap = datetime(2024, 1, 31, 9, 30, tzinfo=UTC)
    assert add_one_month(leap) == datetime(2024, 2, 29, 9, 30, tzinfo=UTC)

    mid = datetime(2025, 3, 15, 0, 0, tzinfo=UTC)
    assert add_one_month(mid) == datetime(2025, 4, 15, 0, 0, tzinfo=UTC)


def test_advance_daily_rearms(base_time):
    daily = _schedule(base_time, base_time + timedelta(days=10), "Daily", status=ScheduleStatus.ACTIVE)

    after = advance_after_execution(daily, base_time)

    assert after.status is ScheduleStatus.PENDING
    assert after.start_time == base_time + timedelta(days=1)
    assert after.end_time == daily.end_time


def test_advance_monthly_rearms_on_month_end():
    start = datetime(2025, 1, 31, 12, 0, tzinfo=UTC)
    monthly = _schedule(start, datetime(2025, 6, 1, tzinfo=UTC), "Monthly", status=ScheduleStatus.ACTIVE)

    after = advance_after_execution(monthly, start)

    assert after.status is ScheduleStatus.PENDING
    assert after.start_time == datetime(2025, 2, 28, 12, 0, tzinfo=UTC)


def test_advance_ends_when_next_occurrence_past_end(base_time):
    weekly = _schedule(base_time, base_time + timedelta(days=3), "Weekly", status=ScheduleStatus.ACTIVE)

    after = advance_after_execution(weekly, base_time)

    assert after.status is ScheduleStatus.ENDED
    assert after.error_message == NEXT_OCCURRENCE_PAST_END


def test_advance_next_occurrence_equal_to_end_ends(base_time):
    daily = _schedule(base_time, base_time + timedelta(days=1), "Daily", status=ScheduleStatus.ACTIVE)

    assert advance_after_execution(daily, base_time).status is ScheduleStatus.ENDED


def test_advance_custom_stays_active(base_time):
    custom = _schedule(base_time, base_time + timedelta(hours=2), status=ScheduleStatus.ACTIVE)

    after = advance_after_execution(custom, base_time)

    assert after.status is ScheduleStatus.ACTIVE
    assert advance_after_execution(custom, base_time + timedelta(hours=2)).status is ScheduleStatus.ENDED


def test_apply_preset_is_full_replace(store, menu, make_preset):
    store.menu_items.update(menu["C"].id, menu["C"].model_copy(update={"is_available": True}))
    preset = make_preset("Lunch", [menu["A"], menu["B"]])
    items = store.menu_items.list()

    updated = apply_preset(items, preset)
    availability = {item.name: item.is_available for item in updated}

    assert availability == {"Burger": True, "Fries": True, "Latte": False}
    # Inputs untouched
    assert all(not item.is_available for item in items if item.name != "Latte")
    assert {item.name for item in changed_items(items, updated)} == {"Burger", "Fries", "Latte"}


def test_apply_empty_preset_disables_everything(store, menu, make_preset):
    preset = make_preset("Closed", [])

    updated = apply_preset(store.menu_items.list(), preset)

    assert not any(item.is_available for item in updated)


def test_validate_preset_items(store, menu):
    validate_preset_items(store, [menu["A"].id])

    missing = uuid4()
    with pytest.raises(ValidationError) as excinfo:
        validate_preset_items(store, [menu["A"].id, missing])
    assert str(missing) in str(excinfo.value)


def test_validate_preset_exists(store, menu, make_preset):
    preset = make_preset("Lunch", [menu["A"]])
    validate_preset_exists(store, preset.id)

    with pytest.raises(ValidationError):
        validate_preset_exists(store, uuid4())


def test_validate_window(base_time):
    validate_window(base_time, base_time + timedelta(minutes=1))
    with pytest.raises(ValidationError):
        validate_window(base_time, base_time)


def test_check_schedule_conflicts_ignores_terminal(store, menu, make_preset, make_schedule, base_time):
    preset = make_preset("Lunch", [menu["A"]])
    live = make_schedule(preset, base_time, base_time + timedelta(hours=2), name="Live")
    done = make_schedule(preset, base_time, base_time + timedelta(hours=2), name="Done")
    store.menu_schedules.update(done.id, done.transition(ScheduleStatus.ENDED, base_time))

    candidate = _schedule(base_time + timedelta(hours=1), base_time + timedelta(hours=3))

    assert [s.id for s in check_schedule_conflicts(store, candidate)] == [live.id]


def test_upcoming_schedules_sorted_and_limited(store, menu, make_preset, make_schedule, base_time):
    preset = make_preset("Lunch", [menu["A"]])
    later = make_schedule(preset, base_time + timedelta(days=2), base_time + timedelta(days=3), name="Later")
    sooner = make_schedule(preset, base_time + timedelta(days=1), base_time + timedelta(days=2), name="Sooner")
    make_schedule(preset, base_time - timedelta(hours=1), base_time + timedelta(hours=1), name="Started")

    upcoming = upcoming_schedules(store, base_time)

    assert [s.id for s in upcoming] == [sooner.id, later.id]
    assert [s.id for s in upcoming_schedules(store, base_time, limit=1)] == [sooner.id]
