"""Recurrence arithmetic and post-execution timing for schedules."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

import pandas as pd

from menu_scheduler.domain.models import MenuSchedule, ScheduleRecurrence, ScheduleStatus

NEXT_OCCURRENCE_PAST_END = "Next occurrence is after schedule end time"
NO_NEXT_OCCURRENCE = "Cannot calculate next occurrence"


def add_one_month(moment: datetime) -> Optional[datetime]:
    """
    Advance ``moment`` by one calendar month, keeping the time of day.

    Month-end dates clamp to the last valid day (Jan 31 -> Feb 28/29).
    Returns None when the result falls outside the representable range.
    """
    try:
        advanced = pd.Timestamp(moment) + pd.DateOffset(months=1)
    except (OverflowError, pd.errors.OutOfBoundsDatetime, ValueError):
        return None
    return advanced.to_pydatetime()


def next_occurrence(schedule: MenuSchedule) -> Optional[datetime]:
    """
    Next start time of a recurring schedule.

    Daily and Weekly add a fixed number of days, Monthly is calendar-aware.
    Custom schedules have no next occurrence.
    """
    recurrence = schedule.recurrence
    try:
        if recurrence is ScheduleRecurrence.DAILY:
            return schedule.start_time + timedelta(days=1)
        if recurrence is ScheduleRecurrence.WEEKLY:
            return schedule.start_time + timedelta(weeks=1)
    except OverflowError:
        return None
    if recurrence is ScheduleRecurrence.MONTHLY:
        return add_one_month(schedule.start_time)
    return None


def advance_after_execution(schedule: MenuSchedule, now: datetime) -> MenuSchedule:
    """
    Status a schedule takes after a successful execution pass at ``now``.

    - end_time reached: Ended
    - recurring with a next occurrence before end_time: back to Pending at that occurrence
    - recurring without one: Ended with an explanatory message
    - Custom: stays Active until its end_time passes
    """
    if schedule.has_ended(now):
        return schedule.transition(ScheduleStatus.ENDED, now)

    if not schedule.recurrence.is_recurring:
        return schedule.transition(ScheduleStatus.ACTIVE, now)

    next_start = next_occurrence(schedule)
    if next_start is None:
        return schedule.transition(ScheduleStatus.ENDED, now, NO_NEXT_OCCURRENCE)
    # Strictly before end_time so the re-armed window stays non-empty
    if next_start < schedule.end_time:
        return schedule.transition(ScheduleStatus.PENDING, now, start_time=next_start)
    return schedule.transition(ScheduleStatus.ENDED, now, NEXT_OCCURRENCE_PAST_END)
