"""Background schedule engine: evaluates every schedule once per tick."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional
from uuid import UUID

from menu_scheduler.domain.errors import LockCorruptedError, NotFoundError, StoreError
from menu_scheduler.domain.models import MenuSchedule, ScheduleStatus, as_utc, utc_now
from menu_scheduler.domain.store import EntityStore
from menu_scheduler.services.availability import apply_preset, changed_items
from menu_scheduler.services.conflicts import conflict_message, find_conflict
from menu_scheduler.services.recurrence import advance_after_execution

_logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class ScheduleExecutionError(Exception):
    """A due schedule could not be executed (e.g. its preset is gone)."""


@dataclass
class TickReport:
    """Outcome of one evaluation pass."""

    now: datetime
    executed: List[UUID] = field(default_factory=list)
    conflicted: List[UUID] = field(default_factory=list)
    failed: List[UUID] = field(default_factory=list)
    ended: List[UUID] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.executed or self.conflicted or self.failed or self.ended)

    def summary(self) -> str:
        return (
            f"executed={len(self.executed)} conflicted={len(self.conflicted)} "
            f"failed={len(self.failed)} ended={len(self.ended)}"
        )


class ScheduleEngine:
    """
    Drives every schedule through Pending -> Active -> Ended/Conflicted/Failed.

    ``tick()`` runs one evaluation synchronously and can be called from any
    thread. ``start()``/``stop()`` run it on a daemon thread every
    ``interval_seconds``; the first evaluation happens one interval after
    start, never immediately.
    """

    def __init__(
        self,
        store: EntityStore,
        interval_seconds: float = 60.0,
        clock: Optional[Clock] = None,
    ):
        """
        Initialize engine.

        Args:
            store: Entity store shared with every other caller
            interval_seconds: Time between ticks (default: 60)
            clock: Callable returning the current aware UTC datetime
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be greater than zero")
        self._store = store
        self._interval_s = interval_seconds
        self._clock = clock or utc_now
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._tick_count = 0

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def tick_count(self) -> int:
        return self._tick_count

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Start the background tick thread. Only the first call has an effect."""
        if self._thread is not None:
            _logger.warning("ScheduleEngine: start() called twice, ignoring")
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run_loop,
            name="ScheduleEngine",
            daemon=True,
        )
        self._thread.start()
        _logger.info("ScheduleEngine: started (interval=%ss)", self._interval_s)

    def stop(self, timeout: Optional[float] = None) -> None:
        """Stop the background thread and wait for the current tick to finish."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout if timeout is not None else self._interval_s + 5)
            self._thread = None
        _logger.info("ScheduleEngine: stopped")

    def join(self, timeout: Optional[float] = None) -> None:
        """Block until the background thread exits or ``timeout`` elapses."""
        thread = self._thread
        if thread is not None:
            thread.join(timeout)

    def _run_loop(self) -> None:
        """Background loop: sleep -> evaluate -> repeat."""
        while not self._stop_event.wait(timeout=self._interval_s):
            try:
                self.tick()
            except Exception:
                _logger.exception("ScheduleEngine: tick failed")

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    def tick(self, now: Optional[datetime] = None) -> TickReport:
        """
        Evaluate every schedule once.

        Per-schedule failures are recorded on the schedule and logged.
        Only LockCorruptedError escapes.
        """
        now = as_utc(now) if now is not None else self._clock()
        self._tick_count += 1
        report = TickReport(now=now)
        _logger.info("Scheduler tick: checking for due schedules")

        schedules = self._store.menu_schedules.list()
        # Schedules holding the menu right now; grows as due schedules execute
        holders = [
            s for s in schedules
            if s.status is ScheduleStatus.ACTIVE and not s.has_ended(now)
        ]

        for schedule in schedules:
            try:
                if schedule.is_due(now):
                    self._process_due(schedule, now, holders, report)
                elif schedule.status is ScheduleStatus.ACTIVE and schedule.has_ended(now):
                    self._end(schedule, now, report)
            except LockCorruptedError:
                raise
            except StoreError as exc:
                _logger.error("Failed to process schedule %s: %s", schedule, exc)

        if report.changed:
            _logger.info("Scheduler tick done: %s", report.summary())
        else:
            _logger.debug("Scheduler tick done: nothing to do")
        return report

    def _process_due(
        self,
        schedule: MenuSchedule,
        now: datetime,
        holders: List[MenuSchedule],
        report: TickReport,
    ) -> None:
        conflicting = find_conflict(schedule, holders)
        if conflicting is not None:
            _logger.warning(
                "Schedule %s conflicts with %s, skipping execution", schedule, conflicting
            )
            conflicted = schedule.transition(
                ScheduleStatus.CONFLICTED, now, conflict_message(conflicting)
            )
            self._store.menu_schedules.update(schedule.id, conflicted)
            report.conflicted.append(schedule.id)
            return

        _logger.info("Executing due schedule: %s", schedule)
        try:
            executed = self.execute(schedule, now)
        except LockCorruptedError:
            raise
        except (ScheduleExecutionError, StoreError) as exc:
            _logger.error("Failed to execute schedule %s: %s", schedule.id, exc)
            self._record_failure(schedule, now, str(exc))
            report.failed.append(schedule.id)
            return

        # Hold the window that just ran; a re-armed copy has already moved on
        holders.append(schedule.transition(ScheduleStatus.ACTIVE, now))
        report.executed.append(schedule.id)
        if executed.status is ScheduleStatus.ENDED:
            report.ended.append(schedule.id)

    def execute(self, schedule: MenuSchedule, now: datetime) -> MenuSchedule:
        """
        Apply the schedule's preset to every menu item and advance its timing.

        The schedule is persisted as Active before items change so an
        interrupted pass is visible. Returns the schedule as finally stored.

        Raises:
            ScheduleExecutionError: If the referenced preset no longer exists
            StoreError: If a store operation fails
        """
        active = schedule.transition(ScheduleStatus.ACTIVE, now)
        self._store.menu_schedules.update(schedule.id, active)

        try:
            preset = self._store.menu_presets.get(schedule.preset_id)
        except NotFoundError as exc:
            raise ScheduleExecutionError(
                f"Preset with id {schedule.preset_id} not found for schedule {schedule.id}"
            ) from exc

        items = self._store.menu_items.list()
        updated = apply_preset(items, preset)
        changes = changed_items(items, updated)
        if changes:
            self._store.menu_items.replace_many(changes)
        _logger.debug(
            "Preset %s applied: %d items, %d changed", preset.name, len(updated), len(changes)
        )

        final = advance_after_execution(active, now)
        self._store.menu_schedules.update(schedule.id, final)
        _logger.info(
            "Successfully executed schedule %s -> %s", schedule, final.status.value
        )
        return final

    def _end(self, schedule: MenuSchedule, now: datetime, report: TickReport) -> None:
        _logger.info("Active schedule %s has ended, setting to Ended", schedule)
        ended = schedule.transition(ScheduleStatus.ENDED, now)
        self._store.menu_schedules.update(schedule.id, ended)
        report.ended.append(schedule.id)

    def _record_failure(self, schedule: MenuSchedule, now: datetime, message: str) -> None:
        failed = schedule.transition(ScheduleStatus.FAILED, now, message)
        try:
            self._store.menu_schedules.update(schedule.id, failed)
        except LockCorruptedError:
            raise
        except StoreError as exc:
            _logger.error("Failed to update schedule %s status to Failed: %s", schedule.id, exc)
