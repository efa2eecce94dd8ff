"""Schedule engine: background evaluation of menu schedules."""

from .ticker import ScheduleEngine, ScheduleExecutionError, TickReport

__all__ = [
    "ScheduleEngine",
    "ScheduleExecutionError",
    "TickReport",
]
