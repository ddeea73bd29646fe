"""
Core package: schedule rules, state, outcomes, events and validation.
"""

from .builder import ScheduleBuilder
from .errors import ClockError, ConfigurationError, ScheduleNotFoundError, SchedulerError
from .events import ScheduleEvent, ScheduleEventKind
from .outcome import Failure, Outcome, Success
from .state import RepeatMode, ScheduleConfiguration, ScheduleState

__all__ = [
    "ScheduleBuilder",
    "SchedulerError",
    "ConfigurationError",
    "ScheduleNotFoundError",
    "ClockError",
    "ScheduleEvent",
    "ScheduleEventKind",
    "Success",
    "Failure",
    "Outcome",
    "RepeatMode",
    "ScheduleConfiguration",
    "ScheduleState",
]
