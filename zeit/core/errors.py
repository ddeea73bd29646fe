# zeit/core/errors.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
from typing import Optional


class SchedulerError(Exception):
    """
    Base exception class for errors raised by the scheduling library.
    """


class ConfigurationError(SchedulerError):
    """
    Raised when a schedule is started with an invalid combination of rules.
    """


class ScheduleNotFoundError(SchedulerError):
    """
    Raised by strict lookups when a schedule id is not in the active set.
    """

    def __init__(self, message: str, schedule_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.schedule_id = schedule_id


class ClockError(SchedulerError):
    """
    Raised when a clock is given a value of the wrong type or cannot arm a timer.
    """
