# zeit/interfaces/abc.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Union

from zeit.interfaces.types import TimerCallback, TimerHandle


class AbstractClock(ABC):
    """
    Contract for every time source the scheduler runs against.

    Runtime Invariants:
    - duration_until(time_in(d)) == d, within clock resolution
    - A timer fires at most once
    - Clearing an unknown, fired or cleared timer is a no-op
    """

    @abstractmethod
    def now(self) -> datetime: ...

    @abstractmethod
    def set_timer(self, callback: TimerCallback, duration: timedelta) -> TimerHandle: ...

    @abstractmethod
    def clear_timer(self, handle: TimerHandle) -> None: ...

    def time_in(self, duration: timedelta) -> datetime:
        """Return the instant ``duration`` from now."""
        return self.now() + duration

    def duration_until(self, time: datetime) -> timedelta:
        """Return the duration between now and ``time`` (negative if it has passed)."""
        return time - self.now()

    def number_of_milliseconds_as_duration(self, milliseconds: Union[int, float]) -> timedelta:
        """Convert a millisecond count into this clock's duration type."""
        return timedelta(milliseconds=milliseconds)
