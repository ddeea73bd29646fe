# zeit/runtime/clock.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import asyncio
import itertools
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Set

from zeit.core.errors import ClockError
from zeit.interfaces.abc import AbstractClock
from zeit.interfaces.types import TimerCallback, TimerHandle

logger = logging.getLogger(__name__)

EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)
DEFAULT_TICK = timedelta(seconds=1)
_ZERO = timedelta(0)


def _ensure_duration(value, what: str = "duration") -> timedelta:
    if not isinstance(value, timedelta):
        raise ClockError(f"{value!r} is not a {what}")
    return value


def _ensure_time(value) -> datetime:
    if not isinstance(value, datetime):
        raise ClockError(f"{value!r} is not a datetime")
    return value


class RealClock(AbstractClock):
    """
    Wall-clock time in UTC with timers backed by an asyncio event loop.

    Timers are armed on the loop given at construction or, failing that, on
    the loop running when set_timer() is called.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop
        self._timers: Dict[int, asyncio.TimerHandle] = {}
        self._handles = itertools.count(1)

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def set_timer(self, callback: TimerCallback, duration: timedelta) -> TimerHandle:
        """
        Run ``callback`` once after ``duration``.

        :raises ClockError: If no event loop is available.
        """
        delay = max(_ensure_duration(duration), _ZERO).total_seconds()
        loop = self._resolve_loop()
        handle = next(self._handles)

        def fire() -> None:
            self._timers.pop(handle, None)
            callback()

        self._timers[handle] = loop.call_later(delay, fire)
        return handle

    def clear_timer(self, handle: TimerHandle) -> None:
        timer = self._timers.pop(handle, None)
        if timer is not None:
            timer.cancel()

    @property
    def pending_count(self) -> int:
        return len(self._timers)

    def _resolve_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            return self._loop
        try:
            return asyncio.get_running_loop()
        except RuntimeError:
            raise ClockError("RealClock timers need a running event loop or an explicit loop") from None


@dataclass(frozen=True)
class PendingTimer:
    """A timer armed on a StubClock that has not fired or been cleared."""

    handle: int
    due: datetime
    callback: TimerCallback


class StubClock(AbstractClock):
    """
    Manually driven clock for deterministic tests.

    Time only moves when tick() is called, when now() is given a new time, or
    on every now() read while implicit ticking is on. Timers never fire on
    their own; tick() fires those that come due and trigger_all() fires every
    pending timer regardless of its due time.
    """

    def __init__(
        self,
        current: Optional[datetime] = None,
        tick_size: Optional[timedelta] = None,
        implicit_tick: bool = False,
    ) -> None:
        """
        :param current: Starting time; the Unix epoch (UTC) by default.
        :param tick_size: Default step for tick() and implicit ticks; one second by default.
        :param implicit_tick: Advance time by ``tick_size`` on every now() read.
        """
        self._current = EPOCH if current is None else _ensure_time(current)
        self._tick_size = DEFAULT_TICK if tick_size is None else _ensure_duration(tick_size)
        self._implicit_tick = bool(implicit_tick)
        self._pending: List[PendingTimer] = []
        self._handles = itertools.count(1)
        self._ticking = False
        self._deferred: Set[int] = set()

    def now(self, time: Optional[datetime] = None) -> datetime:
        """
        Return the current time, or set it first when ``time`` is given.
        """
        if time is not None:
            self._current = _ensure_time(time)
        elif self._implicit_tick:
            self._current += self._tick_size
        return self._current

    def tick(self, duration: Optional[timedelta] = None) -> datetime:
        """
        Advance time by ``duration`` (or the tick size), firing timers as they
        come due.

        Due timers fire earliest first, registration order breaking ties, and
        now() reports each one's due time while its callback runs. Timers armed
        by those callbacks fire too if they fall due later inside the window;
        those due at the instant they were armed wait for the next tick.

        :return: The new current time.
        """
        step = self._tick_size if duration is None else _ensure_duration(duration)
        target = self._current + step
        self._ticking = True
        try:
            while True:
                timer = self._next_due(target)
                if timer is None:
                    break
                self._pending.remove(timer)
                if timer.due > self._current:
                    self._current = timer.due
                logger.debug("StubClock firing timer %s due at %s", timer.handle, timer.due)
                timer.callback()
        finally:
            self._ticking = False
            self._deferred.clear()
        self._current = target
        return self._current

    def trigger_all(self) -> List[int]:
        """
        Fire every timer pending at call time, once each, in registration order.

        Each timer is removed before its callback runs. Timers armed during the
        pass wait for the next one; timers cleared during the pass are skipped.
        Time does not move.

        :return: Handles of the timers that fired.
        """
        fired: List[int] = []
        for timer in list(self._pending):
            if timer not in self._pending:
                continue
            self._pending.remove(timer)
            fired.append(timer.handle)
            timer.callback()
        return fired

    def tick_size(self, duration: Optional[timedelta] = None) -> timedelta:
        """Read, or set then read, the default tick."""
        if duration is not None:
            self._tick_size = _ensure_duration(duration)
        return self._tick_size

    def implicit_tick(self, flag: Optional[bool] = None) -> bool:
        """Read, or set then read, the implicit tick flag."""
        if flag is not None:
            self._implicit_tick = bool(flag)
        return self._implicit_tick

    def set_timer(self, callback: TimerCallback, duration: timedelta) -> TimerHandle:
        due = self._current + max(_ensure_duration(duration), _ZERO)
        timer = PendingTimer(handle=next(self._handles), due=due, callback=callback)
        self._pending.append(timer)
        if self._ticking and due <= self._current:
            self._deferred.add(timer.handle)
        return timer.handle

    def clear_timer(self, handle: TimerHandle) -> None:
        self._pending = [timer for timer in self._pending if timer.handle != handle]

    def pending_timers(self) -> List[PendingTimer]:
        """Pending timers in registration order."""
        return list(self._pending)

    def _next_due(self, deadline: datetime) -> Optional[PendingTimer]:
        due = [timer for timer in self._pending if timer.due <= deadline and timer.handle not in self._deferred]
        if not due:
            return None
        # min() keeps the first of equal keys, which is the earliest registered
        return min(due, key=lambda timer: timer.due)
