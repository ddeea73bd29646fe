# zeit/core/state.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import copy
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from zeit.interfaces.types import Callback, PostPredicate, PrePredicate, ScheduleID, TimerHandle


class RepeatMode(Enum):
    """How the next invocation of a repeating schedule is timed."""

    NONE = "none"
    FIXED_INTERVAL = "fixed_interval"  # from the start of the previous invocation
    AFTER_COMPLETION = "after_completion"  # from the settlement of the previous invocation


def always(state) -> bool:
    """Default pre-predicate: every tick may run."""
    return True


def never(error, result) -> bool:
    """Default post-predicate: no outcome stops the schedule."""
    return False


@dataclass(frozen=True)
class ScheduleConfiguration:
    """
    Immutable set of rules for one schedule, produced by ScheduleBuilder.start().
    """

    callback: Callback
    name: Optional[str] = None
    initial_delay: timedelta = timedelta(0)
    repeat_mode: RepeatMode = RepeatMode.NONE
    repeat_interval: Optional[timedelta] = None
    invocation_limit: Optional[int] = None
    pre_predicate: PrePredicate = always
    post_predicate: PostPredicate = never

    @property
    def repeats(self) -> bool:
        return self.repeat_mode is not RepeatMode.NONE


@dataclass
class ScheduleState:
    """
    Mutable record the scheduler keeps for each active schedule.

    Only the scheduler mutates it; everything handed to callers is a snapshot().
    """

    id: ScheduleID
    creation_time: datetime
    name: Optional[str] = None
    repeat_mode: RepeatMode = RepeatMode.NONE
    repeat_interval: Optional[timedelta] = None
    initial_delay: timedelta = timedelta(0)
    invocations_left: Optional[int] = None
    invocation_count: int = 0
    latest_start_time: Optional[datetime] = None
    latest_end_time: Optional[datetime] = None
    next_trigger_time: Optional[datetime] = None
    timer_handle: Optional[TimerHandle] = None

    @classmethod
    def from_configuration(
        cls, schedule_id: ScheduleID, config: ScheduleConfiguration, creation_time: datetime
    ) -> "ScheduleState":
        return cls(
            id=schedule_id,
            creation_time=creation_time,
            name=config.name,
            repeat_mode=config.repeat_mode,
            repeat_interval=config.repeat_interval,
            initial_delay=config.initial_delay,
            invocations_left=config.invocation_limit,
        )

    @property
    def exhausted(self) -> bool:
        """True once a limited schedule has no invocations left."""
        return self.invocations_left == 0

    def snapshot(self) -> "ScheduleState":
        """Return a copy that is safe to hand outside the scheduler."""
        return copy.copy(self)
