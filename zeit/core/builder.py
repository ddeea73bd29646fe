# zeit/core/builder.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional, Union

from zeit.core.errors import ConfigurationError
from zeit.core.state import RepeatMode, ScheduleConfiguration
from zeit.core.validations import Validator
from zeit.interfaces.abc import AbstractClock
from zeit.interfaces.types import Callback, PostPredicate, PrePredicate, ScheduleID

DelayLike = Union[timedelta, datetime, int, float]
IntervalLike = Union[timedelta, int, float]


class ScheduleBuilder:
    """Accumulates the rules for one schedule.

    Every fluent method records a single setting and returns the builder, so
    calls chain::

        scheduler.execute(poll).named("poll").after(500).and_repeat_after(1000).start()

    Nothing is armed until start(), which validates the rules, freezes them into
    a ScheduleConfiguration and hands that to the scheduler. A builder starts
    at most once.

    Numbers given as delays or intervals are milliseconds and are converted
    through the clock.
    """

    def __init__(
        self,
        clock: AbstractClock,
        callback: Callback,
        submit: Callable[[ScheduleConfiguration], ScheduleID],
        validator: Optional[Validator] = None,
    ) -> None:
        """
        :param clock: Clock used to convert milliseconds and absolute times.
        :param callback: The callable to schedule.
        :param submit: Receives the validated configuration and returns the schedule id.
        :param validator: Optional validator; a default one is used otherwise.
        """
        self._clock = clock
        self._submit = submit
        self._validator = validator or Validator()
        self._settings: Dict[str, Any] = {"callback": callback}
        self._started = False

    @property
    def started(self) -> bool:
        return self._started

    def named(self, name: str) -> "ScheduleBuilder":
        return self._set(name=name)

    def after(self, delay: DelayLike) -> "ScheduleBuilder":
        """
        Delay the first invocation.

        :param delay: A duration, a number of milliseconds or an absolute time.
                      Absolute times already in the past mean "immediately".
        """
        if isinstance(delay, datetime):
            return self.at(delay)
        return self._set(initial_delay=self._as_duration(delay))

    def at(self, time: datetime) -> "ScheduleBuilder":
        """Run the first invocation at an absolute time."""
        if not isinstance(time, datetime):
            raise ConfigurationError(f"at() expects a datetime, got {time!r}.")
        return self._set(initial_delay=max(self._clock.duration_until(time), timedelta(0)))

    def and_repeat_after(self, interval: IntervalLike) -> "ScheduleBuilder":
        """Repeat ``interval`` after each invocation settles (fixed delay)."""
        return self._set(repeat_mode=RepeatMode.AFTER_COMPLETION, repeat_interval=self._as_duration(interval))

    def at_fixed_interval_of(self, interval: IntervalLike) -> "ScheduleBuilder":
        """Repeat ``interval`` after each invocation starts (fixed rate)."""
        return self._set(repeat_mode=RepeatMode.FIXED_INTERVAL, repeat_interval=self._as_duration(interval))

    def once(self) -> "ScheduleBuilder":
        return self.exactly(1)

    def exactly(self, times: int) -> "ScheduleBuilder":
        return self._set(invocation_limit=times)

    def whilst(self, predicate: PrePredicate) -> "ScheduleBuilder":
        """Only run while ``predicate(state)`` holds; checked before each invocation."""
        return self._set(pre_predicate=predicate)

    def until(self, predicate: PostPredicate) -> "ScheduleBuilder":
        """Stop once ``predicate(error, result)`` holds; checked after each invocation."""
        return self._set(post_predicate=predicate)

    def build(self) -> ScheduleConfiguration:
        """
        Freeze and validate the current settings without starting.

        :raises ConfigurationError: If the settings are inconsistent.
        """
        config = ScheduleConfiguration(**self._settings)
        self._validator.validate_configuration(config)
        return config

    def start(self) -> ScheduleID:
        """
        Validate, submit to the scheduler and return the new schedule id.

        :raises ConfigurationError: If the settings are inconsistent or the
                                    builder was already started.
        """
        self._ensure_open()
        config = self.build()
        self._started = True
        return self._submit(config)

    def _set(self, **settings: Any) -> "ScheduleBuilder":
        self._ensure_open()
        self._settings.update(settings)
        return self

    def _ensure_open(self) -> None:
        if self._started:
            raise ConfigurationError("Schedule has already been started; create a new builder with execute().")

    def _as_duration(self, value: Any) -> Any:
        # Anything unrecognised is kept as-is for the validator to reject.
        if isinstance(value, timedelta):
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return self._clock.number_of_milliseconds_as_duration(value)
        return value
