# zeit/runtime/scheduler.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, Optional, Set, Union

from zeit.core.builder import ScheduleBuilder
from zeit.core.errors import ConfigurationError, ScheduleNotFoundError
from zeit.core.events import ScheduleEvent, ScheduleEventKind
from zeit.core.hooks import HookManager
from zeit.core.outcome import Outcome, invoke_and_capture
from zeit.core.state import RepeatMode, ScheduleConfiguration, ScheduleState
from zeit.core.validations import Validator
from zeit.interfaces.abc import AbstractClock
from zeit.interfaces.protocols import ScheduleListener
from zeit.interfaces.types import Callback, EventHandler, IdFactory, ScheduleID

logger = logging.getLogger(__name__)

_ZERO = timedelta(0)


def _new_schedule_id() -> ScheduleID:
    return str(uuid.uuid4())


@dataclass(eq=False)
class _ScheduleEntry:
    """Pairs a schedule's frozen rules with its live state."""

    config: ScheduleConfiguration
    state: ScheduleState


class Scheduler:
    """
    Runs schedules against a clock.

    Each schedule moves Armed -> Running -> Armed | Terminated. On every timer
    fire the scheduler checks the pre-predicate and the invocation budget,
    runs the callback, publishes start/finish/error events and decides from the
    repeat mode, the post-predicate and the remaining budget whether to arm the
    next timer or drop the schedule.

    FIXED_INTERVAL schedules arm the next timer as soon as an invocation starts,
    so the rate is independent of how long the callback takes.
    AFTER_COMPLETION schedules arm it only once the invocation has settled.

    All work happens on the thread that drives the clock; no locks are taken.
    Callback failures never escape: they are reported as error events.
    """

    def __init__(
        self,
        clock: AbstractClock,
        id_factory: Optional[IdFactory] = None,
        validator: Optional[Validator] = None,
    ) -> None:
        """
        :param clock: Source of time and timers.
        :param id_factory: Produces schedule ids; uuid4 strings by default.
        :param validator: Checks configurations on start().
        """
        self._clock = clock
        self._id_factory = id_factory or _new_schedule_id
        self._validator = validator or Validator()
        self._hooks = HookManager()
        self._active: Dict[ScheduleID, _ScheduleEntry] = {}
        self._in_flight: Set[asyncio.Future] = set()

    @property
    def clock(self) -> AbstractClock:
        return self._clock

    def __len__(self) -> int:
        return len(self._active)

    def __contains__(self, schedule_id: object) -> bool:
        return schedule_id in self._active

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def execute(self, callback: Callback) -> ScheduleBuilder:
        """
        Begin describing a schedule for ``callback``. Call start() on the
        returned builder to arm it.
        """
        return ScheduleBuilder(self._clock, callback, self._add_schedule, self._validator)

    def active_schedule(self, schedule_id: ScheduleID) -> Optional[ScheduleState]:
        """Snapshot of an active schedule, or None if it is not active."""
        entry = self._active.get(schedule_id)
        return entry.state.snapshot() if entry is not None else None

    def active_schedules(self) -> Dict[ScheduleID, ScheduleState]:
        """Snapshots of every active schedule keyed by id."""
        return {schedule_id: entry.state.snapshot() for schedule_id, entry in self._active.items()}

    def cancel(self, schedule_id: ScheduleID, strict: bool = False) -> Optional[ScheduleState]:
        """
        Clear a schedule's timer and drop it from the active set.

        A callback already in flight still settles and reports its event, but
        the schedule is never rearmed.

        :param schedule_id: Id returned by start().
        :param strict: Raise instead of returning None for unknown ids.
        :return: Snapshot of the removed schedule as it was before cancelling, or None.
        :raises ScheduleNotFoundError: If ``strict`` and the id is not active.
        """
        entry = self._active.get(schedule_id)
        if entry is None:
            if strict:
                raise ScheduleNotFoundError(f"No active schedule with id {schedule_id!r}", schedule_id)
            return None
        logger.debug("Cancelling schedule %s (%s)", schedule_id, entry.state.name)
        last_known = entry.state.snapshot()
        self._terminate(entry)
        return last_known

    def cancel_all(self) -> Dict[ScheduleID, ScheduleState]:
        """Cancel every active schedule and return their snapshots keyed by id."""
        return {schedule_id: self.cancel(schedule_id) for schedule_id in list(self._active)}

    def on(self, kind: Union[ScheduleEventKind, str], handler: EventHandler) -> EventHandler:
        """
        Subscribe ``handler`` to "start", "finish" or "error" events.

        :return: The handler, so this can be used as a decorator factory.
        :raises ValueError: If ``kind`` is not an event kind.
        """
        self._hooks.register_handler(kind, handler)
        return handler

    def off(self, kind: Union[ScheduleEventKind, str], handler: EventHandler) -> bool:
        """Unsubscribe ``handler``; returns False if it was not subscribed."""
        return self._hooks.unregister_handler(kind, handler)

    def add_listener(self, listener: ScheduleListener) -> None:
        self._hooks.register_listener(listener)

    def remove_listener(self, listener: ScheduleListener) -> None:
        self._hooks.unregister_listener(listener)

    # ------------------------------------------------------------------
    # Internal machinery
    # ------------------------------------------------------------------
    def _add_schedule(self, config: ScheduleConfiguration) -> ScheduleID:
        schedule_id = self._id_factory()
        if schedule_id in self._active:
            raise ConfigurationError(f"Schedule id {schedule_id!r} is already active")

        entry = _ScheduleEntry(config, ScheduleState.from_configuration(schedule_id, config, self._clock.now()))
        self._active[schedule_id] = entry
        self._arm(entry, config.initial_delay)
        logger.debug(
            "Started schedule %s (%s): delay=%s repeat=%s interval=%s limit=%s",
            schedule_id,
            config.name,
            config.initial_delay,
            config.repeat_mode.value,
            config.repeat_interval,
            config.invocation_limit,
        )
        return schedule_id

    def _is_active(self, entry: _ScheduleEntry) -> bool:
        return self._active.get(entry.state.id) is entry

    def _arm(self, entry: _ScheduleEntry, delay: timedelta) -> None:
        state = entry.state
        state.next_trigger_time = self._clock.time_in(delay)
        state.timer_handle = self._clock.set_timer(lambda: self._fire(entry), delay)
        logger.debug("Armed schedule %s for %s (timer %s)", state.id, state.next_trigger_time, state.timer_handle)

    def _terminate(self, entry: _ScheduleEntry) -> None:
        state = entry.state
        if state.timer_handle is not None:
            self._clock.clear_timer(state.timer_handle)
        state.timer_handle = None
        state.next_trigger_time = None
        if self._is_active(entry):
            del self._active[state.id]
            logger.debug("Schedule %s terminated after %d invocation(s)", state.id, state.invocation_count)

    def _fire(self, entry: _ScheduleEntry) -> None:
        if not self._is_active(entry):
            return
        config, state = entry.config, entry.state
        state.timer_handle = None

        if state.exhausted or not self._pre_predicate_allows(entry):
            self._terminate(entry)
            return

        state.latest_start_time = self._clock.now()
        state.invocation_count += 1

        if config.repeat_mode is RepeatMode.FIXED_INTERVAL:
            budget_left = state.invocations_left is None or state.invocations_left > 0
            if budget_left and self._may_continue_before_run(entry):
                self._arm(entry, config.repeat_interval or _ZERO)

        if state.invocations_left is not None:
            state.invocations_left -= 1

        self._emit(ScheduleEventKind.START, state)
        future = invoke_and_capture(config.callback, lambda outcome: self._settle(entry, outcome))
        if future is not None:
            self._in_flight.add(future)
            future.add_done_callback(self._in_flight.discard)

    def _settle(self, entry: _ScheduleEntry, outcome: Outcome) -> None:
        config, state = entry.config, entry.state
        state.latest_end_time = self._clock.now()
        if outcome.ok:
            self._emit(ScheduleEventKind.FINISH, state, result=outcome.result)
        else:
            logger.debug("Schedule %s callback failed: %r", state.id, outcome.error)
            self._emit(ScheduleEventKind.ERROR, state, error=outcome.error)

        if not self._is_active(entry):
            return
        if self._should_terminate(entry, outcome):
            self._terminate(entry)
        elif config.repeat_mode is RepeatMode.FIXED_INTERVAL:
            if state.timer_handle is None:
                # no next run was armed when this invocation started
                self._terminate(entry)
        else:
            # a limited schedule without a repeat mode runs back to back
            self._arm(entry, config.repeat_interval or _ZERO)

    def _should_terminate(self, entry: _ScheduleEntry, outcome: Outcome) -> bool:
        config, state = entry.config, entry.state
        return (
            not self._pre_predicate_allows(entry)
            or self._post_predicate_stops(entry, outcome.error, outcome.result)
            or state.exhausted
            or (state.invocations_left is None and not config.repeats)
        )

    def _pre_predicate_allows(self, entry: _ScheduleEntry) -> bool:
        try:
            return bool(entry.config.pre_predicate(entry.state.snapshot()))
        except Exception:
            logger.exception("whilst() predicate of schedule %s raised; stopping", entry.state.id)
            return False

    def _may_continue_before_run(self, entry: _ScheduleEntry) -> bool:
        """until() asked with no outcome yet; a raising predicate does not block arming."""
        try:
            return not entry.config.post_predicate(None, None)
        except Exception as e:
            logger.debug("until() predicate of schedule %s raised before any outcome: %r", entry.state.id, e)
            return True

    def _post_predicate_stops(self, entry: _ScheduleEntry, error: Optional[BaseException], result: Any) -> bool:
        try:
            return bool(entry.config.post_predicate(error, result))
        except Exception:
            logger.exception("until() predicate of schedule %s raised; stopping", entry.state.id)
            return True

    def _emit(
        self,
        kind: ScheduleEventKind,
        state: ScheduleState,
        error: Optional[BaseException] = None,
        result: Any = None,
    ) -> None:
        self._hooks.emit(ScheduleEvent(kind=kind, state=state.snapshot(), error=error, result=result))
