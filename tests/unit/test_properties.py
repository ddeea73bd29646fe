# tests/unit/test_properties.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from datetime import timedelta

import pytest
from hypothesis import given
from hypothesis import strategies as st

from zeit.runtime.clock import StubClock
from zeit.runtime.scheduler import Scheduler

durations = st.timedeltas(min_value=timedelta(days=-3650), max_value=timedelta(days=3650))
intervals = st.integers(min_value=1, max_value=86_400_000).map(lambda ms: timedelta(milliseconds=ms))


@pytest.mark.property
@given(duration=durations)
def test_duration_until_inverts_time_in(duration: timedelta) -> None:
    clock = StubClock()
    assert clock.duration_until(clock.time_in(duration)) == duration


@pytest.mark.property
@given(limit=st.integers(min_value=1, max_value=25), repeat=st.sampled_from(["none", "fixed", "after"]))
def test_exactly_n_invokes_n_times(limit: int, repeat: str) -> None:
    clock = StubClock()
    scheduler = Scheduler(clock)
    calls = []
    builder = scheduler.execute(lambda: calls.append(clock.now())).exactly(limit)
    if repeat == "fixed":
        builder.at_fixed_interval_of(timedelta(seconds=1))
    elif repeat == "after":
        builder.and_repeat_after(timedelta(seconds=1))
    schedule_id = builder.start()

    for _ in range(limit):
        assert scheduler.active_schedule(schedule_id) is not None
        clock.trigger_all()

    assert len(calls) == limit
    assert scheduler.active_schedule(schedule_id) is None
    assert clock.pending_timers() == []


@pytest.mark.property
@given(interval=intervals, runs=st.integers(min_value=2, max_value=10))
def test_fixed_interval_start_gaps_equal_interval(interval: timedelta, runs: int) -> None:
    clock = StubClock()
    scheduler = Scheduler(clock)
    starts = []
    scheduler.on("start", lambda event: starts.append(event.state.latest_start_time))
    scheduler.execute(lambda: None).at_fixed_interval_of(interval).exactly(runs).start()

    clock.tick(interval * runs)

    assert len(starts) == runs
    assert all(later - earlier == interval for earlier, later in zip(starts, starts[1:]))


@pytest.mark.property
@given(interval=intervals, stop_after=st.integers(min_value=1, max_value=10))
def test_until_stops_right_after_matching_invocation(interval: timedelta, stop_after: int) -> None:
    clock = StubClock()
    scheduler = Scheduler(clock)
    calls = []

    def job():
        calls.append(clock.now())
        return len(calls)

    schedule_id = (
        scheduler.execute(job).and_repeat_after(interval).until(lambda error, result: result == stop_after).start()
    )
    clock.tick(interval * (stop_after + 5))

    assert len(calls) == stop_after
    assert scheduler.active_schedule(schedule_id) is None
    assert all(later - earlier == interval for earlier, later in zip(calls, calls[1:]))
