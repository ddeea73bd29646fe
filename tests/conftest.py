# tests/conftest.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

import asyncio
from collections import defaultdict
from typing import Awaitable, Callable, Dict, List

import pytest

from zeit.core.events import ScheduleEvent, ScheduleEventKind
from zeit.runtime.clock import StubClock
from zeit.runtime.scheduler import Scheduler


def pytest_configure(config):
    """Register custom marks."""
    config.addinivalue_line("markers", "property: mark test as a property-based test")


class EventCapture:
    """Records every event a scheduler publishes, grouped by kind."""

    def __init__(self, scheduler: Scheduler) -> None:
        self.captured: Dict[str, List[ScheduleEvent]] = defaultdict(list)
        self.ordered: List[ScheduleEvent] = []
        for kind in ScheduleEventKind:
            scheduler.on(kind, self._record)

    def _record(self, event: ScheduleEvent) -> None:
        self.captured[event.kind.value].append(event)
        self.ordered.append(event)

    def count(self, kind: str) -> int:
        return len(self.captured[kind])

    def kinds(self) -> List[str]:
        return [event.kind.value for event in self.ordered]


@pytest.fixture
def clock() -> StubClock:
    """A virtual clock at the Unix epoch with a one second tick."""
    return StubClock()


@pytest.fixture
def scheduler(clock: StubClock) -> Scheduler:
    return Scheduler(clock)


@pytest.fixture
def events(scheduler: Scheduler) -> EventCapture:
    return EventCapture(scheduler)


@pytest.fixture
def settle() -> Callable[..., Awaitable[None]]:
    """Let pending tasks and their done callbacks run."""

    async def _settle(rounds: int = 5) -> None:
        for _ in range(rounds):
            await asyncio.sleep(0)

    return _settle
