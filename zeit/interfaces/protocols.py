# zeit/interfaces/protocols.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from zeit.core.events import ScheduleEvent


@runtime_checkable
class ScheduleListener(Protocol):
    """
    Listener protocol for schedule lifecycle events.

    Methods:
        on_start(event): An invocation is about to run.
        on_finish(event): An invocation completed successfully.
        on_error(event): An invocation failed; ``event.error`` holds the cause.

    Runtime Invariants:
    - Called synchronously, in registration order, on the scheduler's thread.
    - The event's state is a snapshot; mutating it has no effect on the schedule.

    Error Handling:
    - Exceptions raised by a listener are logged by the scheduler and do not
      reach the other listeners or the timer machinery.
    """

    def on_start(self, event: "ScheduleEvent") -> None: ...

    def on_finish(self, event: "ScheduleEvent") -> None: ...

    def on_error(self, event: "ScheduleEvent") -> None: ...
