"""zeit: fluent scheduling of one-shot and recurring callbacks

Describe when a callback should run and let the scheduler manage its timers:

    scheduler = Scheduler(RealClock())
    scheduler.execute(refresh).after(500).and_repeat_after(5000).until(lambda err, res: err).start()

Responsibilities:
    - Accumulating scheduling rules through a fluent builder
    - Arming, rearming and clearing timers through a pluggable clock
    - Tracking per-schedule state (counts, timestamps, next trigger)
    - Publishing start/finish/error lifecycle events

Cross-cutting Concerns:
    Concurrency:
        - Single-threaded, driven by the clock's timers (asyncio for RealClock)
        - Asynchronous callbacks are the only suspension point

    Error Handling:
        - Invalid rule combinations raise ConfigurationError at start()
        - Callback failures are contained and reported as error events

    Logging:
        - Standard library logging under the "zeit" logger namespace
        - No handlers are installed by the library

    Testing:
        - StubClock provides deterministic, manually advanced time
"""

from zeit.core.builder import ScheduleBuilder
from zeit.core.errors import ClockError, ConfigurationError, ScheduleNotFoundError, SchedulerError
from zeit.core.events import ScheduleEvent, ScheduleEventKind
from zeit.core.outcome import Failure, Outcome, Success
from zeit.core.state import RepeatMode, ScheduleConfiguration, ScheduleState
from zeit.interfaces.abc import AbstractClock
from zeit.interfaces.protocols import ScheduleListener
from zeit.runtime.clock import RealClock, StubClock
from zeit.runtime.scheduler import Scheduler

__version__ = "0.1.0"

__all__ = [
    "AbstractClock",
    "ClockError",
    "ConfigurationError",
    "Failure",
    "Outcome",
    "RealClock",
    "RepeatMode",
    "ScheduleBuilder",
    "ScheduleConfiguration",
    "ScheduleEvent",
    "ScheduleEventKind",
    "ScheduleListener",
    "ScheduleNotFoundError",
    "ScheduleState",
    "Scheduler",
    "SchedulerError",
    "StubClock",
    "Success",
]
