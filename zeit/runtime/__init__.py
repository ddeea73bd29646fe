"""
Runtime package: clocks and the scheduler that drives schedules on them.
"""

from .clock import PendingTimer, RealClock, StubClock
from .scheduler import Scheduler

__all__ = ["RealClock", "StubClock", "PendingTimer", "Scheduler"]
