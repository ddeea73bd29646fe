"""
Interface package for clock contracts, listener protocols and shared type aliases.
"""

from .abc import AbstractClock
from .protocols import ScheduleListener

__all__ = ["AbstractClock", "ScheduleListener"]
