# zeit/core/events.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from zeit.core.state import ScheduleState


class ScheduleEventKind(Enum):
    """The closed set of lifecycle events a scheduler publishes."""

    START = "start"
    FINISH = "finish"
    ERROR = "error"

    @property
    def listener_method(self) -> str:
        """Name of the ScheduleListener method receiving this kind."""
        return f"on_{self.value}"

    @classmethod
    def parse(cls, kind: Union["ScheduleEventKind", str]) -> "ScheduleEventKind":
        """
        Accept either a member or its string value.

        :raises ValueError: If ``kind`` names no event.
        """
        if isinstance(kind, cls):
            return kind
        try:
            return cls(kind)
        except ValueError:
            raise ValueError(
                f"Unknown schedule event {kind!r}; expected one of {[k.value for k in cls]}"
            ) from None


@dataclass(frozen=True)
class ScheduleEvent:
    """
    A lifecycle notification. ``state`` is the schedule snapshot taken at the
    moment of emission.
    """

    kind: ScheduleEventKind
    state: ScheduleState
    error: Optional[BaseException] = None
    result: Any = None

    @property
    def schedule_id(self) -> str:
        return self.state.id

    @property
    def name(self) -> Optional[str]:
        return self.state.name
