# zeit/interfaces/types.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
from typing import Any, Callable, Hashable, Optional

ScheduleID = str
TimerHandle = Hashable

# Callback Types
Callback = Callable[[], Any]
TimerCallback = Callable[[], None]
PrePredicate = Callable[[Any], bool]
PostPredicate = Callable[[Optional[BaseException], Any], bool]
EventHandler = Callable[[Any], None]
IdFactory = Callable[[], ScheduleID]
