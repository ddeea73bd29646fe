# zeit/core/hooks.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import logging
from typing import List, Tuple, Union

from zeit.core.events import ScheduleEvent, ScheduleEventKind
from zeit.interfaces.protocols import ScheduleListener
from zeit.interfaces.types import EventHandler

logger = logging.getLogger(__name__)


class HookManager:
    """
    Keeps the handlers subscribed to schedule lifecycle events and publishes
    events to them synchronously, in subscription order.
    """

    def __init__(self) -> None:
        self._subscriptions: List[Tuple[ScheduleEventKind, EventHandler]] = []
        self._invoker = _HookInvoker()

    def register_handler(self, kind: Union[ScheduleEventKind, str], handler: EventHandler) -> None:
        """
        Subscribe a callable to one event kind.

        :param kind: A ScheduleEventKind or its string value.
        :param handler: Called with the ScheduleEvent.
        :raises ValueError: If ``kind`` is unknown.
        :raises TypeError: If ``handler`` is not callable.
        """
        if not callable(handler):
            raise TypeError("Event handlers must be callable.")
        self._subscriptions.append((ScheduleEventKind.parse(kind), handler))

    def unregister_handler(self, kind: Union[ScheduleEventKind, str], handler: EventHandler) -> bool:
        """
        Remove the first matching subscription.

        :return: True if a subscription was removed.
        """
        entry = (ScheduleEventKind.parse(kind), handler)
        try:
            self._subscriptions.remove(entry)
        except ValueError:
            return False
        return True

    def register_listener(self, listener: ScheduleListener) -> None:
        """Subscribe each of a listener's on_start/on_finish/on_error methods."""
        if not isinstance(listener, ScheduleListener):
            raise TypeError("Listener must implement on_start, on_finish and on_error.")
        for kind in ScheduleEventKind:
            self.register_handler(kind, getattr(listener, kind.listener_method))

    def unregister_listener(self, listener: ScheduleListener) -> None:
        for kind in ScheduleEventKind:
            self.unregister_handler(kind, getattr(listener, kind.listener_method))

    def handlers_for(self, kind: ScheduleEventKind) -> List[EventHandler]:
        return [handler for subscribed, handler in self._subscriptions if subscribed is kind]

    def emit(self, event: ScheduleEvent) -> None:
        """
        Deliver ``event`` to every handler subscribed to its kind.
        """
        self._invoker.invoke_all(self.handlers_for(event.kind), event)


class _HookInvoker:
    """
    Internal helper that calls each handler in turn. A failing handler is
    logged and does not prevent delivery to the handlers after it.
    """

    def invoke_all(self, handlers: List[EventHandler], event: ScheduleEvent) -> None:
        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception(
                    "Handler %r failed on %s event for schedule %s",
                    handler,
                    event.kind.value,
                    event.schedule_id,
                )
