# zeit/core/outcome.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details

from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass
from typing import Any, Callable, Optional, Union

from zeit.interfaces.types import Callback


@dataclass(frozen=True)
class Success:
    """The callback returned (or its awaitable resolved to) ``result``."""

    result: Any = None

    @property
    def error(self) -> None:
        return None

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """The callback raised, or its awaitable failed or was cancelled."""

    error: BaseException

    @property
    def result(self) -> None:
        return None

    @property
    def ok(self) -> bool:
        return False


Outcome = Union[Success, Failure]


def outcome_of(future: "asyncio.Future") -> Outcome:
    """
    Convert a finished future into an Outcome.

    :param future: A future whose done() is True.
    """
    if future.cancelled():
        return Failure(asyncio.CancelledError())
    error = future.exception()
    if error is not None:
        return Failure(error)
    return Success(future.result())


def invoke_and_capture(
    callback: Callback, on_settled: Callable[[Outcome], None]
) -> Optional["asyncio.Future"]:
    """
    Run ``callback`` and report exactly one Outcome to ``on_settled``.

    A synchronous return or raise is reported before this function returns.
    If the callback returns an awaitable it is scheduled on the running event
    loop and reported when it completes; the pending future is returned so the
    caller can keep a reference to it.

    :param callback: Zero-argument callable, sync or async.
    :param on_settled: Receives the Outcome once it is known.
    :return: The in-flight future for awaitable results, otherwise None.
    """
    try:
        value = callback()
    except Exception as exc:
        on_settled(Failure(exc))
        return None

    if not inspect.isawaitable(value):
        on_settled(Success(value))
        return None

    try:
        loop = asyncio.get_running_loop()
    except RuntimeError as exc:
        if inspect.iscoroutine(value):
            value.close()
        on_settled(Failure(exc))
        return None

    future = asyncio.ensure_future(value, loop=loop)
    future.add_done_callback(lambda done: on_settled(outcome_of(done)))
    return future
