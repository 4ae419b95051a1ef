"""Deadlines and in-flight tokens for requests sent to the engine.

``with_deadline`` cancels the awaiting task when the deadline fires. The RPC
transport runs each request in a worker thread, and an HTTP request already
on the wire cannot be interrupted from there: when it eventually answers,
the result lands on a cancelled task and is dropped.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from typing import Awaitable, TypeVar

from .errors import DeadlineExceeded, WorkflowBusyError

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


async def with_deadline(awaitable: Awaitable[T], timeout: float, operation: str) -> T:
    try:
        return await asyncio.wait_for(awaitable, timeout)
    except DeadlineExceeded:
        raise
    except asyncio.TimeoutError as exc:
        LOGGER.warning("%s did not answer within %.1fs", operation, timeout)
        raise DeadlineExceeded(operation, timeout) from exc


class InFlight:
    """One outstanding request per workflow; a second one is rejected."""

    _counter = itertools.count(1)

    def __init__(self, name: str) -> None:
        self._name = name
        self._token: int | None = None

    @property
    def busy(self) -> bool:
        return self._token is not None

    def check(self) -> None:
        if self._token is not None:
            raise WorkflowBusyError(f"{self._name} already has a request in flight")

    def acquire(self) -> int:
        self.check()
        self._token = next(self._counter)
        return self._token

    def release(self, token: int) -> None:
        if self._token == token:
            self._token = None

    def current(self, token: int) -> bool:
        return self._token == token

    def abandon(self) -> None:
        """Forget the outstanding token so its late completion is ignored."""
        self._token = None
