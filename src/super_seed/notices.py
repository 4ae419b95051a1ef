"""Avisos de erro transitórios, apagados sozinhos depois de alguns segundos."""

from __future__ import annotations

import asyncio
import itertools
import logging

from .store import NoticeCleared, NoticeRaised, Store

LOGGER = logging.getLogger(__name__)

DEFAULT_DURATION = 3.0


class Notice:
    def __init__(self, store: Store, duration: float = DEFAULT_DURATION) -> None:
        self._store = store
        self._duration = duration
        self._serials = itertools.count(1)
        self._timer: asyncio.TimerHandle | None = None

    @property
    def message(self) -> str:
        return self._store.state.notice

    def report(self, message: str) -> None:
        serial = next(self._serials)
        LOGGER.info("Notice: %s", message)
        self._store.dispatch(NoticeRaised(message, serial))
        if self._timer is not None:
            self._timer.cancel()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(
            self._duration, self._store.dispatch, NoticeCleared(serial)
        )

    def dismiss(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._store.dispatch(NoticeCleared(self._store.state.notice_serial))
