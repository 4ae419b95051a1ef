"""Estado central do cliente e o redutor que o atualiza.

Cada evento produz um novo ``ClientState``; nada fora daqui altera o estado.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, List, Tuple, Union

from .models import AggregateStats, Session, WalletState

LOGGER = logging.getLogger(__name__)

ALL_STATUSES = "all"


@dataclass(frozen=True)
class ClientState:
    sessions: Tuple[Session, ...] = ()
    stats: AggregateStats = AggregateStats()
    snapshot_version: int = 0
    wallet: WalletState | None = None
    status_filter: str = ALL_STATUSES
    search_text: str = ""
    selected_id: str | None = None
    notice: str = ""
    notice_serial: int = 0


@dataclass(frozen=True)
class SnapshotLoaded:
    version: int
    sessions: Tuple[Session, ...]
    stats: AggregateStats


@dataclass(frozen=True)
class WalletLoaded:
    wallet: WalletState


@dataclass(frozen=True)
class FilterChanged:
    status: str


@dataclass(frozen=True)
class SearchChanged:
    text: str


@dataclass(frozen=True)
class SessionSelected:
    session_id: str | None


@dataclass(frozen=True)
class NoticeRaised:
    message: str
    serial: int


@dataclass(frozen=True)
class NoticeCleared:
    serial: int


Event = Union[
    SnapshotLoaded,
    WalletLoaded,
    FilterChanged,
    SearchChanged,
    SessionSelected,
    NoticeRaised,
    NoticeCleared,
]


def reduce(state: ClientState, event: Event) -> ClientState:
    if isinstance(event, SnapshotLoaded):
        if event.version <= state.snapshot_version:
            LOGGER.debug(
                "Discarding snapshot v%d, v%d already applied",
                event.version,
                state.snapshot_version,
            )
            return state
        return replace(
            state,
            sessions=event.sessions,
            stats=event.stats,
            snapshot_version=event.version,
        )
    if isinstance(event, WalletLoaded):
        return replace(state, wallet=event.wallet)
    if isinstance(event, FilterChanged):
        return replace(state, status_filter=event.status)
    if isinstance(event, SearchChanged):
        return replace(state, search_text=event.text)
    if isinstance(event, SessionSelected):
        return replace(state, selected_id=event.session_id)
    if isinstance(event, NoticeRaised):
        return replace(state, notice=event.message, notice_serial=event.serial)
    if isinstance(event, NoticeCleared):
        # Um timer antigo não pode apagar um aviso mais novo.
        if event.serial != state.notice_serial:
            return state
        return replace(state, notice="")
    raise TypeError(f"Unknown event {event!r}")


class Store:
    """Holds the current ``ClientState`` and fans it out to observers."""

    def __init__(self, state: ClientState | None = None) -> None:
        self._state = state or ClientState()
        self._observers: List[Callable[[ClientState], None]] = []

    @property
    def state(self) -> ClientState:
        return self._state

    def dispatch(self, event: Event) -> ClientState:
        new_state = reduce(self._state, event)
        if new_state is not self._state:
            self._state = new_state
            self._notify_observers()
        return self._state

    def subscribe(self, callback: Callable[[ClientState], None]) -> None:
        self._observers.append(callback)
        callback(self._state)

    def unsubscribe(self, callback: Callable[[ClientState], None]) -> None:
        if callback in self._observers:
            self._observers.remove(callback)

    # ------------------------------------------------------------------
    def _notify_observers(self) -> None:
        state = self._state
        for callback in list(self._observers):
            callback(state)
