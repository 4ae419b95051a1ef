"""Pure view over the client state: filtering, search, ordering and totals."""

from __future__ import annotations

import locale
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple

from .errors import ValidationError
from .models import AggregateStats, Session, SessionStatus, WalletState
from .store import ALL_STATUSES, ClientState, FilterChanged, SearchChanged, Store

FILTER_KEYS: Tuple[str, ...] = (ALL_STATUSES,) + tuple(status.value for status in SessionStatus)


@dataclass(frozen=True)
class SessionView:
    sessions: Tuple[Session, ...]
    total_earned: int
    total_spent: int
    status_counts: Dict[str, int]
    stats: AggregateStats
    wallet: Optional[WalletState]
    selected: Optional[Session]
    notice: str
    empty_message: str


def filter_sessions(
    sessions: Iterable[Session], status_filter: str = ALL_STATUSES, search_text: str = ""
) -> Tuple[Session, ...]:
    needle = search_text.casefold()
    matches = [
        session
        for session in sessions
        if (status_filter == ALL_STATUSES or session.status.value == status_filter)
        and needle in session.name.casefold()
    ]
    # sorted() é estável; strxfrm segue a ordenação do locale atual.
    return tuple(sorted(matches, key=lambda session: locale.strxfrm(session.id)))


def count_by_status(sessions: Tuple[Session, ...]) -> Dict[str, int]:
    counts = {key: 0 for key in FILTER_KEYS}
    counts[ALL_STATUSES] = len(sessions)
    for session in sessions:
        counts[session.status.value] += 1
    return counts


def project(state: ClientState) -> SessionView:
    sessions = state.sessions
    selected = None
    if state.selected_id is not None:
        selected = next((s for s in sessions if s.id == state.selected_id), None)
    return SessionView(
        sessions=filter_sessions(sessions, state.status_filter, state.search_text),
        # Totais são globais: não dependem do filtro nem da busca.
        total_earned=sum(session.satoshis_earned for session in sessions),
        total_spent=sum(session.satoshis_spent for session in sessions),
        status_counts=count_by_status(sessions),
        stats=state.stats,
        wallet=state.wallet,
        selected=selected,
        notice=state.notice,
        empty_message="No sessions found" if state.search_text else "No sessions yet",
    )


def set_filter(store: Store, status_filter: str) -> None:
    if status_filter not in FILTER_KEYS:
        raise ValidationError(f"Unknown filter {status_filter!r}")
    store.dispatch(FilterChanged(status_filter))


def set_search(store: Store, text: str) -> None:
    store.dispatch(SearchChanged(text))
