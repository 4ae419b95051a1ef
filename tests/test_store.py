from __future__ import annotations

from super_seed.models import AggregateStats, Session, WalletState
from super_seed.store import (
    ClientState,
    FilterChanged,
    NoticeCleared,
    NoticeRaised,
    SnapshotLoaded,
    Store,
    WalletLoaded,
    reduce,
)

from conftest import session_payload


def _snapshot(version: int, *names: str) -> SnapshotLoaded:
    sessions = tuple(Session.from_dict(session_payload(name, name)) for name in names)
    return SnapshotLoaded(version, sessions, AggregateStats(active_session_count=len(sessions)))


def test_snapshot_replaces_sessions_and_stats_together() -> None:
    state = reduce(ClientState(), _snapshot(1, "a", "b"))

    assert [s.id for s in state.sessions] == ["a", "b"]
    assert state.stats.active_session_count == 2
    assert state.snapshot_version == 1


def test_older_snapshot_never_overwrites_newer_one() -> None:
    state = reduce(ClientState(), _snapshot(2, "new"))
    state = reduce(state, _snapshot(1, "stale"))

    assert [s.id for s in state.sessions] == ["new"]
    assert state.snapshot_version == 2


def test_notice_cleared_only_by_its_own_timer() -> None:
    state = reduce(ClientState(), NoticeRaised("first", 1))
    state = reduce(state, NoticeRaised("second", 2))

    assert reduce(state, NoticeCleared(1)).notice == "second"
    assert reduce(state, NoticeCleared(2)).notice == ""


def test_store_notifies_observers_on_change_only() -> None:
    store = Store()
    seen = []
    store.subscribe(seen.append)

    store.dispatch(WalletLoaded(WalletState("1Addr", 10)))
    store.dispatch(_snapshot(0, "ignored"))  # version 0 is not newer than 0

    assert len(seen) == 2
    assert seen[-1].wallet == WalletState("1Addr", 10)


def test_unsubscribe_stops_notifications() -> None:
    store = Store()
    seen = []
    store.subscribe(seen.append)
    store.unsubscribe(seen.append)

    store.dispatch(FilterChanged("seeding"))

    assert len(seen) == 1
    assert store.state.status_filter == "seeding"
