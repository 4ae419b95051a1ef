"""Catálogo de sessões: substitui o snapshot inteiro a cada atualização."""

from __future__ import annotations

import itertools
import logging
from typing import Optional, Tuple

from .calls import with_deadline
from .errors import SuperSeedError
from .gateway import RemoteGateway
from .models import AggregateStats, Session
from .store import SnapshotLoaded, Store

LOGGER = logging.getLogger(__name__)


class SessionRegistry:
    """Keeps the session list and aggregate stats in step with the engine.

    Each ``refresh`` takes a version number before it starts fetching. The
    store drops snapshots older than the one already applied, so a slow
    refresh finishing after a faster, newer one can't roll the list back.
    """

    def __init__(self, gateway: RemoteGateway, store: Store, timeout: float = 30.0) -> None:
        self._gateway = gateway
        self._store = store
        self._timeout = timeout
        self._versions = itertools.count(store.state.snapshot_version + 1)

    async def refresh(self) -> bool:
        """Fetch sessions and stats; returns ``False`` when the old snapshot was kept."""
        version = next(self._versions)
        try:
            sessions, stats = await with_deadline(self._fetch(), self._timeout, "refresh sessions")
        except SuperSeedError as exc:
            LOGGER.warning("Session refresh v%d failed, keeping previous snapshot: %s", version, exc)
            return False
        except (AttributeError, TypeError, ValueError) as exc:
            LOGGER.warning(
                "Session refresh v%d got a malformed payload, keeping previous snapshot: %s",
                version,
                exc,
            )
            return False

        LOGGER.debug("Applying snapshot v%d with %d sessions", version, len(sessions))
        self._store.dispatch(SnapshotLoaded(version, sessions, stats))
        return True

    async def _fetch(self) -> Tuple[Tuple[Session, ...], AggregateStats]:
        raw_sessions = await self._gateway.list_sessions()
        raw_stats = await self._gateway.get_stats()
        sessions = tuple(Session.from_dict(item) for item in raw_sessions)
        return sessions, AggregateStats.from_dict(raw_stats)

    def get_all(self) -> Tuple[Session, ...]:
        return self._store.state.sessions

    def get(self, session_id: str) -> Optional[Session]:
        for session in self._store.state.sessions:
            if session.id == session_id:
                return session
        return None

    @property
    def stats(self) -> AggregateStats:
        return self._store.state.stats
