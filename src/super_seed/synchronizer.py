"""Assinatura dos canais de push do motor.

Um push é só um sinal para recarregar: o conteúdo dele nunca é aplicado.
Vários pushes seguidos viram uma única recarga extra.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Set

from .gateway import CONTENT_UPDATED, WALLET_UPDATED, RemoteGateway
from .registry import SessionRegistry
from .wallet import WalletCache

LOGGER = logging.getLogger(__name__)


class _CoalescedRefresh:
    """Runs ``action`` at most once at a time; requests made meanwhile collapse into one rerun."""

    def __init__(self, name: str, action: Callable[[], Awaitable[Any]]) -> None:
        self._name = name
        self._action = action
        self._task: Optional[asyncio.Task] = None
        self._dirty = False

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def request(self) -> asyncio.Task:
        if self.running:
            self._dirty = True
            return self._task  # type: ignore[return-value]
        self._dirty = False
        self._task = asyncio.ensure_future(self._run())
        return self._task

    def cancel(self) -> None:
        self._dirty = False
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def _run(self) -> None:
        while True:
            try:
                await self._action()
            except Exception:  # pragma: no cover - refreshes already log their failures
                LOGGER.exception("%s refresh crashed", self._name)
            # Pedidos feitos antes do primeiro fetch também contam como sujos.
            dirty, self._dirty = self._dirty, False
            if not dirty:
                return
            LOGGER.debug("Running coalesced %s refresh", self._name)


class Synchronizer:
    """Owns the push subscriptions for the lifetime of one client view."""

    def __init__(
        self,
        gateway: RemoteGateway,
        registry: SessionRegistry,
        wallet: WalletCache,
    ) -> None:
        self._gateway = gateway
        self._alive = False
        self._sessions = _CoalescedRefresh("session", registry.refresh)
        self._wallet = _CoalescedRefresh("wallet", wallet.refresh)
        self._subscriptions: Set[str] = set()

    @property
    def alive(self) -> bool:
        return self._alive

    def start(self) -> asyncio.Task:
        """Subscribe both channels and populate the wallet once."""
        if self._alive:
            raise RuntimeError("Synchronizer already started")
        self._alive = True
        self._gateway.subscribe(CONTENT_UPDATED, self._on_content_updated)
        self._gateway.subscribe(WALLET_UPDATED, self._on_wallet_updated)
        self._subscriptions = {CONTENT_UPDATED, WALLET_UPDATED}
        LOGGER.debug("Synchronizer subscribed to %s", sorted(self._subscriptions))
        return self._wallet.request()

    def stop(self) -> None:
        if not self._alive:
            return
        self._alive = False
        self._gateway.unsubscribe(CONTENT_UPDATED, self._on_content_updated)
        self._gateway.unsubscribe(WALLET_UPDATED, self._on_wallet_updated)
        self._subscriptions.clear()
        self._sessions.cancel()
        self._wallet.cancel()
        LOGGER.debug("Synchronizer stopped")

    def refresh_now(self) -> asyncio.Task:
        return self._sessions.request()

    # ------------------------------------------------------------------
    def _on_content_updated(self, _payload: Any = None) -> None:
        if not self._alive:
            return
        self._sessions.request()

    def _on_wallet_updated(self, _payload: Any = None) -> None:
        if not self._alive:
            return
        self._wallet.request()
