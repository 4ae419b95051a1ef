"""Saldo da carteira: cache atualizado em segundo plano e ações do usuário."""

from __future__ import annotations

import logging
from typing import Any, Optional

from .calls import InFlight, with_deadline
from .errors import SuperSeedError, ValidationError
from .gateway import RemoteGateway
from .models import WalletState
from .notices import Notice
from .store import Store, WalletLoaded

LOGGER = logging.getLogger(__name__)


def parse_positive_int(raw: Any, label: str) -> int:
    """Accept ints or digit strings greater than zero."""
    if isinstance(raw, bool):
        raise ValidationError(f"{label} must be a positive whole number")
    if isinstance(raw, int):
        value = raw
    else:
        text = str(raw).strip()
        if not text.isdecimal():
            raise ValidationError(f"{label} must be a positive whole number")
        value = int(text)
    if value <= 0:
        raise ValidationError(f"{label} must be a positive whole number")
    return value


class WalletCache:
    def __init__(self, gateway: RemoteGateway, store: Store, timeout: float = 30.0) -> None:
        self._gateway = gateway
        self._store = store
        self._timeout = timeout

    @property
    def state(self) -> Optional[WalletState]:
        return self._store.state.wallet

    async def fetch(self) -> WalletState:
        raw = await with_deadline(
            self._gateway.get_wallet_state(), self._timeout, "fetch wallet"
        )
        wallet = WalletState.from_dict(raw)
        self._store.dispatch(WalletLoaded(wallet))
        return wallet

    async def refresh(self) -> bool:
        """Background refresh: failures are logged, never surfaced."""
        try:
            await self.fetch()
        except SuperSeedError as exc:
            LOGGER.warning("Wallet refresh failed: %s", exc)
            return False
        return True


class WalletController:
    def __init__(
        self,
        gateway: RemoteGateway,
        cache: WalletCache,
        notice: Notice,
        timeout: float = 30.0,
    ) -> None:
        self._gateway = gateway
        self._cache = cache
        self._notice = notice
        self._timeout = timeout
        self._in_flight = InFlight("wallet")

    @property
    def busy(self) -> bool:
        return self._in_flight.busy

    async def refresh_balance(self) -> WalletState:
        token = self._in_flight.acquire()
        try:
            # A sincronização precisa terminar antes da leitura do saldo.
            await with_deadline(self._gateway.sync_wallet(), self._timeout, "sync wallet")
            return await self._cache.fetch()
        except SuperSeedError as exc:
            self._notice.report(f"Failed to refresh wallet: {exc}")
            raise
        finally:
            self._in_flight.release(token)

    async def request_funds(self, amount: Any) -> int:
        """Ask for a top-up; the balance changes later via ``wallet-updated``."""
        try:
            value = parse_positive_int(amount, "Amount")
        except ValidationError as exc:
            self._notice.report(str(exc))
            raise
        token = self._in_flight.acquire()
        try:
            await with_deadline(
                self._gateway.request_funds(value), self._timeout, "request funds"
            )
            LOGGER.info("Requested %d satoshis", value)
            return value
        except SuperSeedError as exc:
            self._notice.report(f"Failed to request funds: {exc}")
            raise
        finally:
            self._in_flight.release(token)
