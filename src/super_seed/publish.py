"""Fluxo de publicação: caminho local → preço por peça → link compartilhável."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Callable, List, Optional

from .calls import InFlight, with_deadline
from .errors import SuperSeedError, ValidationError
from .gateway import RemoteGateway
from .notices import Notice
from .registry import SessionRegistry
from .wallet import parse_positive_int

LOGGER = logging.getLogger(__name__)


class PublishStage(str, Enum):
    IDLE = "idle"
    PATH_SELECTED = "path_selected"
    PRICING = "pricing"
    CREATING = "creating"
    CREATED = "created"


class PublishWorkflow:
    """Turns a local path and a price into a shareable content link."""

    def __init__(
        self,
        gateway: RemoteGateway,
        registry: SessionRegistry,
        notice: Notice,
        timeout: float = 60.0,
    ) -> None:
        self._gateway = gateway
        self._registry = registry
        self._notice = notice
        # Indexar o conteúdo leva tempo proporcional ao tamanho dos arquivos.
        self._timeout = timeout
        self._in_flight = InFlight("publish")
        self._observers: List[Callable[["PublishWorkflow"], None]] = []

        self.stage = PublishStage.IDLE
        self.path = ""
        self.price_text = ""
        self.price: Optional[int] = None
        self.content_link = ""
        self.error: Optional[SuperSeedError] = None

    @property
    def busy(self) -> bool:
        return self._in_flight.busy

    def observe(self, callback: Callable[["PublishWorkflow"], None]) -> None:
        self._observers.append(callback)

    # ------------------------------------------------------------------
    async def choose_path(self) -> str:
        """Ask the engine's path picker; an empty answer means the user gave up."""
        token = self._in_flight.acquire()
        try:
            path = await self._gateway.select_publish_path()
        except SuperSeedError as exc:
            self._fail(SuperSeedError(f"Failed to select files: {exc}"))
            raise
        finally:
            stale = not self._in_flight.current(token)
            self._in_flight.release(token)
        if path and not stale:
            self.use_path(path)
        return path

    def use_path(self, path: str) -> None:
        self._in_flight.check()
        self.path = path
        self.price_text = ""
        self.price = None
        self.content_link = ""
        self.error = None
        self._move(PublishStage.PATH_SELECTED)

    def set_price(self, raw: Any) -> None:
        if self.stage not in (PublishStage.PATH_SELECTED, PublishStage.PRICING):
            raise ValidationError("Select a path before setting a price")
        self.price_text = str(raw).strip()
        self._move(PublishStage.PRICING)

    async def create(self) -> str:
        self._in_flight.check()
        if self.stage is not PublishStage.PRICING:
            raise ValidationError("Set a price before creating")
        try:
            price = parse_positive_int(self.price_text, "Price per piece")
        except ValidationError as exc:
            self._fail(exc)
            raise

        token = self._in_flight.acquire()
        self.price = price
        self._move(PublishStage.CREATING)
        try:
            link = await with_deadline(
                self._gateway.create_publishable(self.path, price),
                self._timeout,
                "create publishable session",
            )
        except (SuperSeedError, asyncio.CancelledError) as exc:
            if self._in_flight.current(token):
                self._in_flight.release(token)
                # O preço digitado continua lá para uma nova tentativa.
                self._move(PublishStage.PRICING)
                if isinstance(exc, SuperSeedError):
                    self._fail(exc)
            raise

        if not self._in_flight.current(token):
            LOGGER.debug("Discarding late link for %s, workflow was reset", self.path)
            return link
        self._in_flight.release(token)
        self.content_link = link
        LOGGER.info("Published %s at %d sats/piece", self.path, price)
        self._move(PublishStage.CREATED)
        await self._registry.refresh()
        return link

    def reset(self) -> None:
        """Escape hatch: valid from every stage."""
        self._in_flight.abandon()
        self.path = ""
        self.price_text = ""
        self.price = None
        self.content_link = ""
        self.error = None
        self._move(PublishStage.IDLE)

    # ------------------------------------------------------------------
    def _fail(self, exc: SuperSeedError) -> None:
        self.error = exc
        self._notice.report(str(exc))
        self._notify()

    def _move(self, stage: PublishStage) -> None:
        if stage is not self.stage:
            LOGGER.debug("Publish %s -> %s", self.stage.value, stage.value)
        self.stage = stage
        self._notify()

    def _notify(self) -> None:
        for callback in list(self._observers):
            callback(self)
