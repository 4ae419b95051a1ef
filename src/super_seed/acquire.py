"""Fluxo de aquisição: link → prévia de custo → confirmação → transferência."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Callable, List, Optional

from .calls import InFlight, with_deadline
from .errors import SuperSeedError, ValidationError
from .gateway import RemoteGateway
from .models import ContentPreview
from .notices import Notice
from .registry import SessionRegistry

LOGGER = logging.getLogger(__name__)

CONTENT_LINK_PREFIX = "magnet:?"


class AcquireStage(str, Enum):
    IDLE = "idle"
    PREVIEW_PENDING = "preview_pending"
    PREVIEW_READY = "preview_ready"
    CONFIRMING = "confirming"


class AcquireWorkflow:
    """Takes a content link from entry to a confirmed transfer.

    ``submit`` validates the link locally and fetches a cost preview;
    ``confirm`` starts the transfer with the original link and refreshes the
    registry. Any failure puts the workflow back on its last stable stage and
    surfaces the message through the notice before re-raising.
    """

    def __init__(
        self,
        gateway: RemoteGateway,
        registry: SessionRegistry,
        notice: Notice,
        preview_timeout: float = 30.0,
        confirm_timeout: float = 30.0,
        link_prefix: str = CONTENT_LINK_PREFIX,
    ) -> None:
        self._gateway = gateway
        self._registry = registry
        self._notice = notice
        self._preview_timeout = preview_timeout
        self._confirm_timeout = confirm_timeout
        self._link_prefix = link_prefix
        self._in_flight = InFlight("acquire")
        self._pending: Optional[asyncio.Future] = None
        self._observers: List[Callable[["AcquireWorkflow"], None]] = []

        self.stage = AcquireStage.IDLE
        self.reference = ""
        self.preview: Optional[ContentPreview] = None
        self.error: Optional[SuperSeedError] = None

    @property
    def busy(self) -> bool:
        return self._in_flight.busy

    def observe(self, callback: Callable[["AcquireWorkflow"], None]) -> None:
        self._observers.append(callback)

    def validate(self, reference: str) -> str:
        reference = (reference or "").strip()
        if not reference:
            raise ValidationError("Please enter a content link")
        if not reference.startswith(self._link_prefix):
            raise ValidationError("Invalid content link format")
        return reference

    # ------------------------------------------------------------------
    async def submit(self, reference: str) -> Optional[ContentPreview]:
        """Fetch the preview; ``None`` when the user cancelled meanwhile."""
        self._in_flight.check()
        try:
            reference = self.validate(reference)
        except ValidationError as exc:
            self._fail(exc)
            raise

        token = self._in_flight.acquire()
        self.reference = reference
        self.preview = None
        self.error = None
        self._move(AcquireStage.PREVIEW_PENDING)
        pending = asyncio.ensure_future(self._gateway.preview_content(reference))
        self._pending = pending
        try:
            raw = await with_deadline(pending, self._preview_timeout, "preview")
        except asyncio.CancelledError:
            if self._in_flight.current(token):
                self._in_flight.release(token)
                self._reset()
                raise
            LOGGER.debug("Preview of %s abandoned", reference)
            return None
        except SuperSeedError as exc:
            if self._in_flight.current(token):
                self._in_flight.release(token)
                self.reference = ""
                self._move(AcquireStage.IDLE)
                self._fail(exc)
            raise
        finally:
            if self._pending is pending:
                self._pending = None

        if not self._in_flight.current(token):
            LOGGER.debug("Discarding late preview of %s", reference)
            return None
        self._in_flight.release(token)

        self.preview = ContentPreview.from_dict(raw)
        LOGGER.info(
            "Preview for %s: %s, %s",
            self.preview.content_id or reference,
            self.preview.total_size_str,
            self.preview.estimated_cost_str,
        )
        self._move(AcquireStage.PREVIEW_READY)
        return self.preview

    async def confirm(self) -> None:
        self._in_flight.check()
        if self.stage is not AcquireStage.PREVIEW_READY:
            raise ValidationError("Nothing to confirm")
        token = self._in_flight.acquire()
        self._move(AcquireStage.CONFIRMING)
        try:
            # A prévia é só informativa: a transferência usa o link original.
            await with_deadline(
                self._gateway.add_content(self.reference),
                self._confirm_timeout,
                "begin transfer",
            )
        except asyncio.CancelledError:
            self._move(AcquireStage.PREVIEW_READY)
            raise
        except SuperSeedError as exc:
            self._move(AcquireStage.PREVIEW_READY)
            self._fail(exc)
            raise
        finally:
            self._in_flight.release(token)

        LOGGER.info("Transfer started for %s", self.reference)
        self._reset()
        await self._registry.refresh()

    def cancel(self) -> None:
        """Back to idle; a preview still on the wire is abandoned."""
        if self.stage is AcquireStage.CONFIRMING:
            raise ValidationError("A transfer is being confirmed")
        if self.stage is AcquireStage.PREVIEW_PENDING:
            self._in_flight.abandon()
            if self._pending is not None:
                self._pending.cancel()
        self._reset()

    # ------------------------------------------------------------------
    def _reset(self) -> None:
        self.reference = ""
        self.preview = None
        self.error = None
        self._move(AcquireStage.IDLE)

    def _fail(self, exc: SuperSeedError) -> None:
        self.error = exc
        self._notice.report(str(exc))
        self._notify()

    def _move(self, stage: AcquireStage) -> None:
        if stage is not self.stage:
            LOGGER.debug("Acquire %s -> %s", self.stage.value, stage.value)
        self.stage = stage
        self._notify()

    def _notify(self) -> None:
        for callback in list(self._observers):
            callback(self)
