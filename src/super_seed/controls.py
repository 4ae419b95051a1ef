"""Ações sobre uma sessão: pausar/retomar, remover com confirmação, seleção."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from .calls import with_deadline
from .errors import SuperSeedError, ValidationError
from .gateway import RemoteGateway
from .models import Session
from .notices import Notice
from .registry import SessionRegistry
from .store import SessionSelected, Store

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class RemovalRequest:
    session: Session
    delete_files: bool
    message: str


def removal_message(session: Session, delete_files: bool) -> str:
    if delete_files:
        return f'Remove "{session.name}" and delete downloaded files?'
    return f'Remove "{session.name}"?'


class SessionControls:
    """Imperative operations on a single session.

    None of them edits the session locally: every call ends with a registry
    refresh so the displayed state is always the engine's.
    """

    def __init__(
        self,
        gateway: RemoteGateway,
        registry: SessionRegistry,
        store: Store,
        notice: Notice,
        timeout: float = 30.0,
    ) -> None:
        self._gateway = gateway
        self._registry = registry
        self._store = store
        self._notice = notice
        self._timeout = timeout
        self.pending_removal: Optional[RemovalRequest] = None

    # ------------------------------------------------------------------
    async def toggle_status(self, session: Session) -> bool:
        """Resume a paused/stalled session, pause anything else.

        Returns ``True`` when a resume was requested.
        """
        resume = session.is_resumable
        try:
            if resume:
                LOGGER.debug("Resuming session %s", session.content_id)
                await with_deadline(
                    self._gateway.resume_session(session.content_id),
                    self._timeout,
                    "resume session",
                )
            else:
                LOGGER.debug("Pausing session %s", session.content_id)
                await with_deadline(
                    self._gateway.pause_session(session.content_id),
                    self._timeout,
                    "pause session",
                )
        except SuperSeedError as exc:
            LOGGER.warning("Failed to toggle session %s: %s", session.content_id, exc)
            self._notice.report("Failed to change session status")
            raise
        finally:
            await self._registry.refresh()
        return resume

    def request_removal(self, session: Session, delete_files: bool = False) -> RemovalRequest:
        self.pending_removal = RemovalRequest(
            session=session,
            delete_files=delete_files,
            message=removal_message(session, delete_files),
        )
        return self.pending_removal

    def dismiss_removal(self) -> None:
        self.pending_removal = None

    async def confirm_removal(self) -> None:
        request = self.pending_removal
        if request is None:
            raise ValidationError("No removal awaiting confirmation")
        # A ordem importa: fechar o diálogo e a seleção antes da chamada remota.
        self.pending_removal = None
        target = request.session
        if self._store.state.selected_id == target.id:
            self.clear_selection()

        LOGGER.info(
            "Removing session %s (delete files: %s)", target.content_id, request.delete_files
        )
        try:
            await with_deadline(
                self._gateway.remove_session(target.content_id, request.delete_files),
                self._timeout,
                "remove session",
            )
        except SuperSeedError as exc:
            LOGGER.warning("Failed to remove session %s: %s", target.content_id, exc)
            self._notice.report(str(exc) or "Failed to remove session")
            raise
        finally:
            # Mesmo com falha a lista pode ter mudado do lado do motor.
            await self._registry.refresh()

    async def open_storage_location(self) -> None:
        try:
            await with_deadline(
                self._gateway.open_storage_location(), self._timeout, "open storage location"
            )
        except SuperSeedError as exc:
            LOGGER.warning("Failed to open storage location: %s", exc)
            self._notice.report("Failed to open download folder")
            raise

    # ------------------------------------------------------------------
    def select(self, session: Session) -> None:
        self._store.dispatch(SessionSelected(session.id))

    def clear_selection(self) -> None:
        self._store.dispatch(SessionSelected(None))

    def selected(self) -> Optional[Session]:
        selected_id = self._store.state.selected_id
        if selected_id is None:
            return None
        return self._registry.get(selected_id)
