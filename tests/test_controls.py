from __future__ import annotations

import asyncio

import pytest

from super_seed.app import SuperSeedClient
from super_seed.errors import RemoteError, ValidationError
from super_seed.models import Session

from conftest import FakeGateway, session_payload


@pytest.mark.parametrize(
    "payload",
    [
        session_payload("s1", "a", status="paused"),
        session_payload("s1", "a", status="stalled"),
        session_payload("s1", "a", status="downloading", isPaused=True),
        session_payload("s1", "a", status="seeding", isPaused=True),
    ],
)
def test_resumable_sessions_are_resumed(client: SuperSeedClient, gateway: FakeGateway, payload: dict) -> None:
    session = Session.from_dict(payload)

    assert asyncio.run(client.controls.toggle_status(session)) is True

    assert ("resume_session", "s1") in gateway.calls
    assert "pause_session" not in gateway.names()
    assert gateway.names()[-2:] == ["list_sessions", "get_stats"]


@pytest.mark.parametrize("status", ["downloading", "seeding", "completed", "loading"])
def test_running_sessions_are_paused(client: SuperSeedClient, gateway: FakeGateway, status: str) -> None:
    session = Session.from_dict(session_payload("s1", "a", status=status))

    assert asyncio.run(client.controls.toggle_status(session)) is False

    assert gateway.names() == ["pause_session", "list_sessions", "get_stats"]


def test_toggle_failure_survives_malformed_refresh(client: SuperSeedClient, gateway: FakeGateway) -> None:
    gateway.failures["resume_session"] = RemoteError("unknown session")
    gateway.sessions = [session_payload("s1", "a", files=["not-a-dict"])]
    session = Session.from_dict(session_payload("s1", "a", status="paused"))

    async def scenario() -> None:
        with pytest.raises(RemoteError, match="unknown session"):
            await client.controls.toggle_status(session)

    asyncio.run(scenario())

    assert gateway.names() == ["resume_session", "list_sessions", "get_stats"]


def test_toggle_failure_still_refreshes(client: SuperSeedClient, gateway: FakeGateway) -> None:
    gateway.failures["pause_session"] = RemoteError("unknown session")
    session = Session.from_dict(session_payload("s1", "a"))

    async def scenario() -> str:
        with pytest.raises(RemoteError):
            await client.controls.toggle_status(session)
        return client.notice.message

    assert asyncio.run(scenario()) == "Failed to change session status"
    assert gateway.names() == ["pause_session", "list_sessions", "get_stats"]


def test_request_removal_messages(client: SuperSeedClient, gateway: FakeGateway) -> None:
    session = Session.from_dict(session_payload("s1", "Ubuntu"))

    keep = client.controls.request_removal(session)
    assert keep.message == 'Remove "Ubuntu"?'
    delete = client.controls.request_removal(session, delete_files=True)
    assert delete.message == 'Remove "Ubuntu" and delete downloaded files?'
    assert client.controls.pending_removal == delete
    assert gateway.calls == []

    client.controls.dismiss_removal()
    assert client.controls.pending_removal is None


def test_removing_selected_session_clears_selection_first(
    client: SuperSeedClient, gateway: FakeGateway
) -> None:
    gateway.sessions = [session_payload("s1", "Ubuntu")]

    async def scenario() -> None:
        await client.registry.refresh()
        session = client.registry.get("s1")
        client.controls.select(session)
        client.controls.request_removal(session, delete_files=True)

        gate = gateway.block("remove_session")
        removing = asyncio.ensure_future(client.controls.confirm_removal())
        await asyncio.sleep(0.01)
        # A chamada ainda não terminou, mas o painel já foi fechado.
        assert client.controls.pending_removal is None
        assert client.store.state.selected_id is None
        assert client.controls.selected() is None
        gateway.sessions = []
        gate.set()
        await removing

    asyncio.run(scenario())

    assert ("remove_session", "s1", True) in gateway.calls
    assert client.registry.get_all() == ()


def test_removing_other_session_keeps_selection(client: SuperSeedClient, gateway: FakeGateway) -> None:
    gateway.sessions = [session_payload("s1", "Ubuntu"), session_payload("s2", "Debian")]

    async def scenario() -> None:
        await client.registry.refresh()
        client.controls.select(client.registry.get("s2"))
        client.controls.request_removal(client.registry.get("s1"))
        await client.controls.confirm_removal()

    asyncio.run(scenario())

    assert client.store.state.selected_id == "s2"
    assert ("remove_session", "s1", False) in gateway.calls


def test_failed_removal_still_refreshes(client: SuperSeedClient, gateway: FakeGateway) -> None:
    gateway.failures["remove_session"] = RemoteError("session not found")
    session = Session.from_dict(session_payload("s1", "Ubuntu"))

    async def scenario() -> str:
        client.controls.request_removal(session)
        with pytest.raises(RemoteError):
            await client.controls.confirm_removal()
        return client.notice.message

    assert asyncio.run(scenario()) == "session not found"
    assert gateway.names() == ["remove_session", "list_sessions", "get_stats"]


def test_confirm_without_request_is_rejected(client: SuperSeedClient, gateway: FakeGateway) -> None:
    async def scenario() -> None:
        with pytest.raises(ValidationError):
            await client.controls.confirm_removal()

    asyncio.run(scenario())

    assert gateway.calls == []


def test_open_storage_location_failure_is_surfaced(client: SuperSeedClient, gateway: FakeGateway) -> None:
    gateway.failures["open_storage_location"] = RemoteError("no file manager")

    async def scenario() -> str:
        with pytest.raises(RemoteError):
            await client.controls.open_storage_location()
        return client.notice.message

    assert asyncio.run(scenario()) == "Failed to open download folder"
