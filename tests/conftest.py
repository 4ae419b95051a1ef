"""Shared pytest fixtures: an in-memory engine gateway and a wired client."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List

import pytest

from super_seed.app import SuperSeedClient
from super_seed.gateway import RemoteGateway

FAST_CONFIG = {
    "preview_timeout": 0.05,
    "confirm_timeout": 0.05,
    "publish_timeout": 0.05,
    "wallet_timeout": 0.05,
    "control_timeout": 0.05,
    "refresh_timeout": 0.05,
    "notice_duration": 0.05,
}

LINK = "magnet:?xt=urn:btih:0123456789abcdef0123456789abcdef01234567&dn=ubuntu"


def session_payload(session_id: str, name: str, status: str = "downloading", **extra: Any) -> Dict[str, Any]:
    payload = {
        "id": session_id,
        "infoHash": session_id,
        "name": name,
        "status": status,
        "isPaused": False,
        "size": 4096,
        "progress": 50.0,
        "downloadSpeed": 1024,
        "uploadSpeed": 0,
        "peers": 3,
        "seeds": 1,
        "eta": "2s",
        "files": [],
        "satoshisEarned": 0,
        "satoshisSpend": 0,
    }
    payload.update(extra)
    return payload


class FakeGateway(RemoteGateway):
    """Records every call; ``gates`` block a call, ``failures`` make it raise."""

    def __init__(self) -> None:
        self.calls: List[tuple] = []
        self.sessions: List[Dict[str, Any]] = []
        self.stats: Dict[str, Any] = {
            "totalDownload": "1.0 KB/s",
            "totalUpload": "0 B/s",
            "activeTorrents": 1,
            "totalPeers": 3,
        }
        self.wallet: Dict[str, Any] = {"address": "1SeedAddress", "balance": 2500}
        self.preview: Dict[str, Any] = {
            "name": "ubuntu-24.04.iso",
            "infoHash": "0123456789abcdef0123456789abcdef01234567",
            "size": 5 * 1024 * 1024,
            "pricePerPiece": 10,
            "totalPieces": 500,
        }
        self.link = "magnet:?xt=urn:btmh:1220deadbeef&dn=share"
        self.publish_path = "/home/user/share"
        self.failures: Dict[str, BaseException] = {}
        self.gates: Dict[str, asyncio.Event] = {}
        self.listeners: Dict[str, List[Callable[[Any], None]]] = {}

    def names(self) -> List[str]:
        return [call[0] for call in self.calls]

    def block(self, name: str) -> asyncio.Event:
        gate = asyncio.Event()
        self.gates[name] = gate
        return gate

    def emit(self, channel: str, payload: Any = None) -> None:
        for callback in list(self.listeners.get(channel, ())):
            callback(payload)

    async def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, *args))
        gate = self.gates.get(name)
        if gate is not None:
            await gate.wait()
        failure = self.failures.get(name)
        if failure is not None:
            raise failure

    # ------------------------------------------------------------------
    async def add_content(self, reference: str) -> None:
        await self._record("add_content", reference)

    async def list_sessions(self) -> List[Dict[str, Any]]:
        await self._record("list_sessions")
        return [dict(item) if isinstance(item, dict) else item for item in self.sessions]

    async def get_stats(self) -> Dict[str, Any]:
        await self._record("get_stats")
        return dict(self.stats) if isinstance(self.stats, dict) else self.stats

    async def pause_session(self, content_id: str) -> None:
        await self._record("pause_session", content_id)

    async def resume_session(self, content_id: str) -> None:
        await self._record("resume_session", content_id)

    async def remove_session(self, content_id: str, delete_files: bool) -> None:
        await self._record("remove_session", content_id, delete_files)

    async def open_storage_location(self) -> None:
        await self._record("open_storage_location")

    async def select_publish_path(self) -> str:
        await self._record("select_publish_path")
        return self.publish_path

    async def create_publishable(self, path: str, price_per_piece: int) -> str:
        await self._record("create_publishable", path, price_per_piece)
        return self.link

    async def preview_content(self, reference: str) -> Dict[str, Any]:
        await self._record("preview_content", reference)
        return dict(self.preview)

    async def get_wallet_state(self) -> Dict[str, Any]:
        await self._record("get_wallet_state")
        return dict(self.wallet)

    async def request_funds(self, amount: int) -> None:
        await self._record("request_funds", amount)

    async def sync_wallet(self) -> None:
        await self._record("sync_wallet")

    def subscribe(self, channel: str, callback: Callable[[Any], None]) -> None:
        self.calls.append(("subscribe", channel))
        self.listeners.setdefault(channel, []).append(callback)

    def unsubscribe(self, channel: str, callback: Callable[[Any], None]) -> None:
        self.calls.append(("unsubscribe", channel))
        self.listeners[channel].remove(callback)


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def client(gateway: FakeGateway) -> SuperSeedClient:
    return SuperSeedClient(gateway, FAST_CONFIG)
