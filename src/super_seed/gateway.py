"""Remote gateway: the engine's JSON-RPC interface and its push channels.

The engine daemon speaks aria2-style JSON-RPC on ``http://host:port/jsonrpc``
(``token:<secret>`` as the first parameter) and pushes notifications over a
websocket on the same path. Requests go through ``aria2p.Client``; each one
runs in a worker thread so the event loop never blocks.
"""

from __future__ import annotations

import abc
import asyncio
import json
import logging
import threading
from typing import Any, Callable, Dict, List, Optional

import aria2p
import requests
import websocket

from .errors import RemoteError

LOGGER = logging.getLogger(__name__)

CONTENT_UPDATED = "content-updated"
WALLET_UPDATED = "wallet-updated"

PushCallback = Callable[[Any], None]


class RemoteGateway(abc.ABC):
    """Every operation the client consumes from the engine."""

    @abc.abstractmethod
    async def add_content(self, reference: str) -> None: ...

    @abc.abstractmethod
    async def list_sessions(self) -> List[Dict[str, Any]]: ...

    @abc.abstractmethod
    async def get_stats(self) -> Dict[str, Any]: ...

    @abc.abstractmethod
    async def pause_session(self, content_id: str) -> None: ...

    @abc.abstractmethod
    async def resume_session(self, content_id: str) -> None: ...

    @abc.abstractmethod
    async def remove_session(self, content_id: str, delete_files: bool) -> None: ...

    @abc.abstractmethod
    async def open_storage_location(self) -> None: ...

    @abc.abstractmethod
    async def select_publish_path(self) -> str:
        """Return the chosen path, or an empty string when the user cancelled."""

    @abc.abstractmethod
    async def create_publishable(self, path: str, price_per_piece: int) -> str:
        """Index ``path`` and return its shareable content link."""

    @abc.abstractmethod
    async def preview_content(self, reference: str) -> Dict[str, Any]: ...

    @abc.abstractmethod
    async def get_wallet_state(self) -> Dict[str, Any]: ...

    @abc.abstractmethod
    async def request_funds(self, amount: int) -> None: ...

    @abc.abstractmethod
    async def sync_wallet(self) -> None: ...

    @abc.abstractmethod
    def subscribe(self, channel: str, callback: PushCallback) -> None: ...

    @abc.abstractmethod
    def unsubscribe(self, channel: str, callback: PushCallback) -> None: ...


class RpcGateway(RemoteGateway):
    """Facade for communicating with the engine daemon via JSON-RPC."""

    def __init__(
        self,
        host: str = "http://localhost",
        port: int = 6900,
        secret: str = "",
        timeout: float = 60.0,
    ) -> None:
        self._host = host
        self._port = port
        self._secret = secret
        self._client = aria2p.Client(host=host, port=port, secret=secret, timeout=timeout)
        self._listener = NotificationListener(self.ws_url)

    @property
    def ws_url(self) -> str:
        scheme, _, rest = self._host.partition("://")
        ws_scheme = "wss" if scheme == "https" else "ws"
        return f"{ws_scheme}://{rest or scheme}:{self._port}/jsonrpc"

    # ------------------------------------------------------------------
    async def add_content(self, reference: str) -> None:
        await self._call("session.add", reference)

    async def list_sessions(self) -> List[Dict[str, Any]]:
        return list(await self._call("session.list") or [])

    async def get_stats(self) -> Dict[str, Any]:
        return dict(await self._call("session.stats") or {})

    async def pause_session(self, content_id: str) -> None:
        await self._call("session.pause", content_id)

    async def resume_session(self, content_id: str) -> None:
        await self._call("session.resume", content_id)

    async def remove_session(self, content_id: str, delete_files: bool) -> None:
        await self._call("session.remove", content_id, delete_files)

    async def open_storage_location(self) -> None:
        await self._call("storage.open")

    async def select_publish_path(self) -> str:
        return str(await self._call("publish.selectPath") or "")

    async def create_publishable(self, path: str, price_per_piece: int) -> str:
        return str(await self._call("publish.create", path, price_per_piece))

    async def preview_content(self, reference: str) -> Dict[str, Any]:
        return dict(await self._call("content.preview", reference) or {})

    async def get_wallet_state(self) -> Dict[str, Any]:
        return dict(await self._call("wallet.state") or {})

    async def request_funds(self, amount: int) -> None:
        await self._call("wallet.requestFunds", amount)

    async def sync_wallet(self) -> None:
        await self._call("wallet.sync")

    def subscribe(self, channel: str, callback: PushCallback) -> None:
        self._listener.add(channel, callback, asyncio.get_running_loop())

    def unsubscribe(self, channel: str, callback: PushCallback) -> None:
        self._listener.remove(channel, callback)

    # ------------------------------------------------------------------
    async def _call(self, method: str, *params: Any) -> Any:
        LOGGER.debug("RPC %s %s", method, params)
        return await asyncio.to_thread(self._call_sync, method, list(params))

    def _call_sync(self, method: str, params: List[Any]) -> Any:
        # aria2p só injeta o segredo em métodos "aria2.*".
        if self._secret:
            params = [f"token:{self._secret}", *params]
        try:
            return self._client.call(method, params, insert_secret=False)
        except aria2p.ClientException as exc:
            raise RemoteError(exc.message, code=exc.code) from exc
        except requests.exceptions.RequestException as exc:
            raise RemoteError(f"Engine unreachable: {exc}") from exc


class NotificationListener:
    """Keeps one websocket open while at least one push callback is registered.

    Frames arrive on a daemon thread; callbacks are handed back to the event
    loop that registered them.
    """

    def __init__(self, url: str) -> None:
        self._url = url
        self._lock = threading.Lock()
        self._callbacks: Dict[str, List[tuple[PushCallback, asyncio.AbstractEventLoop]]] = {}
        self._app: Optional[websocket.WebSocketApp] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._app is not None

    def add(self, channel: str, callback: PushCallback, loop: asyncio.AbstractEventLoop) -> None:
        with self._lock:
            self._callbacks.setdefault(channel, []).append((callback, loop))
            if self._app is None:
                self._start()

    def remove(self, channel: str, callback: PushCallback) -> None:
        with self._lock:
            entries = self._callbacks.get(channel, [])
            self._callbacks[channel] = [entry for entry in entries if entry[0] != callback]
            if not self._callbacks[channel]:
                del self._callbacks[channel]
            if not self._callbacks and self._app is not None:
                self._stop()

    def dispatch(self, raw: str) -> None:
        try:
            message = json.loads(raw)
        except json.JSONDecodeError:
            LOGGER.warning("Ignoring malformed notification: %r", raw[:200])
            return
        if not isinstance(message, dict):
            LOGGER.warning("Ignoring malformed notification: %r", raw[:200])
            return
        channel = message.get("method")
        with self._lock:
            entries = list(self._callbacks.get(channel, ()))
        if not entries:
            LOGGER.debug("No listener for notification %s", channel)
            return
        params = message.get("params")
        for callback, loop in entries:
            loop.call_soon_threadsafe(callback, params)

    # ------------------------------------------------------------------
    def _start(self) -> None:
        LOGGER.info("Listening for engine notifications on %s", self._url)
        self._app = websocket.WebSocketApp(
            self._url,
            on_message=lambda _ws, raw: self.dispatch(raw),
            on_error=lambda _ws, exc: LOGGER.warning("Notification socket error: %s", exc),
        )
        self._thread = threading.Thread(
            target=self._app.run_forever,
            kwargs={"reconnect": 5},
            name="super-seed-notifications",
            daemon=True,
        )
        self._thread.start()

    def _stop(self) -> None:
        LOGGER.info("Closing notification socket")
        app, self._app = self._app, None
        self._thread = None
        if app is not None:
            app.close()
