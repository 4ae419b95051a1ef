"""Client composition for Super Seed."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from .acquire import AcquireWorkflow
from .controls import SessionControls
from .gateway import RemoteGateway, RpcGateway
from .notices import Notice
from .persistence import CONFIG_DEFAULTS
from .projection import SessionView, project, set_filter, set_search
from .publish import PublishWorkflow
from .registry import SessionRegistry
from .store import ClientState, Store
from .synchronizer import Synchronizer
from .wallet import WalletCache, WalletController

LOGGER = logging.getLogger(__name__)


def configure_logging(debug: bool = False, log_dir: Optional[Path] = None) -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.insert(0, logging.FileHandler(log_dir / "log.txt", encoding="utf-8"))
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=handlers,
    )
    logging.debug("Logging configured (log dir: %s)", log_dir)


def gateway_from_config(config: Dict[str, Any]) -> RpcGateway:
    return RpcGateway(
        host=config["rpc_host"],
        port=int(config["rpc_port"]),
        secret=config["rpc_secret"],
        timeout=float(config["rpc_timeout"]),
    )


class SuperSeedClient:
    """Wires the store, the engine gateway and every workflow together."""

    def __init__(self, gateway: RemoteGateway, config: Optional[Dict[str, Any]] = None) -> None:
        settings = CONFIG_DEFAULTS | (config or {})
        self.gateway = gateway
        self.store = Store()
        self.notice = Notice(self.store, duration=float(settings["notice_duration"]))
        self.registry = SessionRegistry(
            gateway, self.store, timeout=float(settings["refresh_timeout"])
        )
        self.wallet_cache = WalletCache(
            gateway, self.store, timeout=float(settings["wallet_timeout"])
        )
        self.wallet = WalletController(
            gateway, self.wallet_cache, self.notice, timeout=float(settings["wallet_timeout"])
        )
        self.synchronizer = Synchronizer(gateway, self.registry, self.wallet_cache)
        self.acquire = AcquireWorkflow(
            gateway,
            self.registry,
            self.notice,
            preview_timeout=float(settings["preview_timeout"]),
            confirm_timeout=float(settings["confirm_timeout"]),
            link_prefix=settings["content_link_prefix"],
        )
        self.publish = PublishWorkflow(
            gateway, self.registry, self.notice, timeout=float(settings["publish_timeout"])
        )
        self.controls = SessionControls(
            gateway,
            self.registry,
            self.store,
            self.notice,
            timeout=float(settings["control_timeout"]),
        )

    # ------------------------------------------------------------------
    def start(self) -> None:
        self.synchronizer.start()

    def stop(self) -> None:
        self.synchronizer.stop()

    def view(self) -> SessionView:
        return project(self.store.state)

    def set_filter(self, status_filter: str) -> None:
        set_filter(self.store, status_filter)

    def set_search(self, text: str) -> None:
        set_search(self.store, text)

    def subscribe(self, callback: Callable[[SessionView], None]) -> None:
        """Call ``callback`` with a fresh projection on every state change."""

        def _on_state(state: ClientState) -> None:
            callback(project(state))

        self.store.subscribe(_on_state)
