"""Persistência simples em JSON das configurações do Super Seed.

As sessões em si nunca são gravadas aqui: quem guarda o estado é o motor.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict

LOGGER = logging.getLogger(__name__)

APP_DIR_NAME = "superseed"

CONFIG_DEFAULTS: Dict[str, Any] = {
    "rpc_host": "http://localhost",
    "rpc_port": 6900,
    "rpc_secret": "",
    "rpc_timeout": 60.0,
    "content_link_prefix": "magnet:?",
    "preview_timeout": 30.0,
    "confirm_timeout": 30.0,
    "publish_timeout": 60.0,
    "wallet_timeout": 30.0,
    "control_timeout": 30.0,
    "refresh_timeout": 30.0,
    "notice_duration": 3.0,
}


def user_state_dir() -> Path:
    """``$XDG_STATE_HOME/superseed``, falling back to ``~/.local/state``."""
    base = os.environ.get("XDG_STATE_HOME") or str(Path.home() / ".local" / "state")
    return Path(base) / APP_DIR_NAME


class PersistenceStore:
    """Gerencia leitura/escrita do arquivo de configuração."""

    def __init__(self, base_dir: Path | None = None) -> None:
        state_dir = user_state_dir() if base_dir is None else Path(base_dir)
        state_dir.mkdir(parents=True, exist_ok=True)
        self.state_dir = state_dir
        self._config_path = state_dir / "config.json"
        self.config = self._load_config()

    # ------------------------------------------------------------------
    def save_config(self, config: Dict[str, Any]) -> None:
        merged = self.config | config
        self._write_json(self._config_path, merged)
        self.config = merged

    # ------------------------------------------------------------------
    def _load_config(self) -> Dict[str, Any]:
        data = self._read_json(self._config_path, {})
        if not isinstance(data, dict):
            LOGGER.warning("Ignorando %s: esperado um objeto JSON", self._config_path)
            data = {}
        return CONFIG_DEFAULTS | data

    def _read_json(self, path: Path, fallback: Any) -> Any:
        try:
            if path.exists():
                with path.open("r", encoding="utf-8") as handle:
                    return json.load(handle)
        except (json.JSONDecodeError, OSError) as exc:
            LOGGER.warning("Falha ao ler %s: %s", path, exc)
        return fallback

    def _write_json(self, path: Path, payload: Any) -> None:
        try:
            with path.open("w", encoding="utf-8") as handle:
                json.dump(payload, handle, ensure_ascii=False, indent=2)
        except OSError as exc:
            LOGGER.error("Falha ao gravar %s: %s", path, exc)
