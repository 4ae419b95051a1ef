"""Modelos de dados compartilhados pela aplicação.

Os payloads chegam do motor em camelCase; ``from_dict`` é a fronteira onde
eles são normalizados (status único, progresso limitado, textos de exibição
preenchidos quando faltam).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Tuple

from .formatting import (
    UNKNOWN_ETA,
    estimate_eta,
    format_bytes,
    format_satoshis,
    format_speed,
)


class SessionStatus(str, Enum):
    LOADING = "loading"
    DOWNLOADING = "downloading"
    SEEDING = "seeding"
    COMPLETED = "completed"
    PAUSED = "paused"
    STALLED = "stalled"

    @classmethod
    def parse(cls, raw: Any) -> "SessionStatus":
        try:
            return cls(str(raw).lower())
        except ValueError:
            return cls.LOADING


RESUMABLE_STATUSES = frozenset({SessionStatus.PAUSED, SessionStatus.STALLED})


def _clamp_progress(value: Any) -> float:
    try:
        progress = float(value or 0.0)
    except (TypeError, ValueError):
        return 0.0
    return min(max(progress, 0.0), 100.0)


def _non_negative(value: Any) -> int:
    try:
        return max(int(value or 0), 0)
    except (TypeError, ValueError):
        return 0


def _remaining_time(size: int, progress: float, rate: int) -> str:
    remaining = int(size * (100.0 - progress) / 100.0)
    return estimate_eta(size, size - remaining, rate)


def _parse_timestamp(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


@dataclass(frozen=True)
class FileEntry:
    name: str
    size: int = 0
    size_str: str = "0 B"
    progress: float = 0.0
    path: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FileEntry":
        size = _non_negative(data.get("size"))
        return cls(
            name=data.get("name") or "",
            size=size,
            size_str=data.get("sizeStr") or format_bytes(size),
            progress=_clamp_progress(data.get("progress")),
            path=data.get("path") or "",
        )


@dataclass(frozen=True)
class Session:
    """One transfer tracked by the engine, acquiring or publishing."""

    id: str
    content_id: str
    name: str
    status: SessionStatus = SessionStatus.LOADING
    total_size: int = 0
    total_size_str: str = "0 B"
    progress: float = 0.0
    download_rate: int = 0
    download_rate_str: str = "0 B/s"
    upload_rate: int = 0
    upload_rate_str: str = "0 B/s"
    peer_count: int = 0
    seed_count: int = 0
    eta: str = UNKNOWN_ETA
    files: Tuple[FileEntry, ...] = ()
    satoshis_earned: int = 0
    satoshis_spent: int = 0
    price_per_piece: int | None = None
    added_at: datetime | None = None

    @property
    def is_paused(self) -> bool:
        return self.status is SessionStatus.PAUSED

    @property
    def is_resumable(self) -> bool:
        return self.status in RESUMABLE_STATUSES

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Session":
        status = SessionStatus.parse(data.get("status"))
        # isPaused e status vêm de fontes diferentes no motor; aqui viram um só campo.
        if data.get("isPaused") and status is not SessionStatus.STALLED:
            status = SessionStatus.PAUSED

        content_id = data.get("infoHash") or data.get("contentId") or ""
        size = _non_negative(data.get("size", data.get("totalSize")))
        down = _non_negative(data.get("downloadSpeed", data.get("downloadRate")))
        up = _non_negative(data.get("uploadSpeed", data.get("uploadRate")))
        price = data.get("pricePerPiece")
        progress = _clamp_progress(data.get("progress"))
        return cls(
            id=data.get("id") or content_id,
            content_id=content_id,
            name=data.get("name") or "",
            status=status,
            total_size=size,
            total_size_str=data.get("sizeStr") or format_bytes(size),
            progress=progress,
            download_rate=down,
            download_rate_str=data.get("downloadSpeedStr") or format_speed(down),
            upload_rate=up,
            upload_rate_str=data.get("uploadSpeedStr") or format_speed(up),
            peer_count=_non_negative(data.get("peers")),
            seed_count=_non_negative(data.get("seeds")),
            eta=data.get("eta") or _remaining_time(size, progress, down),
            files=tuple(FileEntry.from_dict(item) for item in data.get("files") or ()),
            satoshis_earned=_non_negative(data.get("satoshisEarned")),
            satoshis_spent=_non_negative(
                data.get("satoshisSpend", data.get("satoshisSpent"))
            ),
            price_per_piece=None if price is None else _non_negative(price),
            added_at=_parse_timestamp(data.get("addedAt")),
        )


@dataclass(frozen=True)
class AggregateStats:
    total_download_rate_str: str = "0 B/s"
    total_upload_rate_str: str = "0 B/s"
    active_session_count: int = 0
    total_peer_count: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AggregateStats":
        return cls(
            total_download_rate_str=data.get("totalDownload") or "0 B/s",
            total_upload_rate_str=data.get("totalUpload") or "0 B/s",
            active_session_count=_non_negative(data.get("activeTorrents", data.get("activeSessions"))),
            total_peer_count=_non_negative(data.get("totalPeers")),
        )


@dataclass(frozen=True)
class WalletState:
    address: str = ""
    balance: int = 0

    @property
    def balance_str(self) -> str:
        return format_satoshis(self.balance)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WalletState":
        return cls(
            address=data.get("address", ""),
            balance=_non_negative(data.get("balance")),
        )


@dataclass(frozen=True)
class ContentPreview:
    """Informational only: confirming a transfer uses the original link."""

    name: str
    content_id: str
    total_size: int = 0
    total_size_str: str = "0 B"
    price_per_piece: int = 0
    total_piece_count: int = 0

    @property
    def estimated_cost(self) -> int:
        return self.price_per_piece * self.total_piece_count

    @property
    def estimated_cost_str(self) -> str:
        return format_satoshis(self.estimated_cost)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ContentPreview":
        size = _non_negative(data.get("size", data.get("totalSize")))
        return cls(
            name=data.get("name") or "",
            content_id=data.get("infoHash") or data.get("contentId") or "",
            total_size=size,
            total_size_str=data.get("sizeStr") or format_bytes(size),
            price_per_piece=_non_negative(data.get("pricePerPiece")),
            total_piece_count=_non_negative(
                data.get("totalPieces", data.get("totalPieceCount"))
            ),
        )
