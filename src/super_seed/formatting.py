"""Human readable strings for sizes, rates, durations and satoshis."""

from __future__ import annotations

DATA_UNIT = 1024
UNKNOWN_ETA = "Unknown"


def format_bytes(size: int) -> str:
    if size < DATA_UNIT:
        return f"{size} B"
    div, exp = DATA_UNIT, 0
    n = size // DATA_UNIT
    while n >= DATA_UNIT and exp < 5:
        div *= DATA_UNIT
        exp += 1
        n //= DATA_UNIT
    return f"{size / div:.1f} {'KMGTPE'[exp]}B"


def format_speed(bytes_per_second: int) -> str:
    return format_bytes(bytes_per_second) + "/s"


def format_duration(seconds: int) -> str:
    if seconds < 60:
        return f"{int(seconds)}s"
    if seconds < 3600:
        return f"{int(seconds // 60)}m"
    return f"{int(seconds // 3600)}h {int(seconds // 60) % 60}m"


def estimate_eta(total: int, completed: int, rate: int) -> str:
    """Tempo restante ou ``Unknown`` quando não há taxa de download."""
    if rate <= 0 or completed >= total:
        return UNKNOWN_ETA
    return format_duration((total - completed) // rate)


def format_satoshis(amount: int) -> str:
    return f"{amount:,} sats"
