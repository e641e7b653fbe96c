"""logic/formatters.py — Display strings for KPIs, clocks and countdowns."""

from __future__ import annotations
import time


def format_teu(value: float) -> str:
    if value >= 1000:
        return f"{value / 1000:.1f}K"
    return f"{value:,.0f}"


def format_percent(value: float) -> str:
    return f"{value:.1f}%"


def format_hours(value: float) -> str:
    return f"{value:.1f}h"


def format_index(value: float) -> str:
    return f"{value:.0f}"


_FORMATTERS = {
    "teu": format_teu,
    "percent": format_percent,
    "hours": format_hours,
    "index": format_index,
}


def format_kpi(value: float, fmt: str) -> str:
    """Render *value* by its KPI format tag (unknown tags → index)."""
    return _FORMATTERS.get(fmt, format_index)(value)


def format_timestamp(now: float | None = None) -> str:
    """24h ``HH:MM:SS`` of local wall-clock time."""
    return time.strftime("%H:%M:%S", time.localtime(now))


def format_countdown(seconds: float) -> str:
    seconds = max(0.0, seconds)
    m = int(seconds // 60)
    s = int(seconds % 60)
    return f"{m}m {s}s" if m > 0 else f"{s}s"
