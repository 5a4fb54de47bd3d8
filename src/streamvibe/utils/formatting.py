"""Display helpers for durations and view counters."""

from __future__ import annotations

import math


def format_time(seconds: float) -> str:
    """Render a playback position as ``m:ss``."""

    if not math.isfinite(seconds) or seconds < 0:
        seconds = 0.0
    minutes = int(seconds // 60)
    remainder = int(seconds % 60)
    return f"{minutes}:{remainder:02d}"


def format_views(count: int) -> str:
    """Abbreviate a view counter, e.g. ``1.2M`` or ``3.4K``."""

    if count >= 1_000_000:
        return f"{count / 1_000_000:.1f}M"
    if count >= 1_000:
        return f"{count / 1_000:.1f}K"
    return str(count)


__all__ = ["format_time", "format_views"]
