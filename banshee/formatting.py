"""Human-readable presentation of raw engine outputs.

The engines only ever return meters and milliseconds; these helpers are for
the display layer.
"""

from __future__ import annotations

from banshee.activity import pace_min_per_km
from banshee.constants import METERS_PER_KM, MS_PER_SECOND


def format_duration(duration_ms: int) -> str:
    """``M:SS`` under an hour, ``H:MM:SS`` otherwise. Negative input shows a sign."""
    sign = "-" if duration_ms < 0 else ""
    total_seconds = abs(int(duration_ms)) // MS_PER_SECOND
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    if hours > 0:
        return f"{sign}{hours}:{minutes:02d}:{seconds:02d}"
    return f"{sign}{minutes}:{seconds:02d}"


def format_pace(distance_m: float, duration_ms: int) -> str:
    """Average pace as ``M:SS /km``; ``0:00 /km`` when either input is zero."""
    if distance_m <= 0 or duration_ms <= 0:
        return "0:00 /km"
    total_seconds = int(pace_min_per_km(distance_m, duration_ms) * 60)
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes}:{seconds:02d} /km"


def format_distance(distance_m: float) -> str:
    """Meters below 1 km (``850 m``), kilometers with two decimals above."""
    if distance_m < METERS_PER_KM:
        return f"{distance_m:.0f} m"
    return f"{distance_m / METERS_PER_KM:.2f} km"


def format_time_difference(delta_ms: int) -> str:
    """Signed gap to the banshee, e.g. ``+0:12`` (ahead) or ``-1:40`` (behind)."""
    text = format_duration(abs(delta_ms))
    return f"-{text}" if delta_ms < 0 else f"+{text}"


def format_distance_gap(delta_m: float) -> str:
    """Distance gap to the banshee, e.g. ``40 m behind`` or ``1.20 km ahead``.

    *delta_m* is banshee distance minus runner distance; gaps under a meter
    read ``Even``.
    """
    if abs(delta_m) < 1.0:
        return "Even"
    side = "behind" if delta_m > 0 else "ahead"
    return f"{format_distance(abs(delta_m))} {side}"
