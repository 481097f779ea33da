"""Straight-line to road distance helpers."""

from __future__ import annotations

import math
import re

EARTH_RADIUS_MI = 3958.8
DRIVING_FACTOR = 1.19

_LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def leading_float(value: object) -> float:
    """Parse the numeric prefix of a value the way a browser's parseFloat does.

    Returns NaN when there is no numeric prefix.
    """
    if isinstance(value, bool):
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    match = _LEADING_NUMBER.match(str(value if value is not None else ""))
    if not match:
        return math.nan
    return float(match.group(1))


def haversine(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in miles. Non-finite inputs give NaN, never an exception."""
    if not all(math.isfinite(v) for v in (lat1, lon1, lat2, lon2)):
        return math.nan
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    # float drift can push antipodal points just past 1
    a = min(max(a, 0.0), 1.0)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_MI * c


def parse_location(value: object) -> tuple[float, float] | None:
    """Parse a "lat,lon" string. Anything unparseable is None."""
    text = str(value if value is not None else "").strip()
    if "," not in text:
        return None
    parts = [leading_float(p.strip()) for p in text.split(",")]
    if len(parts) < 2 or math.isnan(parts[0]) or math.isnan(parts[1]):
        return None
    return parts[0], parts[1]


def driving_distance(
    start: tuple[float, float] | None,
    end: tuple[float, float] | None,
    factor: float = DRIVING_FACTOR,
) -> float:
    """Approximate road miles between two points; 0 when no distance is available."""
    if start is None or end is None:
        return 0.0
    miles = haversine(start[0], start[1], end[0], end[1]) * factor
    if not math.isfinite(miles) or miles < 0:
        return 0.0
    return miles
