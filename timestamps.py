"""Timestamp normalization.

Source timestamps arrive as ISO strings (with or without a ``Z``, an offset,
or fractional seconds) or as ``M/D/YYYY h:mm AM`` strings typed in by
managers. They were all recorded in one de-facto fixed offset, so every
wall-clock reading is taken as UTC as-is: zone hints are dropped, never
converted. Comparisons and durations therefore never depend on the local
timezone of the machine running the report.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timezone

_ISO = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})[T ](\d{2}):(\d{2})(?::(\d{2})(?:\.(\d{1,6})\d*)?)?"
)
_US = re.compile(
    r"^(\d{1,2})/(\d{1,2})/(\d{4})\s+(\d{1,2}):(\d{2})(?::(\d{2}))?(?:\s*([AaPp][Mm]))?"
)
_DATE_ONLY = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")

# Last-resort formats, tried after any trailing zone marker is stripped
_FALLBACK_FORMATS = (
    "%m/%d/%Y",
    "%b %d, %Y %H:%M",
    "%b %d, %Y %I:%M %p",
    "%B %d, %Y %H:%M",
    "%B %d, %Y %I:%M %p",
    "%b %d, %Y",
    "%B %d, %Y",
    "%a %b %d %Y %H:%M:%S",
)
_ZONE_SUFFIX = re.compile(r"\s*(?:Z|UTC|GMT(?:[+-]\d{4})?(?:\s*\(.*\))?)$", re.IGNORECASE)


def _build(year, month, day, hour=0, minute=0, second=0, micro=0) -> datetime | None:
    try:
        return datetime(
            int(year), int(month), int(day), int(hour), int(minute), int(second), int(micro),
            tzinfo=timezone.utc,
        )
    except ValueError:
        return None


def parse_instant(value: object) -> datetime | None:
    """Parse a timestamp into a UTC-anchored datetime, or None if unparseable."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)

    text = str(value).strip()
    if not text:
        return None

    if match := _ISO.match(text):
        y, mo, d, h, mi, s, frac = match.groups()
        micro = int(frac.ljust(6, "0")) if frac else 0
        return _build(y, mo, d, h, mi, s or 0, micro)

    if match := _US.match(text):
        mo, d, y, h, mi, s, ampm = match.groups()
        hour = int(h)
        if ampm:
            ampm = ampm.upper()
            if ampm == "PM" and hour < 12:
                hour += 12
            elif ampm == "AM" and hour == 12:
                hour = 0
        return _build(y, mo, d, hour, mi, s or 0)

    if match := _DATE_ONLY.match(text):
        return _build(*match.groups())

    bare = _ZONE_SUFFIX.sub("", text)
    for fmt in _FALLBACK_FORMATS:
        try:
            return datetime.strptime(bare, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
    return None


def to_iso(instant: datetime) -> str:
    """Canonical ``YYYY-MM-DDTHH:MM:SS.mmmZ`` form."""
    instant = instant.replace(tzinfo=timezone.utc)
    return instant.strftime("%Y-%m-%dT%H:%M:%S.") + f"{instant.microsecond // 1000:03d}Z"


def normalize_timestamp(value: object) -> str:
    """Canonical UTC string for any accepted encoding, or "" if unparseable.

    Normalizing an already-normalized value returns it unchanged.
    """
    instant = parse_instant(value)
    return to_iso(instant) if instant else ""


def format_time_only(value: object) -> str:
    """Wall-clock time as ``h:mm AM``; ``-`` when missing."""
    instant = parse_instant(value)
    if instant is None:
        return "-" if not value else str(value)
    hour = instant.hour % 12 or 12
    suffix = "PM" if instant.hour >= 12 else "AM"
    return f"{hour}:{instant.minute:02d} {suffix}"


def format_date_only(value: object) -> str:
    """Date as ``MM/DD/YYYY``; ``-`` when missing."""
    instant = parse_instant(value)
    if instant is None:
        return "-" if not value else str(value)
    return instant.strftime("%m/%d/%Y")
