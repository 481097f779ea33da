"""Week and period utilities for report keys and period pickers.

Everything here works in UTC so week boundaries never drift with the local
timezone of the machine producing the report.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone


def _as_date(d: date | datetime) -> date:
    if isinstance(d, datetime):
        if d.tzinfo is not None:
            d = d.astimezone(timezone.utc)
        return d.date()
    return d


def iso_week_number(d: date | datetime) -> int:
    """ISO-8601 week number: the week containing the year's first Thursday is week 1."""
    day = _as_date(d)
    # Shift to the Thursday of the same Monday-start week (Sunday counts as day 7)
    thursday = day + timedelta(days=4 - day.isoweekday())
    year_start = date(thursday.year, 1, 1)
    return (thursday - year_start).days // 7 + 1


def get_week_start(d: date | datetime) -> datetime:
    """Midnight UTC of the Monday that starts the week containing d."""
    day = _as_date(d)
    monday = day - timedelta(days=day.isoweekday() - 1)
    return datetime.combine(monday, time.min, tzinfo=timezone.utc)


def get_week_end(d: date | datetime) -> datetime:
    """Last instant (23:59:59.999 UTC) of the Sunday ending the week containing d."""
    start = get_week_start(d)
    return start + timedelta(days=6, hours=23, minutes=59, seconds=59, milliseconds=999)


def add_weeks(d: datetime, weeks: int) -> datetime:
    return d + timedelta(days=7 * weeks)


def sub_weeks(d: datetime, weeks: int) -> datetime:
    return add_weeks(d, -weeks)


def format_mmddyy(d: date | datetime) -> str:
    return _as_date(d).strftime("%m/%d/%y")


def week_range_label(d: date | datetime) -> str:
    """Label like ``(23) 06/02/25 to 06/08/25`` for the Monday-start week containing d."""
    start = get_week_start(d)
    end = get_week_end(d)
    return f"({iso_week_number(start)}) {format_mmddyy(start)} to {format_mmddyy(end)}"


def get_weeks_in_year(year: int, today: date | None = None) -> list[dict]:
    """Week picker options for a year, newest first.

    For the current year the list starts at the week containing today;
    other years start from the week containing December 31st. Only weeks
    starting inside the year are listed.
    """
    today = today or datetime.now(timezone.utc).date()
    anchor = today if today.year == year else date(year, 12, 31)

    weeks = []
    current = get_week_start(anchor)
    while current.year >= year and len(weeks) <= 53:
        if current.year == year:
            end = get_week_end(current)
            start_str = format_mmddyy(current)
            end_str = format_mmddyy(end)
            weeks.append({
                "value": f"{start_str}-{end_str}",
                "label": f"Week {iso_week_number(current)} ({start_str} - {end_str})",
                "start": current,
                "end": end,
            })
        current = sub_weeks(current, 1)
    return weeks
