"""Map schedule documents from the external store onto models.

The store speaks camelCase and is loose about types: rates arrive as
``"$45.00"``, overrides as strings, special activities as booleans or
encoded strings. Everything is parsed once here so the calculator only ever
sees typed values.
"""

from __future__ import annotations

import logging
import math
import re
from decimal import Decimal, InvalidOperation

from calculator import parse_special_activity
from geo import leading_float
from models import Config, Employee, Schedule, TimesheetEntry
from timestamps import parse_instant

logger = logging.getLogger(__name__)

_NON_NUMERIC = re.compile(r"[^0-9.\-]")


def parse_number(val: object) -> float | None:
    """Parse a numeric field; None when empty or not a number."""
    if val is None or val == "":
        return None
    number = leading_float(val)
    if not math.isfinite(number):
        return None
    return number


def parse_rate(val: object) -> Decimal | None:
    """Parse an hourly rate like ``45``, ``"45.5"`` or ``"$45.00"``."""
    if val is None or val == "" or isinstance(val, bool):
        return None
    if isinstance(val, (int, float, Decimal)):
        text = str(val)
    else:
        text = _NON_NUMERIC.sub("", str(val))
    if not text:
        return None
    try:
        rate = Decimal(text)
    except InvalidOperation:
        return None
    return rate if rate.is_finite() else None


def _text(val: object) -> str:
    return "" if val is None else str(val).strip()


def entry_from_dict(data: dict, schedule_id: str | None = None) -> TimesheetEntry:
    """Build a TimesheetEntry from one element of a schedule's ``timesheet`` array."""
    return TimesheetEntry(
        employee=_text(data.get("employee")),
        type=_text(data.get("type")),
        clock_in=parse_instant(data.get("clockIn")),
        clock_out=parse_instant(data.get("clockOut")),
        lunch_start=parse_instant(data.get("lunchStart")),
        lunch_end=parse_instant(data.get("lunchEnd")),
        location_in=_text(data.get("locationIn")) or None,
        location_out=_text(data.get("locationOut")) or None,
        manual_distance=parse_number(data.get("manualDistance")),
        manual_duration=parse_number(data.get("manualDuration")),
        dump_washout=parse_special_activity(data.get("dumpWashout")),
        shop_time=parse_special_activity(data.get("shopTime")),
        per_diem=parse_number(data.get("perDiem")),
        hourly_rate_site=parse_rate(data.get("hourlyRateSITE")),
        hourly_rate_drive=parse_rate(data.get("hourlyRateDrive")),
        comments=_text(data.get("comments")) or None,
        id=_text(data.get("_id") or data.get("recordId")) or None,
        schedule_id=schedule_id,
    )


def schedule_from_dict(
    data: dict,
    estimate_fringes: dict[str, str] | None = None,
    config: Config | None = None,
) -> Schedule:
    """Build a Schedule and its entries from a schedule document.

    Fringe falls back to the estimate's fringe, then to the configured default.
    """
    config = config or Config()
    schedule_id = _text(data.get("_id"))
    estimate = _text(data.get("estimate") or data.get("quoteNumber") or data.get("quote_number"))
    fringe = _text(data.get("fringe")) or (estimate_fringes or {}).get(estimate) or config.default_fringe

    entries = []
    raw_entries = data.get("timesheet") or []
    if not isinstance(raw_entries, list):
        logger.warning("Schedule %s has a non-list timesheet; ignoring it", schedule_id)
        raw_entries = []
    for raw in raw_entries:
        if not isinstance(raw, dict):
            logger.warning("Skipping malformed timesheet entry on schedule %s", schedule_id)
            continue
        entries.append(entry_from_dict(raw, schedule_id))

    return Schedule(
        id=schedule_id,
        from_date=parse_instant(data.get("fromDate")),
        estimate=estimate,
        title=_text(data.get("projectTitle") or data.get("title") or data.get("jobTitle")) or "Unknown Project",
        fringe=fringe,
        item=_text(data.get("item")) or "Uncategorized",
        certified_payroll=_text(data.get("certifiedPayroll")).lower() in ("yes", "true"),
        timesheet=entries,
    )


def employee_from_dict(data: dict) -> Employee:
    """Build an Employee from an employee directory option (``value`` is the key)."""
    return Employee(
        id=_text(data.get("value") or data.get("email")),
        label=_text(data.get("label")),
        hourly_rate_site=parse_rate(data.get("hourlyRateSITE")),
        hourly_rate_drive=parse_rate(data.get("hourlyRateDrive")),
        address=_text(data.get("address")),
        phone=_text(data.get("phone")),
        position=_text(data.get("companyPosition")),
        classification=_text(data.get("classification")),
    )


def employees_from_list(items: list) -> dict[str, Employee]:
    """Employee directory keyed by id, with a lowercase alias for email lookups."""
    directory: dict[str, Employee] = {}
    for item in items or []:
        if not isinstance(item, dict):
            continue
        employee = employee_from_dict(item)
        if not employee.id:
            continue
        directory[employee.id] = employee
        directory.setdefault(employee.id.lower(), employee)
    return directory


def estimate_fringes_from_list(items: list) -> dict[str, str]:
    """Map estimate reference to its fringe code."""
    fringes = {}
    for item in items or []:
        if isinstance(item, dict) and item.get("value") and item.get("fringe"):
            fringes[_text(item["value"])] = _text(item["fringe"])
    return fringes


def workers_comp_rates_from_list(items: list) -> dict[str, Decimal]:
    """Workers-comp rate per $100 of wages, keyed by lowercase item description.

    Only ``WComp`` constants count; entries whose value is not a number are skipped.
    """
    rates: dict[str, Decimal] = {}
    for item in items or []:
        if not isinstance(item, dict) or item.get("type") != "WComp":
            continue
        description = _text(item.get("description")).lower()
        rate = parse_rate(item.get("value"))
        if not description or rate is None:
            logger.warning("Skipping workers-comp constant %r", item)
            continue
        rates[description] = rate
    return rates
