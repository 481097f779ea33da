"""Derive payable hours and mileage from raw timesheet entries.

Drive Time is billed by distance at an average speed plus fixed-duration
special activities; Site Time is billed by elapsed clock time minus lunch.
Nothing in here raises: incomplete entries undercount instead of breaking a
whole report.
"""

from __future__ import annotations

import math
import re
from datetime import datetime

from geo import driving_distance, leading_float, parse_location
from models import ComputedRecord, Config, Schedule, TimesheetEntry, TimesheetResult
from timestamps import parse_instant

_QTY = re.compile(r"\((\d+)\s+qty\)")


def parse_special_activity(value: object) -> int | None:
    """Quantity logged for a special activity field.

    The store holds either a boolean-like flag (one unit) or an encoded
    string such as ``"0.50 hrs (2 qty)"``.
    """
    if value is None or value is False:
        return None
    if value is True:
        return 1
    if isinstance(value, int) and not isinstance(value, bool):
        return value if value > 0 else None
    text = str(value).strip()
    if match := _QTY.search(text):
        qty = int(match.group(1))
        return qty or None
    if text.lower() in ("true", "yes"):
        return 1
    return None


def format_special_activity(quantity: int, unit_hours: float) -> str:
    """Encode a quantity the way the store records it, e.g. ``"0.50 hrs (1 qty)"``."""
    return f"{quantity * unit_hours:.2f} hrs ({quantity} qty)"


def _positive(value: object) -> float:
    """The value as a float override if it is finite and > 0, else 0."""
    if value is None:
        return 0.0
    number = leading_float(value)
    if not math.isfinite(number) or number <= 0:
        return 0.0
    return number


def _quantity(value: object) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return max(value, 0)
    return parse_special_activity(value) or 0


def round_site_hours(raw: float, clock_in: datetime, config: Config | None = None) -> float:
    """Apply the quarter-hour rounding policy to raw elapsed hours.

    Entries clocked in before the cutoff keep their raw hours. From the cutoff
    on, 7.75-8.0 snaps to 8.0 and everything else rounds its minutes down to a
    quarter-hour band.
    """
    config = config or Config()
    if parse_instant(clock_in) < parse_instant(config.rounding_cutoff):
        return raw
    if 7.75 <= raw < 8.0:
        return 8.0

    hours = math.floor(raw)
    minutes = math.floor((raw - hours) * 60 + 0.5)
    if 1 < minutes <= 14:
        rounded = 0
    elif 14 < minutes <= 29:
        rounded = 15
    elif 29 < minutes <= 44:
        rounded = 30
    elif 44 < minutes <= 59:
        rounded = 45
    else:
        rounded = 0
    return hours + rounded / 60


def _site_hours(entry: TimesheetEntry, config: Config) -> float:
    clock_in = parse_instant(entry.clock_in)
    clock_out = parse_instant(entry.clock_out)
    if clock_in is None or clock_out is None:
        return 0.0

    duration = (clock_out - clock_in).total_seconds()
    lunch_start = parse_instant(entry.lunch_start)
    lunch_end = parse_instant(entry.lunch_end)
    if lunch_start is not None and lunch_end is not None:
        lunch = (lunch_end - lunch_start).total_seconds()
        if lunch > 0:
            duration -= lunch
    if duration <= 0:
        return 0.0

    return round_site_hours(duration / 3600, clock_in, config)


def calculate_timesheet(entry: TimesheetEntry, config: Config | None = None) -> TimesheetResult:
    """Compute hours, billed distance and raw geodistance for one entry."""
    config = config or Config()

    calculated = driving_distance(
        parse_location(entry.location_in),
        parse_location(entry.location_out),
        config.driving_factor,
    )

    manual_hours = _positive(entry.manual_duration)

    if entry.is_drive:
        special = (
            config.washout_hours * _quantity(entry.dump_washout)
            + config.shop_hours * _quantity(entry.shop_time)
        )
        manual_distance = _positive(entry.manual_distance)
        distance = manual_distance if manual_distance > 0 else calculated

        if manual_hours > 0:
            hours = manual_hours
        else:
            speed = _positive(config.average_speed_mph)
            hours = (distance / speed if speed else 0.0) + special
        return TimesheetResult(hours=hours, distance=distance, calculated_distance=calculated)

    if manual_hours > 0:
        hours = manual_hours
    else:
        hours = _site_hours(entry, config)
    return TimesheetResult(hours=hours, distance=0.0, calculated_distance=calculated)


def compute_record(
    entry: TimesheetEntry,
    schedule: Schedule | None = None,
    config: Config | None = None,
) -> ComputedRecord:
    """Calculate an entry and join it with its schedule's context.

    A Drive Time entry that has no clock-in yet is dated by the schedule's
    start date so it still lands in the right report period.
    """
    config = config or Config()
    result = calculate_timesheet(entry, config)

    clock_in = parse_instant(entry.clock_in)
    if clock_in is None and entry.is_drive and schedule is not None:
        clock_in = parse_instant(schedule.from_date)

    record = ComputedRecord(
        entry=entry,
        clock_in=clock_in,
        hours=result.hours,
        distance=result.distance,
        calculated_distance=result.calculated_distance,
    )
    if schedule is not None:
        record.schedule_id = schedule.id
        record.estimate = schedule.estimate
        record.title = schedule.title
        record.fringe = schedule.fringe or config.default_fringe
        record.item = schedule.item
        record.certified = schedule.certified_payroll
    return record


def compute_records(schedules: list[Schedule], config: Config | None = None) -> list[ComputedRecord]:
    """Flatten every schedule's timesheet into computed records, newest first."""
    config = config or Config()
    records = [
        compute_record(entry, schedule, config)
        for schedule in schedules
        for entry in schedule.timesheet
    ]
    dated = sorted(
        (r for r in records if r.clock_in is not None),
        key=lambda r: r.clock_in,
        reverse=True,
    )
    return dated + [r for r in records if r.clock_in is None]


def base_estimate(value: str | None) -> str:
    """Estimate reference without its version suffix ("E-100-V2" -> "E-100")."""
    if not value:
        return ""
    return re.split(r"-[Vv]", value, maxsplit=1)[0].strip()


def filter_records(
    records: list[ComputedRecord],
    employee: str | None = None,
    estimate: str | None = None,
    entry_type: str | None = None,
) -> list[ComputedRecord]:
    """Narrow records by employee, estimate (any version) and entry type."""
    result = []
    wanted_estimate = base_estimate(estimate)
    for record in records:
        if employee and record.employee != employee:
            continue
        if estimate and base_estimate(record.estimate) != wanted_estimate:
            continue
        if entry_type and record.type != entry_type:
            continue
        result.append(record)
    return result
