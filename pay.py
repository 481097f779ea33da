"""Pay tiers, the weekly payroll report and the workers-comp report.

Hours up to 8 are regular, the 8-12 band is overtime at 1.5x and anything
past 12 is double time. ``calculate_pay_tiers`` does not care what the hours
represent: the fringe view feeds it one record at a time, while the weekly
payroll report feeds it each employee-day's Site Time total. Which basis is
correct under the applicable payroll rules is still an open question.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from aggregate import group_by_category
from models import CategoryGroup, ComputedRecord, Config, Employee, PayTiers
from utils import get_week_end, get_week_start

ZERO = Decimal("0")
REGULAR_LIMIT = Decimal("8")
OVERTIME_LIMIT = Decimal("12")
CENTS = Decimal("0.01")
UNCATEGORIZED = "Uncategorized"


def to_decimal(value: object) -> Decimal:
    """Decimal for a numeric value; non-numeric and non-finite values are 0."""
    if isinstance(value, Decimal):
        return value if value.is_finite() else ZERO
    if isinstance(value, float) and not math.isfinite(value):
        return ZERO
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return ZERO
    return result if result.is_finite() else ZERO


def calculate_pay_tiers(hours: object, rate: object, config: Config | None = None) -> PayTiers:
    """Split hours into regular/overtime/double-time buckets and price them."""
    config = config or Config()
    total = max(to_decimal(hours), ZERO)
    rate = to_decimal(rate)

    reg = min(REGULAR_LIMIT, total)
    ot = min(OVERTIME_LIMIT - REGULAR_LIMIT, max(ZERO, total - REGULAR_LIMIT))
    dt = max(ZERO, total - OVERTIME_LIMIT)

    reg_pay = reg * rate
    ot_pay = ot * rate * config.overtime_multiplier
    dt_pay = dt * rate * config.double_time_multiplier
    return PayTiers(
        reg_hrs=reg,
        ot_hrs=ot,
        dt_hrs=dt,
        reg_pay=reg_pay,
        ot_pay=ot_pay,
        dt_pay=dt_pay,
        gross_pay=reg_pay + ot_pay + dt_pay,
    )


def find_employee(employees: dict[str, Employee] | None, key: str) -> Employee | None:
    """Directory lookup that tolerates differences in email case."""
    if not employees or not key:
        return None
    return employees.get(key) or employees.get(key.lower())


def employee_rates(employee: Employee | None, config: Config | None = None) -> tuple[Decimal, Decimal]:
    """(site rate, travel rate) for an employee, falling back to configured defaults."""
    config = config or Config()
    site = employee.hourly_rate_site if employee else None
    if site is None:
        site = config.default_site_rate
    travel = employee.hourly_rate_drive if employee else None
    if travel is None:
        travel = site * config.travel_rate_factor
    return site, travel


def price_records(
    records: list[ComputedRecord],
    employees: dict[str, Employee] | None = None,
    config: Config | None = None,
) -> list[ComputedRecord]:
    """Attach per-record pay tiers to the Site Time records, as the fringe view reports them."""
    config = config or Config()
    priced = []
    for record in records:
        if record.is_drive:
            continue
        site_rate, _ = employee_rates(find_employee(employees, record.employee), config)
        record.pay = calculate_pay_tiers(record.hours, site_rate, config)
        priced.append(record)
    return priced


@dataclass
class PayrollDay:
    date: date
    estimates: list[str] = field(default_factory=list)
    certified: bool = False
    site_hours: float = 0.0
    travel_hours: float = 0.0
    per_diem: Decimal = ZERO
    records: list[ComputedRecord] = field(default_factory=list)
    tiers: PayTiers = field(default_factory=PayTiers)

    @property
    def travel(self) -> Decimal:
        return to_decimal(self.travel_hours)

    @property
    def total(self) -> Decimal:
        return self.tiers.total_hrs + self.travel


@dataclass
class EmployeePayroll:
    employee: str
    name: str
    rate_site: Decimal
    rate_travel: Decimal
    days: list[PayrollDay]
    address: str = "N/A"
    phone: str = "N/A"
    position: str = "Technician"
    classification: str = "N/A"

    @property
    def total_reg(self) -> Decimal:
        return sum((d.tiers.reg_hrs for d in self.days), ZERO)

    @property
    def total_ot(self) -> Decimal:
        return sum((d.tiers.ot_hrs for d in self.days), ZERO)

    @property
    def total_dt(self) -> Decimal:
        return sum((d.tiers.dt_hrs for d in self.days), ZERO)

    @property
    def total_travel(self) -> Decimal:
        return sum((d.travel for d in self.days), ZERO)

    @property
    def total_diem(self) -> Decimal:
        return sum((d.per_diem for d in self.days), ZERO)

    @property
    def total_hours(self) -> Decimal:
        return self.total_reg + self.total_ot + self.total_dt + self.total_travel

    @property
    def site_pay(self) -> Decimal:
        return sum((d.tiers.gross_pay for d in self.days), ZERO)

    @property
    def travel_pay(self) -> Decimal:
        return self.total_travel * self.rate_travel

    @property
    def total_amount(self) -> Decimal:
        return self.site_pay + self.travel_pay + self.total_diem

    @property
    def site_records(self) -> list[ComputedRecord]:
        return [r for d in self.days for r in d.records if r.is_site]

    @property
    def drive_records(self) -> list[ComputedRecord]:
        return [r for d in self.days for r in d.records if r.is_drive]


def build_payroll_week(
    records: list[ComputedRecord],
    week_start: date | datetime,
    employees: dict[str, Employee] | None = None,
    config: Config | None = None,
    employee: str | None = None,
) -> list[EmployeePayroll]:
    """Weekly payroll per employee, Monday through Sunday.

    Site Time hours are totalled per day before tiering; Drive Time is paid
    as travel at the travel rate; per-diem amounts are added on top. Entries
    whose type is neither site nor drive are listed but earn no hours.
    """
    config = config or Config()
    start = get_week_start(week_start)
    end = get_week_end(week_start)

    by_employee: dict[str, list[PayrollDay]] = {}
    for record in records:
        if record.clock_in is None or not start <= record.clock_in <= end:
            continue
        if employee and record.employee != employee:
            continue

        days = by_employee.get(record.employee)
        if days is None:
            days = [PayrollDay(date=(start + timedelta(days=i)).date()) for i in range(7)]
            by_employee[record.employee] = days

        day = days[record.clock_in.weekday()]
        day.records.append(record)
        if record.estimate and record.estimate not in day.estimates:
            day.estimates.append(record.estimate)
        if record.certified:
            day.certified = True
        if record.is_site:
            day.site_hours += record.hours
        elif record.is_drive:
            day.travel_hours += record.hours
        if record.entry.per_diem:
            day.per_diem += to_decimal(record.entry.per_diem)

    report = []
    for key in sorted(by_employee):
        info = find_employee(employees, key)
        site_rate, travel_rate = employee_rates(info, config)
        days = by_employee[key]
        for day in days:
            day.tiers = calculate_pay_tiers(day.site_hours, site_rate, config)
        report.append(EmployeePayroll(
            employee=key,
            name=info.display_name if info else key,
            rate_site=site_rate,
            rate_travel=travel_rate,
            days=days,
            address=(info.address if info else "") or "N/A",
            phone=(info.phone if info else "") or "N/A",
            position=(info.position if info else "") or "Technician",
            classification=(info.classification if info else "") or "N/A",
        ))
    return report


def _round2(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def _bound(value: date | datetime, last: bool = False) -> datetime:
    """A report period bound as a UTC instant; a bare end date covers the whole day."""
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    return datetime.combine(value, time.max if last else time.min, tzinfo=timezone.utc)


def _item_key(record: ComputedRecord) -> str:
    return record.item or UNCATEGORIZED


@dataclass
class WorkersCompEntry:
    """One entry's share of its day's tiers, with wages subject to workers comp."""

    record: ComputedRecord
    rate: Decimal
    wc_rate: Decimal = ZERO

    @property
    def item(self) -> str:
        return _item_key(self.record)

    @property
    def subject_wages(self) -> Decimal:
        return to_decimal(self.record.hours) * self.rate

    @property
    def comp_cost(self) -> Decimal:
        return self.subject_wages * self.wc_rate / 100


@dataclass
class WorkersCompReport:
    entries: list[WorkersCompEntry] = field(default_factory=list)

    @property
    def records(self) -> list[ComputedRecord]:
        return [e.record for e in self.entries]

    @property
    def groups(self) -> list[CategoryGroup]:
        return group_by_category(self.records, key=_item_key)

    @property
    def total_gross(self) -> Decimal:
        return sum((e.record.pay.gross_pay for e in self.entries), ZERO)

    @property
    def total_wages(self) -> Decimal:
        return sum((e.subject_wages for e in self.entries), ZERO)

    @property
    def total_comp_cost(self) -> Decimal:
        return sum((e.comp_cost for e in self.entries), ZERO)

    def comp_cost_by_item(self) -> dict[str, Decimal]:
        costs: dict[str, Decimal] = {}
        for entry in self.entries:
            costs[entry.item] = costs.get(entry.item, ZERO) + entry.comp_cost
        return costs


def _split_day(
    day_records: list[ComputedRecord],
    site_rate: Decimal,
    travel_rate: Decimal,
    wc_rates: dict[str, Decimal],
    config: Config,
) -> list[WorkersCompEntry]:
    """Hand out the day's Site Time tiers to its entries in clock-in order."""
    entries = []
    tally = ZERO
    for record in sorted(day_records, key=lambda r: r.clock_in):
        hours = to_decimal(record.hours)
        if record.is_site:
            begin = tally
            tally += hours
            reg = _round2(max(ZERO, min(REGULAR_LIMIT, tally) - min(REGULAR_LIMIT, begin)))
            ot = _round2(max(ZERO, min(OVERTIME_LIMIT, tally) - min(OVERTIME_LIMIT, max(REGULAR_LIMIT, begin))))
            dt = _round2(max(ZERO, tally - max(OVERTIME_LIMIT, begin)))
            reg_pay = reg * site_rate
            ot_pay = ot * site_rate * config.overtime_multiplier
            dt_pay = dt * site_rate * config.double_time_multiplier
            tiers = PayTiers(
                reg_hrs=reg,
                ot_hrs=ot,
                dt_hrs=dt,
                reg_pay=reg_pay,
                ot_pay=ot_pay,
                dt_pay=dt_pay,
                gross_pay=reg_pay + ot_pay + dt_pay,
            )
            rate = site_rate
        else:
            travel = _round2(hours)
            travel_pay = travel * travel_rate
            tiers = PayTiers(travel_hrs=travel, travel_pay=travel_pay, gross_pay=travel_pay)
            rate = travel_rate
        entries.append(WorkersCompEntry(
            record=replace(record, pay=tiers),
            rate=rate,
            wc_rate=wc_rates.get((record.item or "").lower(), ZERO),
        ))
    return entries


def build_workers_comp(
    records: list[ComputedRecord],
    start: date | datetime,
    end: date | datetime,
    employees: dict[str, Employee] | None = None,
    wc_rates: dict[str, Decimal] | None = None,
    config: Config | None = None,
    include_drive: bool = False,
) -> WorkersCompReport:
    """Workers-comp cost per entry for records clocked in between start and end.

    Reg/OT/DT are decided on each employee-day's Site Time total, the same as
    the weekly payroll, then split across that day's entries in clock-in
    order. A rate logged on an entry overrides the profile rate for the whole
    day, the last one logged winning. Drive Time is left out unless
    ``include_drive`` is set, and is then paid as travel.
    """
    config = config or Config()
    wc_rates = wc_rates or {}
    start = _bound(start)
    end = _bound(end, last=True)

    days: dict[tuple[str, date], list[ComputedRecord]] = {}
    for record in records:
        if record.clock_in is None or not start <= record.clock_in <= end:
            continue
        if not (record.is_site or (include_drive and record.is_drive)):
            continue
        days.setdefault((record.employee.lower(), record.date), []).append(record)

    entries = []
    for (key, _), day_records in days.items():
        site_rate, travel_rate = employee_rates(find_employee(employees, key), config)
        for record in day_records:
            if record.entry.hourly_rate_site:
                site_rate = record.entry.hourly_rate_site
            if record.entry.hourly_rate_drive:
                travel_rate = record.entry.hourly_rate_drive
        entries.extend(_split_day(day_records, site_rate, travel_rate, wc_rates, config))

    entries.sort(key=lambda e: e.record.clock_in, reverse=True)
    return WorkersCompReport(entries=entries)
