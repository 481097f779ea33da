from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal

DRIVE_TIME = "Drive Time"
SITE_TIME = "Site Time"


@dataclass
class TimesheetEntry:
    employee: str
    type: str = SITE_TIME
    clock_in: datetime | None = None
    clock_out: datetime | None = None
    lunch_start: datetime | None = None
    lunch_end: datetime | None = None
    location_in: str | None = None
    location_out: str | None = None
    manual_distance: float | None = None
    manual_duration: float | None = None
    dump_washout: int | None = None
    shop_time: int | None = None
    per_diem: float | None = None
    hourly_rate_site: Decimal | None = None
    hourly_rate_drive: Decimal | None = None
    comments: str | None = None
    id: str | None = None
    schedule_id: str | None = None

    @property
    def is_drive(self) -> bool:
        """Any type mentioning 'drive' is Drive Time; everything else is Site Time."""
        return "drive" in (self.type or "").lower()

    @property
    def is_site(self) -> bool:
        """Strict Site Time check used by the payroll reports; unknown types are neither."""
        return "site" in (self.type or "").lower()

    @property
    def is_active(self) -> bool:
        """A Drive Time entry stays open until it has a clock-out."""
        return self.is_drive and self.clock_out is None


@dataclass
class Schedule:
    id: str
    from_date: datetime | None = None
    estimate: str = ""
    title: str = ""
    fringe: str = ""
    item: str = ""
    certified_payroll: bool = False
    timesheet: list[TimesheetEntry] = field(default_factory=list)


@dataclass
class Employee:
    id: str
    label: str = ""
    hourly_rate_site: Decimal | None = None
    hourly_rate_drive: Decimal | None = None
    address: str = ""
    phone: str = ""
    position: str = ""
    classification: str = ""

    @property
    def display_name(self) -> str:
        return self.label or self.id


@dataclass(frozen=True)
class TimesheetResult:
    hours: float = 0.0
    distance: float = 0.0
    calculated_distance: float = 0.0


@dataclass(frozen=True)
class PayTiers:
    reg_hrs: Decimal = Decimal("0")
    ot_hrs: Decimal = Decimal("0")
    dt_hrs: Decimal = Decimal("0")
    reg_pay: Decimal = Decimal("0")
    ot_pay: Decimal = Decimal("0")
    dt_pay: Decimal = Decimal("0")
    travel_hrs: Decimal = Decimal("0")
    travel_pay: Decimal = Decimal("0")
    gross_pay: Decimal = Decimal("0")

    @property
    def total_hrs(self) -> Decimal:
        return self.reg_hrs + self.ot_hrs + self.dt_hrs


@dataclass
class ComputedRecord:
    """A timesheet entry joined with its schedule context and derived values."""

    entry: TimesheetEntry
    clock_in: datetime | None
    hours: float
    distance: float
    calculated_distance: float = 0.0
    schedule_id: str = ""
    estimate: str = ""
    title: str = ""
    fringe: str = ""
    item: str = ""
    certified: bool = False
    pay: PayTiers | None = None

    @property
    def employee(self) -> str:
        return self.entry.employee

    @property
    def type(self) -> str:
        return self.entry.type

    @property
    def is_drive(self) -> bool:
        return self.entry.is_drive

    @property
    def is_site(self) -> bool:
        return self.entry.is_site

    @property
    def date(self) -> date | None:
        """Calendar date of the clock-in, read in UTC; a naive clock-in is already UTC."""
        if self.clock_in is None:
            return None
        if self.clock_in.tzinfo is None:
            return self.clock_in.date()
        return self.clock_in.astimezone(timezone.utc).date()

    @property
    def date_label(self) -> str:
        d = self.date
        return d.strftime("%m/%d/%Y") if d else "-"


@dataclass
class AggregateNode:
    id: str
    label: str
    level: str
    key: object = None
    records: list[ComputedRecord] = field(default_factory=list)
    children: dict = field(default_factory=dict)

    @property
    def total_hours(self) -> float:
        # fsum is exactly rounded, so totals do not depend on record order
        return math.fsum(r.hours for r in self.records)

    @property
    def total_pay(self) -> Decimal:
        return sum((r.pay.gross_pay for r in self.records if r.pay), Decimal("0"))

    @property
    def leaf_count(self) -> int:
        return len(self.records)

    def sorted_children(self, reverse: bool = False) -> list[AggregateNode]:
        return [self.children[k] for k in sorted(self.children, reverse=reverse)]


@dataclass
class CategoryGroup:
    key: str
    label: str
    records: list[ComputedRecord] = field(default_factory=list)

    @property
    def total_hours(self) -> float:
        return math.fsum(r.hours for r in self.records)

    @property
    def total_pay(self) -> Decimal:
        return sum((r.pay.gross_pay for r in self.records if r.pay), Decimal("0"))

    @property
    def record_count(self) -> int:
        return len(self.records)


@dataclass
class Config:
    driving_factor: float = 1.19
    average_speed_mph: float = 55.0
    washout_hours: float = 0.5
    shop_hours: float = 0.25
    rounding_cutoff: datetime = datetime(2025, 10, 26, tzinfo=timezone.utc)
    default_site_rate: Decimal = Decimal("45")
    travel_rate_factor: Decimal = Decimal("0.75")
    overtime_multiplier: Decimal = Decimal("1.5")
    double_time_multiplier: Decimal = Decimal("2.0")
    currency: str = "USD"
    default_fringe: str = "No"
