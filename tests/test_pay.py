"""Tests for pay.py - pay tiers, the weekly payroll and the workers-comp report."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from models import DRIVE_TIME, Config, Employee
from pay import (
    build_payroll_week,
    build_workers_comp,
    calculate_pay_tiers,
    employee_rates,
    find_employee,
    price_records,
    to_decimal,
)


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


class TestToDecimal:
    """Tests for to_decimal."""

    def test_values(self):
        assert to_decimal(8.25) == Decimal("8.25")
        assert to_decimal("12") == Decimal("12")
        assert to_decimal(Decimal("1.5")) == Decimal("1.5")

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), "abc", None, Decimal("NaN")])
    def test_unusable_values_are_zero(self, value):
        assert to_decimal(value) == Decimal("0")


class TestCalculatePayTiers:
    """Tests for calculate_pay_tiers."""

    def test_regular_only(self):
        tiers = calculate_pay_tiers(6, 45)
        assert tiers.reg_hrs == Decimal("6")
        assert tiers.ot_hrs == Decimal("0")
        assert tiers.dt_hrs == Decimal("0")
        assert tiers.gross_pay == Decimal("270")

    def test_overtime(self):
        tiers = calculate_pay_tiers(10, 45)
        assert tiers.reg_hrs == Decimal("8")
        assert tiers.ot_hrs == Decimal("2")
        assert tiers.reg_pay == Decimal("360")
        assert tiers.ot_pay == Decimal("135")
        assert tiers.gross_pay == Decimal("495")

    def test_double_time(self):
        tiers = calculate_pay_tiers(14, 40)
        assert (tiers.reg_hrs, tiers.ot_hrs, tiers.dt_hrs) == (Decimal("8"), Decimal("4"), Decimal("2"))
        assert tiers.reg_pay == Decimal("320")
        assert tiers.ot_pay == Decimal("240")
        assert tiers.dt_pay == Decimal("160")
        assert tiers.gross_pay == Decimal("720")

    @pytest.mark.parametrize("hours", [0, 7.5, 8, 8.25, 12, 12.5, 20])
    def test_tiers_add_up_to_hours(self, hours):
        assert calculate_pay_tiers(hours, 45).total_hrs == to_decimal(hours)

    def test_boundaries(self):
        assert calculate_pay_tiers(8, 45).ot_hrs == Decimal("0")
        assert calculate_pay_tiers(12, 45).dt_hrs == Decimal("0")
        assert calculate_pay_tiers(12, 45).ot_hrs == Decimal("4")

    def test_negative_or_invalid_hours(self):
        assert calculate_pay_tiers(-3, 45).gross_pay == Decimal("0")
        assert calculate_pay_tiers(float("nan"), 45).total_hrs == Decimal("0")

    def test_invalid_rate(self):
        tiers = calculate_pay_tiers(10, "abc")
        assert tiers.total_hrs == Decimal("10")
        assert tiers.gross_pay == Decimal("0")

    def test_custom_multipliers(self):
        config = Config(overtime_multiplier=Decimal("2"), double_time_multiplier=Decimal("3"))
        tiers = calculate_pay_tiers(13, 10, config)
        assert tiers.gross_pay == Decimal("80") + Decimal("80") + Decimal("30")


class TestRates:
    """Tests for find_employee and employee_rates."""

    def test_defaults(self):
        assert employee_rates(None) == (Decimal("45"), Decimal("33.75"))

    def test_travel_rate_derived_from_site_rate(self):
        employee = Employee(id="a", hourly_rate_site=Decimal("50"))
        assert employee_rates(employee) == (Decimal("50"), Decimal("37.50"))

    def test_explicit_drive_rate(self):
        employee = Employee(id="a", hourly_rate_site=Decimal("40"), hourly_rate_drive=Decimal("30"))
        assert employee_rates(employee) == (Decimal("40"), Decimal("30"))

    def test_find_employee_ignores_case(self):
        ana = Employee(id="ana@example.com")
        directory = {"ana@example.com": ana}
        assert find_employee(directory, "ana@example.com") is ana
        assert find_employee(directory, "Ana@Example.com") is ana
        assert find_employee(directory, "ben@example.com") is None
        assert find_employee(None, "ana@example.com") is None


class TestPriceRecords:
    """Tests for price_records."""

    def test_only_site_records_are_priced(self, make_record):
        site = make_record("ana", utc(2025, 11, 3, 8), 10)
        drive = make_record("ana", utc(2025, 11, 3, 6), 1, type=DRIVE_TIME)
        priced = price_records([site, drive], {"ana": Employee(id="ana", hourly_rate_site=Decimal("50"))})
        assert priced == [site]
        assert site.pay.gross_pay == Decimal("550")
        assert drive.pay is None

    def test_per_record_tiering(self, make_record):
        """Two 6-hour records on one day are each under the overtime threshold."""
        records = [make_record("ana", utc(2025, 11, 3, h), 6) for h in (6, 14)]
        price_records(records)
        assert all(r.pay.ot_hrs == 0 for r in records)


class TestBuildPayrollWeek:
    """Tests for build_payroll_week."""

    def test_daily_site_hours_are_tiered_together(self, make_record):
        records = [
            make_record("ana", utc(2025, 11, 3, 6), 6),
            make_record("ana", utc(2025, 11, 3, 14), 6),
        ]
        report = build_payroll_week(records, date(2025, 11, 5))
        assert len(report) == 1
        monday = report[0].days[0]
        assert monday.date == date(2025, 11, 3)
        assert monday.site_hours == 12
        assert monday.tiers.reg_hrs == Decimal("8")
        assert monday.tiers.ot_hrs == Decimal("4")

    def test_week_totals(self, make_record):
        site = make_record("ana", utc(2025, 11, 3, 6), 12, estimate="E-1", certified=True)
        site.entry.per_diem = 25.0
        drive = make_record("ana", utc(2025, 11, 3, 5), 1, type=DRIVE_TIME)
        employees = {"ana": Employee(id="ana", label="Ana Ruiz")}

        report = build_payroll_week([site, drive], utc(2025, 11, 3), employees)
        payroll = report[0]
        assert payroll.name == "Ana Ruiz"
        assert payroll.position == "Technician"
        assert payroll.address == "N/A"
        assert payroll.total_reg == Decimal("8")
        assert payroll.total_ot == Decimal("4")
        assert payroll.total_travel == Decimal("1")
        assert payroll.total_diem == Decimal("25")
        assert payroll.total_hours == Decimal("13")
        assert payroll.site_pay == Decimal("630")
        assert payroll.travel_pay == Decimal("33.75")
        assert payroll.total_amount == Decimal("688.75")
        assert payroll.days[0].estimates == ["E-1"]
        assert payroll.days[0].certified
        assert payroll.site_records == [site]
        assert payroll.drive_records == [drive]

    def test_days_run_monday_to_sunday(self, make_record):
        sunday = make_record("ana", utc(2025, 11, 9, 23, 59), 2)
        report = build_payroll_week([sunday], date(2025, 11, 3))
        days = report[0].days
        assert [d.date for d in days][0] == date(2025, 11, 3)
        assert days[6].date == date(2025, 11, 9)
        assert days[6].site_hours == 2

    def test_records_outside_week_are_ignored(self, make_record):
        records = [
            make_record("ana", utc(2025, 11, 10, 0), 8),
            make_record("ana", utc(2025, 11, 2, 23, 59), 8),
            make_record("ana", None, 8),
        ]
        assert build_payroll_week(records, date(2025, 11, 3)) == []

    def test_employee_filter_and_ordering(self, make_record):
        records = [
            make_record("ben", utc(2025, 11, 4, 8), 8),
            make_record("ana", utc(2025, 11, 4, 8), 8),
        ]
        report = build_payroll_week(records, date(2025, 11, 3))
        assert [e.employee for e in report] == ["ana", "ben"]
        report = build_payroll_week(records, date(2025, 11, 3), employee="ben")
        assert [e.employee for e in report] == ["ben"]

    def test_unknown_type_earns_no_hours(self, make_record):
        """Only site types are tiered and only drive types are travel."""
        site = make_record("ana", utc(2025, 11, 3, 8), 8)
        other = make_record("ana", utc(2025, 11, 3, 17), 4, type="Training")
        payroll = build_payroll_week([site, other], date(2025, 11, 3))[0]
        monday = payroll.days[0]
        assert monday.records == [site, other]
        assert monday.site_hours == 8
        assert monday.travel_hours == 0
        assert payroll.total_hours == Decimal("8")
        assert payroll.site_records == [site]
        assert payroll.drive_records == []


class TestBuildWorkersComp:
    """Tests for build_workers_comp."""

    WEEK = (date(2025, 11, 3), date(2025, 11, 9))

    def test_day_tiers_split_in_clock_in_order(self, make_record):
        late = make_record("ana", utc(2025, 11, 3, 14), 6)
        early = make_record("ana", utc(2025, 11, 3, 6), 6)
        report = build_workers_comp([late, early], *self.WEEK)

        newest, oldest = report.entries
        assert newest.record.clock_in == late.clock_in
        assert (oldest.record.pay.reg_hrs, oldest.record.pay.ot_hrs) == (Decimal("6"), Decimal("0"))
        assert (newest.record.pay.reg_hrs, newest.record.pay.ot_hrs) == (Decimal("2"), Decimal("4"))
        # 2 x 45 + 4 x 45 x 1.5
        assert newest.record.pay.gross_pay == Decimal("360")
        assert late.pay is None

    def test_split_reaches_double_time(self, make_record):
        records = [make_record("ana", utc(2025, 11, 4, h), 5) for h in (6, 11, 16)]
        pays = [e.record.pay for e in reversed(build_workers_comp(records, *self.WEEK).entries)]
        assert [(p.reg_hrs, p.ot_hrs, p.dt_hrs) for p in pays] == [
            (Decimal("5"), Decimal("0"), Decimal("0")),
            (Decimal("3"), Decimal("2"), Decimal("0")),
            (Decimal("0"), Decimal("2"), Decimal("3")),
        ]

    def test_tiers_are_rounded_to_cents(self, make_record):
        record = make_record("ana", utc(2025, 11, 3, 6), 8.333)
        pay = build_workers_comp([record], *self.WEEK).entries[0].record.pay
        assert pay.reg_hrs == Decimal("8.00")
        assert pay.ot_hrs == Decimal("0.33")

    def test_days_are_tiered_separately(self, make_record):
        records = [
            make_record("ana", utc(2025, 11, 3, 6), 8),
            make_record("ana", utc(2025, 11, 4, 6), 8),
            make_record("ben", utc(2025, 11, 3, 6), 8),
        ]
        report = build_workers_comp(records, *self.WEEK)
        assert all(e.record.pay.ot_hrs == 0 for e in report.entries)

    def test_last_entry_rate_wins_for_the_day(self, make_record):
        first = make_record("ana", utc(2025, 11, 3, 6), 4)
        first.entry.hourly_rate_site = Decimal("60")
        second = make_record("ana", utc(2025, 11, 3, 11), 4)
        second.entry.hourly_rate_site = Decimal("70")
        other_day = make_record("ana", utc(2025, 11, 4, 6), 4)
        employees = {"ana": Employee(id="ana", hourly_rate_site=Decimal("50"))}

        report = build_workers_comp([first, second, other_day], *self.WEEK, employees=employees)
        rates = {e.record.clock_in: e.rate for e in report.entries}
        assert rates[first.clock_in] == Decimal("70")
        assert rates[second.clock_in] == Decimal("70")
        assert rates[other_day.clock_in] == Decimal("50")

    def test_comp_cost(self, make_record):
        trench = make_record("ana", utc(2025, 11, 3, 6), 8, item="Trenching")
        bore = make_record("ana", utc(2025, 11, 4, 6), 4, item="Boring")
        loose = make_record("ana", utc(2025, 11, 5, 6), 2)
        employees = {"ana": Employee(id="ana", hourly_rate_site=Decimal("50"))}
        wc_rates = {"trenching": Decimal("10")}

        report = build_workers_comp([trench, bore, loose], *self.WEEK, employees, wc_rates)
        by_item = {e.item: e for e in report.entries}
        assert by_item["Trenching"].subject_wages == Decimal("400")
        assert by_item["Trenching"].comp_cost == Decimal("40")
        assert by_item["Boring"].comp_cost == 0
        assert by_item["Uncategorized"].wc_rate == 0
        assert report.total_wages == Decimal("700")
        assert report.total_comp_cost == Decimal("40")
        assert report.comp_cost_by_item() == {
            "Trenching": Decimal("40"),
            "Boring": Decimal("0"),
            "Uncategorized": Decimal("0"),
        }
        assert [g.label for g in report.groups] == ["Boring", "Trenching", "Uncategorized"]
        assert report.groups[1].total_pay == Decimal("400")

    def test_drive_time_only_when_included(self, make_record):
        site = make_record("ben", utc(2025, 11, 3, 8), 9)
        drive = make_record("ben", utc(2025, 11, 3, 6), 1.255, type=DRIVE_TIME)
        employees = {"ben": Employee(id="ben", hourly_rate_site=Decimal("40"))}

        report = build_workers_comp([site, drive], *self.WEEK, employees)
        assert [e.record.clock_in for e in report.entries] == [site.clock_in]

        report = build_workers_comp([site, drive], *self.WEEK, employees, include_drive=True)
        travel = next(e for e in report.entries if e.record.is_drive)
        assert travel.record.pay.travel_hrs == Decimal("1.26")
        assert travel.record.pay.travel_pay == Decimal("37.80")
        assert travel.record.pay.gross_pay == Decimal("37.80")
        assert travel.rate == Decimal("30.00")
        assert travel.subject_wages == Decimal("37.650")
        # Travel does not count towards the day's site tally
        worked = next(e for e in report.entries if e.record.is_site)
        assert worked.record.pay.reg_hrs == Decimal("8")
        assert worked.record.pay.ot_hrs == Decimal("1")

    def test_period_and_type_filtering(self, make_record):
        records = [
            make_record("ana", utc(2025, 11, 9, 23, 30), 2),
            make_record("ana", utc(2025, 11, 10, 0, 30), 2),
            make_record("ana", utc(2025, 11, 2, 23, 30), 2),
            make_record("ana", utc(2025, 11, 5, 8), 2, type="Training"),
            make_record("ana", None, 2),
        ]
        report = build_workers_comp(records, *self.WEEK, include_drive=True)
        assert [e.record.clock_in for e in report.entries] == [utc(2025, 11, 9, 23, 30)]

    def test_empty_report(self):
        report = build_workers_comp([], *self.WEEK)
        assert report.entries == []
        assert report.groups == []
        assert report.total_comp_cost == 0
