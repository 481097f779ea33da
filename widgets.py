"""Custom widgets for the timecards application."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from textual.widgets import Static
from rich.text import Text

from aggregate import EmployeeSummary
from models import AggregateNode, CategoryGroup
from pay import EmployeePayroll, WorkersCompReport
from utils import iso_week_number


def money(amount: Decimal, currency: str = "USD") -> str:
    symbol = "$" if currency == "USD" else f"{currency} "
    return f"{symbol}{float(amount):,.2f}"


class WeekHeader(Static):
    """Shows the view title on the left and week navigation on the right."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.left_arrow_pos = 0
        self.right_arrow_pos = 0

    def update_display(self, title: str, week_start: date, week_end: date):
        week_nav = (
            f"◄ Week {iso_week_number(week_start)} "
            f"({week_start.strftime('%b %d')} - {week_end.strftime('%b %d, %Y')}) ►"
        )

        # Right-align the navigation at column 74
        target_end_col = 74
        week_nav_start = max(target_end_col - len(week_nav), len(title) + 2)

        # Positions for click detection
        self.left_arrow_pos = week_nav_start
        self.right_arrow_pos = week_nav_start + len(week_nav) - 1

        text = Text()
        text.append(title, style="bold")
        text.append(" " * (week_nav_start - len(title)))
        text.append(week_nav, style="bold")

        self.update(text)

    def on_click(self, event) -> None:
        click_col = event.x
        if self.left_arrow_pos <= click_col < self.left_arrow_pos + 2:
            self.app.action_prev_period()  # type: ignore[attr-defined]
        elif self.right_arrow_pos <= click_col < self.right_arrow_pos + 2:
            self.app.action_next_period()  # type: ignore[attr-defined]


class NodeSummary(Static):
    """Totals for the node selected in the time-cards tree."""

    def update_display(self, node: AggregateNode, excluded: int = 0, show_money: bool = False, currency: str = "USD"):
        drive_hours = sum(r.hours for r in node.records if r.is_drive)
        site_hours = sum(r.hours for r in node.records if not r.is_drive)
        miles = sum(r.distance for r in node.records)

        text = Text()
        text.append(f"{node.label}\n", style="bold")
        text.append(f"  Records  {node.leaf_count:>8}\n")
        text.append(f"  Site     {site_hours:>8.2f}h\n", style="dim" if not site_hours else "")
        text.append(f"  Drive    {drive_hours:>8.2f}h   ({miles:,.1f} mi)\n", style="dim" if not drive_hours else "")
        text.append(f"  TOTAL    {node.total_hours:>8.2f}h")
        if show_money and node.total_pay:
            text.append(f"   {money(node.total_pay, currency)}")
        if excluded:
            text.append(f"\n  {excluded} record(s) without a clock-in not shown", style="yellow")

        self.update(text)


class FringeSummary(Static):
    """Totals across fringe groups plus the per-employee breakdown."""

    def update_display(self, groups: list[CategoryGroup], employees: list[EmployeeSummary], labels: dict[str, str], currency: str = "USD"):
        text = Text()
        total_hours = sum(g.total_hours for g in groups)
        total_pay = sum((g.total_pay for g in groups), Decimal("0"))

        for group in groups:
            text.append(
                f"  {group.label:<16} {group.record_count:>5} rec  {group.total_hours:>9.2f}h  "
                f"{money(group.total_pay, currency):>14}\n"
            )
        text.append(f"  {'TOTAL':<16} {'':>9}  {total_hours:>9.2f}h  {money(total_pay, currency):>14}\n", style="bold")

        if employees:
            text.append("\n")
            for summary in employees[:10]:
                name = labels.get(summary.employee) or summary.employee
                ot_style = "" if summary.ot else "dim"
                text.append(f"  {name:<28} reg {float(summary.reg):>7.2f}h  ")
                text.append(f"ot {float(summary.ot):>6.2f}h  ", style=ot_style)
                text.append(f"{money(summary.gross, currency):>14}\n")

        self.update(text)


class PayrollSummary(Static):
    """Week totals by pay bucket across all employees on the report."""

    def update_display(self, report: list[EmployeePayroll], currency: str = "USD"):
        reg = sum((e.total_reg for e in report), Decimal("0"))
        ot = sum((e.total_ot for e in report), Decimal("0"))
        dt = sum((e.total_dt for e in report), Decimal("0"))
        travel = sum((e.total_travel for e in report), Decimal("0"))
        diem = sum((e.total_diem for e in report), Decimal("0"))
        amount = sum((e.total_amount for e in report), Decimal("0"))

        text = Text()
        text.append(f"                                  Regular  {float(reg):>8.2f}h\n")
        text.append(f"                                 Overtime  {float(ot):>8.2f}h\n", style="dim" if ot == 0 else "")
        text.append(f"                              Double Time  {float(dt):>8.2f}h\n", style="dim" if dt == 0 else "")
        text.append(f"                                   Travel  {float(travel):>8.2f}h\n", style="dim" if travel == 0 else "")
        text.append(f"                                 Per Diem  {money(diem, currency):>9}\n", style="dim" if diem == 0 else "")
        text.append(f"                                    TOTAL  {float(reg + ot + dt + travel):>8.2f}h   {money(amount, currency)}")

        self.update(text)


class CompSummary(Static):
    """Workers-comp cost per item for the week, with wage and gross totals."""

    def update_display(self, report: WorkersCompReport, currency: str = "USD"):
        text = Text()
        for item, cost in sorted(report.comp_cost_by_item().items()):
            text.append(f"  {item:<24} {money(cost, currency):>12}\n", style="dim" if cost == 0 else "")
        text.append(f"  {'Subject wages':<24} {money(report.total_wages, currency):>12}\n")
        text.append(f"  {'Gross pay':<24} {money(report.total_gross, currency):>12}\n")
        text.append(f"  {'TOTAL COMP':<24} {money(report.total_comp_cost, currency):>12}", style="bold")

        self.update(text)
