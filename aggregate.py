"""Roll computed records up into report structures.

``build_tree`` produces the Year -> ISO week -> Employee -> Date hierarchy of
the time-cards view; ``group_by_category`` the flat grouping of the fringe
benefits view. Every record lands in exactly one node per level, so a node's
total always equals the sum of its children's totals.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from decimal import Decimal

from models import AggregateNode, CategoryGroup, ComputedRecord
from utils import iso_week_number, week_range_label

ROOT = "root"
YEAR = "year"
WEEK = "week"
EMPLOYEE = "employee"
DATE = "date"


def _child(parent: AggregateNode, key, node_id: str, label: str, level: str) -> AggregateNode:
    node = parent.children.get(key)
    if node is None:
        node = AggregateNode(id=node_id, label=label, level=level, key=key)
        parent.children[key] = node
    return node


def build_tree(
    records: list[ComputedRecord],
    employee_labels: Mapping[str, str] | None = None,
) -> AggregateNode:
    """Group records by year, ISO week, employee and date.

    Records without a clock-in cannot be placed and are left out; compare
    ``excluded_count`` against the input to detect them. Labels are for
    display only and never change the grouping.
    """
    labels = employee_labels or {}
    root = AggregateNode(id="ROOT", label="All", level=ROOT)

    for record in records:
        day = record.date
        if day is None:
            continue

        year = day.year
        week_no = iso_week_number(day)
        week_key = f"{year}-{week_no}"
        employee = record.employee

        root.records.append(record)

        year_node = _child(root, year, f"Y-{year}", str(year), YEAR)
        year_node.records.append(record)

        week_node = _child(year_node, (year, week_no), f"W-{week_key}", week_range_label(day), WEEK)
        week_node.records.append(record)

        emp_label = labels.get(employee) or employee
        emp_node = _child(week_node, employee, f"E-{week_key}-{employee}", emp_label, EMPLOYEE)
        emp_node.records.append(record)

        date_node = _child(
            emp_node, day, f"D-{week_key}-{employee}-{day.isoformat()}", day.strftime("%m/%d/%Y"), DATE
        )
        date_node.records.append(record)

    return root


def iter_nodes(node: AggregateNode) -> Iterator[AggregateNode]:
    """Depth-first walk over a tree, children in key order."""
    yield node
    for child in node.sorted_children():
        yield from iter_nodes(child)


def find_node(root: AggregateNode, node_id: str) -> AggregateNode | None:
    for node in iter_nodes(root):
        if node.id == node_id:
            return node
    return None


def excluded_count(records: list[ComputedRecord], root: AggregateNode) -> int:
    """How many input records could not be placed in the tree."""
    return len(records) - root.leaf_count


def _fringe_key(record: ComputedRecord) -> str:
    return record.fringe or "No"


def group_by_category(
    records: list[ComputedRecord],
    key: Callable[[ComputedRecord], str] = _fringe_key,
    labels: Mapping[str, str] | None = None,
) -> list[CategoryGroup]:
    """Partition records by a single categorical key, sorted by label."""
    labels = labels or {}
    groups: dict[str, CategoryGroup] = {}
    for record in records:
        k = key(record)
        group = groups.get(k)
        if group is None:
            group = CategoryGroup(key=k, label=labels.get(k) or k)
            groups[k] = group
        group.records.append(record)
    return sorted(groups.values(), key=lambda g: (g.label, g.key))


@dataclass
class EmployeeSummary:
    employee: str
    hours: float = 0.0
    reg: Decimal = Decimal("0")
    ot: Decimal = Decimal("0")
    dt: Decimal = Decimal("0")
    reg_pay: Decimal = Decimal("0")
    ot_pay: Decimal = Decimal("0")
    dt_pay: Decimal = Decimal("0")
    gross: Decimal = Decimal("0")
    count: int = 0


def summarize_by_employee(records: list[ComputedRecord]) -> list[EmployeeSummary]:
    """Per-employee hour and pay buckets, largest gross pay first."""
    hours: dict[str, list[float]] = {}
    summaries: dict[str, EmployeeSummary] = {}
    for record in records:
        summary = summaries.get(record.employee)
        if summary is None:
            summary = EmployeeSummary(employee=record.employee)
            summaries[record.employee] = summary
            hours[record.employee] = []
        hours[record.employee].append(record.hours)
        summary.count += 1
        if record.pay:
            summary.reg += record.pay.reg_hrs
            summary.ot += record.pay.ot_hrs
            summary.dt += record.pay.dt_hrs
            summary.reg_pay += record.pay.reg_pay
            summary.ot_pay += record.pay.ot_pay
            summary.dt_pay += record.pay.dt_pay
            summary.gross += record.pay.gross_pay

    for employee, summary in summaries.items():
        summary.hours = math.fsum(hours[employee])
    return sorted(summaries.values(), key=lambda s: (-s.gross, s.employee))
