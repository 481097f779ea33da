#!/usr/bin/env python3
"""Timecards TUI application."""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from pathlib import Path

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import DataTable, Footer, Static, Tree
from rich.text import Text

import storage
from aggregate import ROOT, build_tree, excluded_count, find_node, group_by_category, summarize_by_employee
from calculator import base_estimate, compute_records, filter_records
from export import export_records
from logs import configure_logging
from models import AggregateNode, ComputedRecord, Config
from pay import build_payroll_week, build_workers_comp, price_records
from screens import ConfirmScreen, ExportScreen, RecordDetailScreen
from storage import Snapshot, SnapshotError
from timestamps import format_time_only
from utils import add_weeks, get_week_end, get_week_start, get_weeks_in_year, sub_weeks
from widgets import CompSummary, FringeSummary, NodeSummary, PayrollSummary, WeekHeader, money

logger = logging.getLogger(__name__)

ALL_FRINGES = "__all__"


def load_config() -> tuple[Config, str | None]:
    """The configured settings, or the defaults plus the reason the config file was rejected."""
    try:
        return storage.get_config(), None
    except SnapshotError as e:
        logger.error("Could not load config, using defaults: %s", e)
        return Config(), str(e)


def cycle_option(current, options: list):
    """Next option after current, wrapping round to None (no filter) after the last."""
    if not options:
        return None
    if current not in options:
        return options[0]
    index = options.index(current) + 1
    return options[index] if index < len(options) else None


class ReportDataTable(DataTable):
    """DataTable that hands left/right to the app for period navigation in fringe/payroll views."""

    def on_key(self, event) -> None:
        if not hasattr(self.app, "view_mode"):
            return

        view_mode = self.app.view_mode  # type: ignore[attr-defined]
        if view_mode not in ("fringe", "payroll", "comp"):
            return

        if event.key == "left":
            self.app.action_prev_period()  # type: ignore[attr-defined]
            event.prevent_default()
            event.stop()
        elif event.key == "right":
            self.app.action_next_period()  # type: ignore[attr-defined]
            event.prevent_default()
            event.stop()


class TimecardsApp(App):
    """Time cards, fringe benefits and weekly payroll over a schedules snapshot."""

    CSS = """
    Screen {
        background: $surface;
    }

    #title-bar, #week-header, #comp-header {
        height: auto;
        background: $primary;
        color: $text;
        padding: 0 1;
        text-style: bold;
    }

    #tree-view {
        height: 1fr;
    }

    #time-tree {
        width: 40%;
        margin: 1 1 1 2;
    }

    #tree-right {
        width: 1fr;
    }

    #record-table, #fringe-table, #payroll-table, #comp-table {
        height: 1fr;
        margin: 1 2;
    }

    #fringe-groups, #comp-groups {
        height: auto;
        max-height: 10;
        margin: 1 2 0 2;
    }

    #node-summary, #fringe-summary, #payroll-summary, #comp-summary {
        height: auto;
        padding: 1 2;
        color: $text;
    }

    .hidden {
        display: none;
    }

    DataTable > .datatable--cursor {
        background: $secondary;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("t", "tree_view", "Time Cards"),
        Binding("f", "fringe_view", "Fringe"),
        Binding("p", "payroll_view", "Payroll"),
        Binding("c", "comp_view", "Workers Comp"),
        Binding("[", "prev_period", "◄"),
        Binding("]", "next_period", "►"),
        Binding("$", "toggle_money", "$"),
        Binding("e", "filter_employee", "Employee"),
        Binding("j", "filter_estimate", "Job"),
        Binding("y", "filter_type", "Type"),
        Binding("w", "fringe_week", "Week"),
        Binding("d", "toggle_drive", "Drive"),
        Binding("x", "export", "Export"),
        Binding("r", "reload", "Reload"),
    ]

    VIEW_CONTAINERS = {
        "tree": "#tree-view",
        "fringe": "#fringe-view",
        "payroll": "#payroll-view",
        "comp": "#comp-view",
    }

    def __init__(self, snapshot_path: Path | str | None = None, config: Config | None = None):
        super().__init__()
        self.snapshot_path = Path(snapshot_path) if snapshot_path else None
        self.config_error: str | None = None
        if config is None:
            config, self.config_error = load_config()
        self.config = config

        # View mode: "tree", "fringe", "payroll" or "comp"
        self.view_mode = "tree"

        today = datetime.now(timezone.utc).date()
        self.week_start = get_week_start(today)
        self.fringe_year = today.year
        # One of get_weeks_in_year(fringe_year), or None for the whole year
        self.fringe_week: dict | None = None
        self.selected_fringe = ALL_FRINGES
        self.selected_node_id = "ROOT"
        self.include_drive = False

        # Time-cards filters; None shows everything
        self.filter_employee: str | None = None
        self.filter_estimate: str | None = None
        self.filter_type: str | None = None

        # Privacy mode: hide pay by default
        self.show_money = False

        self.snapshot = Snapshot()
        self.records: list[ComputedRecord] = []
        self.tree_records: list[ComputedRecord] = []
        self.tree_root = AggregateNode(id="ROOT", label="All", level=ROOT)
        self.load_error: str | None = None
        # Rows currently shown in the record tables, indexed by row key
        self._table_records: dict[str, list[ComputedRecord]] = {}

        self._load_data()

    # --- Data ---

    def _load_data(self) -> None:
        try:
            self.snapshot = storage.load_snapshot(self.snapshot_path, self.config)
            self.load_error = None
        except SnapshotError as e:
            logger.error("Could not load snapshot: %s", e)
            self.snapshot = Snapshot()
            self.load_error = str(e)

        self.records = compute_records(self.snapshot.schedules, self.config)
        price_records(self.records, self.snapshot.employees, self.config)
        self._rebuild_tree()

    def _rebuild_tree(self) -> None:
        self.tree_records = filter_records(
            self.records, self.filter_employee, self.filter_estimate, self.filter_type
        )
        self.tree_root = build_tree(self.tree_records, self.snapshot.employee_labels)

    @property
    def employee_labels(self) -> dict[str, str]:
        return self.snapshot.employee_labels

    def _filter_options(self, kind: str) -> list[str]:
        if kind == "employee":
            values = {r.employee for r in self.records}
        elif kind == "estimate":
            values = {base_estimate(r.estimate) for r in self.records}
        else:
            values = {r.type for r in self.records}
        return sorted(v for v in values if v)

    def _filter_label(self) -> str:
        parts = []
        if self.filter_employee:
            parts.append(self.employee_labels.get(self.filter_employee) or self.filter_employee)
        if self.filter_estimate:
            parts.append(self.filter_estimate)
        if self.filter_type:
            parts.append(self.filter_type)
        return " / ".join(parts)

    def _selected_node(self) -> AggregateNode:
        return find_node(self.tree_root, self.selected_node_id) or self.tree_root

    def _fringe_records(self) -> list[ComputedRecord]:
        """Site Time records clocked in during the selected year, or the selected week of it."""
        records = [
            r for r in self.records
            if not r.is_drive and r.date is not None and r.date.year == self.fringe_year
        ]
        if self.fringe_week is None:
            return records
        start, end = self.fringe_week["start"], self.fringe_week["end"]
        return [r for r in records if start <= r.clock_in <= end]

    def _comp_report(self):
        return build_workers_comp(
            self.records,
            self.week_start,
            get_week_end(self.week_start),
            self.snapshot.employees,
            self.snapshot.wc_rates,
            self.config,
            include_drive=self.include_drive,
        )

    def _fringe_table_records(self) -> list[ComputedRecord]:
        records = self._fringe_records()
        if self.selected_fringe == ALL_FRINGES:
            return records
        return [r for r in records if r.fringe == self.selected_fringe]

    def _export_records(self) -> list[ComputedRecord]:
        if self.view_mode == "fringe":
            return self._fringe_table_records()
        return list(self._selected_node().records)

    def _default_export_name(self) -> str:
        if self.view_mode == "fringe":
            if self.fringe_week is not None:
                return f"Fringe_Benefits_{self.fringe_week['start']:%Y-%m-%d}.csv"
            return f"Fringe_Benefits_{self.fringe_year}.csv"
        return f"Time_Cards_{self._selected_node().id}.csv"

    def _node_label(self, node: AggregateNode) -> Text:
        text = Text(node.label)
        text.append(f"  {node.total_hours:.2f}h", style="dim")
        return text

    # --- Layout ---

    def compose(self) -> ComposeResult:
        yield Static(id="title-bar")
        with Horizontal(id="tree-view"):
            yield Tree("All", id="time-tree")
            with Vertical(id="tree-right"):
                yield ReportDataTable(id="record-table")
                yield NodeSummary(id="node-summary")
        with Vertical(id="fringe-view", classes="hidden"):
            yield ReportDataTable(id="fringe-groups")
            yield ReportDataTable(id="fringe-table")
            yield FringeSummary(id="fringe-summary")
        with Vertical(id="payroll-view", classes="hidden"):
            yield WeekHeader(id="week-header")
            yield ReportDataTable(id="payroll-table")
            yield PayrollSummary(id="payroll-summary")
        with Vertical(id="comp-view", classes="hidden"):
            yield WeekHeader(id="comp-header")
            yield ReportDataTable(id="comp-groups")
            yield ReportDataTable(id="comp-table")
            yield CompSummary(id="comp-summary")
        yield Footer()

    def on_mount(self):
        self._setup_record_table()
        self._setup_fringe_tables()
        self._setup_payroll_table()
        self._setup_comp_tables()
        self._populate_tree()
        self._refresh_display()
        if self.config_error:
            self.notify(f"Using default settings: {self.config_error}", severity="warning", timeout=10)
        if self.load_error:
            self.notify(self.load_error, severity="error", timeout=10)
        self.query_one("#time-tree", Tree).focus()

    def _setup_record_table(self):
        table = self.query_one("#record-table", DataTable)
        table.cursor_type = "row"
        table.add_column("Date", width=10)
        table.add_column("Employee", width=22)
        table.add_column("Type", width=10)
        table.add_column("In", width=8)
        table.add_column("Out", width=8)
        table.add_column("Job", width=24)
        table.add_column("Miles", width=7)
        table.add_column("Hours", width=6)

    def _setup_fringe_tables(self):
        groups = self.query_one("#fringe-groups", DataTable)
        groups.cursor_type = "row"
        groups.add_column("Fringe", width=16)
        groups.add_column("Records", width=8)
        groups.add_column("Hours", width=10)
        groups.add_column("Gross", width=14)

        table = self.query_one("#fringe-table", DataTable)
        table.cursor_type = "row"
        table.add_column("Employee", width=22)
        table.add_column("Date", width=10)
        table.add_column("Title", width=26)
        table.add_column("Estimate", width=12)
        table.add_column("Fringe", width=10)
        table.add_column("Hours", width=6)
        table.add_column("Reg", width=5)
        table.add_column("OT", width=5)
        table.add_column("DT", width=5)
        table.add_column("Gross", width=11)

    def _setup_payroll_table(self):
        table = self.query_one("#payroll-table", DataTable)
        table.cursor_type = "row"
        table.add_column("Employee", width=22)
        for day in ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"):
            table.add_column(day, width=6)
        table.add_column("Reg", width=6)
        table.add_column("OT", width=6)
        table.add_column("DT", width=6)
        table.add_column("Travel", width=6)
        table.add_column("Rate", width=8)
        table.add_column("Amount", width=12)

    def _setup_comp_tables(self):
        groups = self.query_one("#comp-groups", DataTable)
        groups.cursor_type = "row"
        groups.add_column("Item", width=20)
        groups.add_column("Records", width=8)
        groups.add_column("Hours", width=10)
        groups.add_column("Gross", width=14)
        groups.add_column("Comp", width=12)

        table = self.query_one("#comp-table", DataTable)
        table.cursor_type = "row"
        table.add_column("Employee", width=22)
        table.add_column("Date", width=10)
        table.add_column("Item", width=16)
        table.add_column("Type", width=10)
        table.add_column("Hours", width=6)
        table.add_column("Reg", width=5)
        table.add_column("OT", width=5)
        table.add_column("DT", width=5)
        table.add_column("Travel", width=6)
        table.add_column("Wages", width=11)
        table.add_column("WC/100", width=7)
        table.add_column("Comp", width=10)

    def _populate_tree(self):
        tree = self.query_one("#time-tree", Tree)
        tree.clear()
        tree.root.set_label(self._node_label(self.tree_root))
        tree.root.data = self.tree_root.id

        for year in self.tree_root.sorted_children(reverse=True):
            year_item = tree.root.add(self._node_label(year), data=year.id)
            for week in year.sorted_children(reverse=True):
                week_item = year_item.add(self._node_label(week), data=week.id)
                for employee in sorted(week.children.values(), key=lambda n: n.label.lower()):
                    employee_item = week_item.add(self._node_label(employee), data=employee.id)
                    for day in employee.sorted_children():
                        employee_item.add_leaf(self._node_label(day), data=day.id)

        tree.root.expand()

    # --- Display ---

    def _refresh_display(self):
        title = self.query_one("#title-bar", Static)
        source = self.snapshot.source.name if self.snapshot.source else "no snapshot"
        fringe_title = f"FRINGE BENEFITS {self.fringe_year}"
        if self.fringe_week is not None:
            fringe_title += f"  {self.fringe_week['label']}"
        titles = {
            "tree": "TIME CARDS",
            "fringe": fringe_title,
            "payroll": "PAYROLL",
            "comp": "WORKERS COMP",
        }
        heading = titles[self.view_mode]
        if self.view_mode == "tree" and self._filter_label():
            heading += f"  [{self._filter_label()}]"
        title.update(Text(f"{heading}  ·  {source}", style="bold"))

        if self.view_mode == "tree":
            self._refresh_tree_display()
        elif self.view_mode == "fringe":
            self._refresh_fringe_display()
        elif self.view_mode == "payroll":
            self._refresh_payroll_display()
        elif self.view_mode == "comp":
            self._refresh_comp_display()

    def _refresh_tree_display(self):
        node = self._selected_node()
        table = self.query_one("#record-table", DataTable)
        table.clear()

        self._table_records["record-table"] = list(node.records)
        for i, r in enumerate(node.records):
            label = self.employee_labels.get(r.employee) or r.employee
            type_style = "cyan" if r.is_drive else ""
            table.add_row(
                r.date_label,
                label,
                Text(r.type or "-", style=type_style),
                format_time_only(r.entry.clock_in),
                format_time_only(r.entry.clock_out),
                r.title or r.estimate or "-",
                f"{r.distance:.1f}" if r.is_drive else "",
                f"{r.hours:.2f}",
                key=str(i),
            )

        excluded = excluded_count(self.tree_records, self.tree_root) if node is self.tree_root else 0
        self.query_one("#node-summary", NodeSummary).update_display(
            node, excluded, self.show_money, self.config.currency
        )

    def _refresh_fringe_display(self):
        records = self._fringe_records()
        groups = group_by_category(records)

        groups_table = self.query_one("#fringe-groups", DataTable)
        groups_table.clear()
        groups_table.add_row(
            Text("All", style="bold"),
            str(len(records)),
            f"{sum(g.total_hours for g in groups):.2f}",
            money(sum((g.total_pay for g in groups), 0), self.config.currency),
            key=ALL_FRINGES,
        )
        for group in groups:
            style = "bold" if group.key == self.selected_fringe else ""
            groups_table.add_row(
                Text(group.label, style=style),
                str(group.record_count),
                f"{group.total_hours:.2f}",
                money(group.total_pay, self.config.currency),
                key=group.key,
            )

        shown = self._fringe_table_records()
        table = self.query_one("#fringe-table", DataTable)
        table.clear()
        self._table_records["fringe-table"] = shown
        for i, r in enumerate(shown):
            pay = r.pay
            table.add_row(
                self.employee_labels.get(r.employee) or r.employee,
                r.date_label,
                r.title,
                r.estimate or "--",
                r.fringe,
                f"{r.hours:.2f}",
                f"{float(pay.reg_hrs):.2f}" if pay else "",
                f"{float(pay.ot_hrs):.2f}" if pay else "",
                f"{float(pay.dt_hrs):.2f}" if pay else "",
                money(pay.gross_pay, self.config.currency) if pay and self.show_money else "",
                key=str(i),
            )

        self.query_one("#fringe-summary", FringeSummary).update_display(
            groups, summarize_by_employee(shown), self.employee_labels, self.config.currency
        )

    def _refresh_payroll_display(self):
        week_end = get_week_end(self.week_start)
        self.query_one("#week-header", WeekHeader).update_display(
            "PAYROLL", self.week_start.date(), week_end.date()
        )

        report = build_payroll_week(self.records, self.week_start, self.snapshot.employees, self.config)
        table = self.query_one("#payroll-table", DataTable)
        table.clear()
        for emp in report:
            day_cells = []
            for day in emp.days:
                total = float(day.total)
                cell = Text(f"{total:.2f}" if total else "-", style="" if total else "dim")
                if day.certified:
                    cell.stylize("underline")
                day_cells.append(cell)
            table.add_row(
                emp.name,
                *day_cells,
                f"{float(emp.total_reg):.2f}",
                f"{float(emp.total_ot):.2f}",
                f"{float(emp.total_dt):.2f}",
                f"{float(emp.total_travel):.2f}",
                money(emp.rate_site, self.config.currency) if self.show_money else "",
                money(emp.total_amount, self.config.currency) if self.show_money else "",
                key=emp.employee,
            )

        self.query_one("#payroll-summary", PayrollSummary).update_display(report, self.config.currency)

    def _refresh_comp_display(self):
        week_end = get_week_end(self.week_start)
        title = "WORKERS COMP + DRIVE" if self.include_drive else "WORKERS COMP"
        self.query_one("#comp-header", WeekHeader).update_display(
            title, self.week_start.date(), week_end.date()
        )

        report = self._comp_report()
        costs = report.comp_cost_by_item()
        currency = self.config.currency

        groups_table = self.query_one("#comp-groups", DataTable)
        groups_table.clear()
        for group in report.groups:
            groups_table.add_row(
                group.label,
                str(group.record_count),
                f"{group.total_hours:.2f}",
                money(group.total_pay, currency) if self.show_money else "",
                money(costs.get(group.key, 0), currency),
                key=group.key,
            )

        table = self.query_one("#comp-table", DataTable)
        table.clear()
        self._table_records["comp-table"] = report.records
        for i, entry in enumerate(report.entries):
            r = entry.record
            pay = r.pay
            table.add_row(
                self.employee_labels.get(r.employee) or r.employee,
                r.date_label,
                entry.item,
                Text(r.type or "-", style="cyan" if r.is_drive else ""),
                f"{r.hours:.2f}",
                f"{float(pay.reg_hrs):.2f}",
                f"{float(pay.ot_hrs):.2f}",
                f"{float(pay.dt_hrs):.2f}",
                f"{float(pay.travel_hrs):.2f}",
                money(entry.subject_wages, currency) if self.show_money else "",
                f"{float(entry.wc_rate):.2f}",
                money(entry.comp_cost, currency),
                key=str(i),
            )

        self.query_one("#comp-summary", CompSummary).update_display(report, currency)

    def _set_view_mode(self, mode: str):
        """Switch between view modes and toggle container visibility."""
        self.view_mode = mode
        for view, selector in self.VIEW_CONTAINERS.items():
            container = self.query_one(selector)
            if view == mode:
                container.remove_class("hidden")
            else:
                container.add_class("hidden")

        self.refresh_bindings()
        self._refresh_display()

        if mode == "tree":
            self.query_one("#time-tree", Tree).focus()
        elif mode == "fringe":
            self.query_one("#fringe-groups", DataTable).focus()
        elif mode == "payroll":
            self.query_one("#payroll-table", DataTable).focus()
        elif mode == "comp":
            self.query_one("#comp-table", DataTable).focus()

    def check_action(self, action: str, parameters: tuple[object, ...]) -> bool | None:
        """Check if an action is available based on current view mode."""
        if action == "tree_view":
            return self.view_mode != "tree"
        elif action == "fringe_view":
            return self.view_mode != "fringe"
        elif action == "payroll_view":
            return self.view_mode != "payroll"
        elif action == "comp_view":
            return self.view_mode != "comp"
        elif action in ("prev_period", "next_period"):
            return True if self.view_mode in ("fringe", "payroll", "comp") else None
        elif action in ("filter_employee", "filter_estimate", "filter_type"):
            return True if self.view_mode == "tree" else None
        elif action == "fringe_week":
            return True if self.view_mode == "fringe" else None
        elif action == "toggle_drive":
            return True if self.view_mode == "comp" else None
        elif action == "export":
            return True if self.view_mode in ("tree", "fringe") else None
        return True

    # --- Events ---

    def on_tree_node_selected(self, event: Tree.NodeSelected) -> None:
        self.selected_node_id = event.node.data or "ROOT"
        self._refresh_tree_display()

    def on_data_table_row_selected(self, event: DataTable.RowSelected) -> None:
        table_id = event.data_table.id
        key = event.row_key.value

        if table_id == "fringe-groups":
            self.selected_fringe = key or ALL_FRINGES
            self._refresh_fringe_display()
            return

        records = self._table_records.get(table_id or "")
        if records is None or key is None:
            return
        try:
            record = records[int(key)]
        except (ValueError, IndexError):
            return
        label = self.employee_labels.get(record.employee) or record.employee
        self.push_screen(RecordDetailScreen(record, label, self.config))

    # --- Actions ---

    def action_tree_view(self):
        self._set_view_mode("tree")

    def action_fringe_view(self):
        self._set_view_mode("fringe")

    def action_payroll_view(self):
        self._set_view_mode("payroll")

    def action_comp_view(self):
        self._set_view_mode("comp")

    def action_prev_period(self):
        if self.view_mode in ("payroll", "comp"):
            self.week_start = sub_weeks(self.week_start, 1)
        elif self.view_mode == "fringe":
            self.fringe_year -= 1
            self.fringe_week = None
            self.selected_fringe = ALL_FRINGES
        self._refresh_display()

    def action_next_period(self):
        if self.view_mode in ("payroll", "comp"):
            self.week_start = add_weeks(self.week_start, 1)
        elif self.view_mode == "fringe":
            self.fringe_year += 1
            self.fringe_week = None
            self.selected_fringe = ALL_FRINGES
        self._refresh_display()

    def _apply_filters(self):
        self._rebuild_tree()
        self.selected_node_id = "ROOT"
        self._populate_tree()
        self._refresh_display()
        self.notify(f"Showing {self._filter_label() or 'all records'}")

    def action_filter_employee(self):
        self.filter_employee = cycle_option(self.filter_employee, self._filter_options("employee"))
        self._apply_filters()

    def action_filter_estimate(self):
        self.filter_estimate = cycle_option(self.filter_estimate, self._filter_options("estimate"))
        self._apply_filters()

    def action_filter_type(self):
        self.filter_type = cycle_option(self.filter_type, self._filter_options("type"))
        self._apply_filters()

    def action_fringe_week(self):
        """Step back one week through the fringe year, then back to the whole year."""
        weeks = get_weeks_in_year(self.fringe_year)
        values = [w["value"] for w in weeks]
        current = self.fringe_week["value"] if self.fringe_week else None
        chosen = cycle_option(current, values)
        self.fringe_week = weeks[values.index(chosen)] if chosen else None
        self.selected_fringe = ALL_FRINGES
        self._refresh_display()

    def action_toggle_drive(self):
        self.include_drive = not self.include_drive
        self._refresh_display()

    def action_toggle_money(self):
        self.show_money = not self.show_money
        self._refresh_display()

    def action_reload(self):
        self._load_data()
        self.selected_node_id = "ROOT"
        self._populate_tree()
        self._refresh_display()
        if self.load_error:
            self.notify(self.load_error, severity="error")
        else:
            self.notify(f"Loaded {len(self.records)} records")

    def action_export(self):
        records = self._export_records()
        if not records:
            self.notify("Nothing to export", severity="warning")
            return

        def do_export(path: Path | None) -> None:
            if path is None:
                return
            if path.exists():
                self.push_screen(
                    ConfirmScreen(f"{path.name} exists. Overwrite?"),
                    lambda confirmed: self._write_export(records, path) if confirmed else None,
                )
            else:
                self._write_export(records, path)

        self.push_screen(ExportScreen(self._default_export_name()), do_export)

    def _write_export(self, records: list[ComputedRecord], path: Path) -> None:
        try:
            export_records(records, path, self.employee_labels)
        except OSError as e:
            logger.exception("Export to %s failed", path)
            self.notify(f"Export failed: {e}", severity="error")
            return
        logger.info("Exported records", extra={"path": str(path), "count": len(records)})
        self.notify(f"Exported {len(records)} records to {path}")


def _run_export(snapshot_path: str | None, export_path: str) -> int:
    configure_logging()
    config, config_error = load_config()
    if config_error:
        print(f"Error: {config_error}; using default settings")
    try:
        snapshot = storage.load_snapshot(snapshot_path, config)
    except SnapshotError as e:
        print(f"Error: {e}")
        return 1

    records = price_records(compute_records(snapshot.schedules, config), snapshot.employees, config)
    path = export_records(records, export_path, snapshot.employee_labels)
    print(f"Exported {len(records)} records to {path}")
    return 0


def main():
    import sys
    args = sys.argv[1:]

    if "--export" in args:
        idx = args.index("--export")
        if idx + 1 >= len(args):
            print("Usage: timecards [SNAPSHOT] [--export FILE.csv|FILE.xlsx]")
            sys.exit(2)
        export_path = args[idx + 1]
        del args[idx:idx + 2]
        sys.exit(_run_export(args[0] if args else None, export_path))

    configure_logging(os.getenv("TIMECARDS_LOG") or "timecards.log")
    app = TimecardsApp(args[0] if args else None)
    app.run()


if __name__ == "__main__":
    main()
