"""Modal screens for the timecards application."""

from __future__ import annotations

from pathlib import Path

from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, Input, Label, Static
from textual.screen import ModalScreen
from rich.text import Text

from calculator import format_special_activity
from models import ComputedRecord, Config
from timestamps import format_date_only, format_time_only


class ConfirmScreen(ModalScreen[bool]):
    """Simple confirmation dialog."""

    CSS = """
    ConfirmScreen {
        align: center middle;
    }

    #confirm-dialog {
        width: 50;
        height: auto;
        padding: 1 2;
        background: $surface;
        border: thick $warning;
    }

    #confirm-buttons {
        width: 100%;
        height: auto;
        margin-top: 1;
    }

    #confirm-buttons Button {
        width: 1fr;
        margin: 0 1;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
        Binding("y", "confirm", "Yes"),
        Binding("n", "cancel", "No"),
    ]

    def __init__(self, message: str):
        super().__init__()
        self.message = message

    def compose(self) -> ComposeResult:
        with Vertical(id="confirm-dialog"):
            yield Label(self.message)
            with Horizontal(id="confirm-buttons"):
                yield Button("Yes (Y)", variant="warning", id="yes")
                yield Button("No (N)", variant="default", id="no")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "yes")

    def action_confirm(self) -> None:
        self.dismiss(True)

    def action_cancel(self) -> None:
        self.dismiss(False)


class RecordDetailScreen(ModalScreen[None]):
    """Read-only breakdown of how a record's hours were derived."""

    CSS = """
    RecordDetailScreen {
        align: center middle;
    }

    #detail-dialog {
        width: 72;
        height: auto;
        padding: 1 2;
        background: $surface;
        border: thick $primary;
    }

    #detail-title {
        width: 100%;
        text-align: center;
        text-style: bold;
        margin-bottom: 1;
    }
    """

    BINDINGS = [
        Binding("escape", "close", "Close"),
        Binding("enter", "close", "Close", show=False),
    ]

    def __init__(self, record: ComputedRecord, employee_label: str = "", config: Config | None = None):
        super().__init__()
        self.record = record
        self.employee_label = employee_label or record.employee
        self.config = config or Config()

    def detail_text(self) -> Text:
        r = self.record
        e = r.entry
        text = Text()
        text.append(f"Employee   {self.employee_label}\n")
        text.append(f"Type       {e.type or '-'}\n")
        text.append(f"Job        {r.title or '-'}  ({r.estimate or '--'})\n")
        text.append(f"Date       {format_date_only(r.clock_in)}\n")

        if r.is_drive:
            text.append(f"From       {e.location_in or '-'}\n")
            text.append(f"To         {e.location_out or '-'}\n")
            text.append(f"Geo dist.  {r.calculated_distance:.2f} mi\n")
            if e.manual_distance and e.manual_distance > 0:
                text.append(f"Manual     {e.manual_distance:.2f} mi (overrides geo distance)\n", style="yellow")
            if e.dump_washout:
                text.append(f"Washout    {format_special_activity(e.dump_washout, self.config.washout_hours)}\n")
            if e.shop_time:
                text.append(f"Shop       {format_special_activity(e.shop_time, self.config.shop_hours)}\n")
            text.append(f"Distance   {r.distance:.2f} mi\n")
            if e.is_active:
                text.append("Status     In progress\n", style="bold yellow")
        else:
            text.append(f"In / Out   {format_time_only(e.clock_in)} - {format_time_only(e.clock_out)}\n")
            if e.lunch_start and e.lunch_end:
                text.append(f"Lunch      {format_time_only(e.lunch_start)} - {format_time_only(e.lunch_end)}\n")

        if e.manual_duration and e.manual_duration > 0:
            text.append(f"Manual     {e.manual_duration:.2f}h (overrides computed hours)\n", style="yellow")
        text.append(f"Hours      {r.hours:.2f}\n", style="bold")

        if r.pay:
            text.append(
                f"Pay        reg {float(r.pay.reg_hrs):.2f}h  ot {float(r.pay.ot_hrs):.2f}h  "
                f"dt {float(r.pay.dt_hrs):.2f}h  gross ${float(r.pay.gross_pay):,.2f}\n"
            )
        if e.comments:
            text.append(f"Comments   {e.comments}\n", style="dim")
        return text

    def compose(self) -> ComposeResult:
        with Vertical(id="detail-dialog"):
            yield Label("Timesheet Record", id="detail-title")
            yield Static(self.detail_text())

    def action_close(self) -> None:
        self.dismiss(None)


class ExportScreen(ModalScreen[Path | None]):
    """Ask for the file the current table should be exported to."""

    CSS = """
    ExportScreen {
        align: center middle;
    }

    #export-dialog {
        width: 64;
        height: auto;
        padding: 1 2;
        background: $surface;
        border: thick $primary;
    }

    .field-label {
        height: 1;
        color: $text-muted;
    }

    #export-buttons {
        width: 100%;
        height: auto;
        margin-top: 1;
        align: center middle;
    }

    #export-buttons Button {
        width: auto;
        min-width: 12;
        margin: 0 2;
    }
    """

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
    ]

    SUFFIXES = (".csv", ".xlsx")

    def __init__(self, default_name: str):
        super().__init__()
        self.default_name = default_name

    def compose(self) -> ComposeResult:
        with Vertical(id="export-dialog"):
            yield Label("File (.csv or .xlsx)", classes="field-label")
            yield Input(value=self.default_name, id="export-path")
            with Horizontal(id="export-buttons"):
                yield Button("Export", variant="primary", id="export")
                yield Button("Cancel", variant="default", id="cancel")

    def on_mount(self) -> None:
        self.query_one("#export-path", Input).focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        self._submit()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "cancel":
            self.dismiss(None)
        elif event.button.id == "export":
            self._submit()

    def action_cancel(self) -> None:
        self.dismiss(None)

    def validate_path(self, value: str) -> Path | None:
        """The path to export to, or None if the name is unusable."""
        value = value.strip()
        if not value:
            return None
        path = Path(value).expanduser()
        if path.suffix.lower() not in self.SUFFIXES:
            return None
        return path

    def _submit(self) -> None:
        path = self.validate_path(self.query_one("#export-path", Input).value)
        if path is None:
            self.app.notify("Enter a file name ending in .csv or .xlsx", severity="error")
            return
        self.dismiss(path)
