"""Write flat record tables for download: CSV text or an Excel workbook."""

from __future__ import annotations

import csv
import io
from collections.abc import Mapping
from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Font

from models import ComputedRecord

HEADERS = ["Employee", "Date", "Title", "Estimate", "Fringe", "Hours"]


def export_rows(
    records: list[ComputedRecord],
    employee_labels: Mapping[str, str] | None = None,
) -> list[list[str]]:
    """Table rows (without the header) in display order."""
    labels = employee_labels or {}
    return [
        [
            labels.get(r.employee) or r.employee,
            r.date_label,
            r.title,
            r.estimate or "--",
            r.fringe,
            f"{r.hours:.2f}",
        ]
        for r in records
    ]


def to_csv_text(
    records: list[ComputedRecord],
    employee_labels: Mapping[str, str] | None = None,
) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(HEADERS)
    writer.writerows(export_rows(records, employee_labels))
    return buffer.getvalue()


def write_csv(
    records: list[ComputedRecord],
    path: Path | str,
    employee_labels: Mapping[str, str] | None = None,
) -> Path:
    path = Path(path)
    path.write_text(to_csv_text(records, employee_labels), encoding="utf-8")
    return path


def write_workbook(
    records: list[ComputedRecord],
    path: Path | str,
    employee_labels: Mapping[str, str] | None = None,
    title: str = "Fringe Benefits",
) -> Path:
    """Write the same table to an .xlsx file, hours as numbers."""
    path = Path(path)
    wb = Workbook()
    ws = wb.active
    ws.title = title[:31]

    ws.append(HEADERS)
    for cell in ws[1]:
        cell.font = Font(bold=True)

    for row in export_rows(records, employee_labels):
        ws.append(row[:-1] + [float(row[-1])])

    for column, width in zip("ABCDEF", (28, 12, 36, 14, 12, 8)):
        ws.column_dimensions[column].width = width

    wb.save(path)
    return path


def export_records(
    records: list[ComputedRecord],
    path: Path | str,
    employee_labels: Mapping[str, str] | None = None,
) -> Path:
    """Write CSV or a workbook depending on the file extension."""
    path = Path(path)
    if path.suffix.lower() == ".xlsx":
        return write_workbook(records, path, employee_labels)
    return write_csv(records, path, employee_labels)
