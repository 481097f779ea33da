"""Shared fixtures for tests."""

from __future__ import annotations

import json
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator

import pytest

# Point config lookups at an empty directory before anything imports storage
_test_dir = tempfile.mkdtemp()
os.environ["TIMECARDS_CONFIG"] = str(Path(_test_dir) / "config.json")
os.environ["TIMECARDS_SNAPSHOT"] = str(Path(_test_dir) / "schedules.json")


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


SNAPSHOT = {
    "success": True,
    "result": {
        "schedules": [
            {
                "_id": "sched-1",
                "estimate": "E-100-V2",
                "projectTitle": "Main St Trench",
                "fromDate": "2025-11-03T07:00:00.000Z",
                "fringe": "Local 12",
                "certifiedPayroll": "Yes",
                "timesheet": [
                    {
                        "_id": "ts-1",
                        "employee": "ana@example.com",
                        "type": "Site Time",
                        "clockIn": "2025-11-03T08:00:00.000Z",
                        "clockOut": "2025-11-03T18:00:00.000Z",
                        "lunchStart": "2025-11-03T12:00:00.000Z",
                        "lunchEnd": "2025-11-03T12:30:00.000Z",
                    },
                    {
                        "_id": "ts-2",
                        "employee": "ana@example.com",
                        "type": "Drive Time",
                        "locationIn": "33.0,-117.0",
                        "locationOut": "33.0,-117.0",
                        "dumpWashout": "1.00 hrs (2 qty)",
                        "clockIn": "11/3/2025 6:30 AM",
                    },
                ],
            },
            {
                "_id": "sched-2",
                "estimate": "E-200",
                "title": "Harbor Bore",
                "fromDate": "2025-11-10T07:00:00Z",
                "timesheet": [
                    {
                        "_id": "ts-3",
                        "employee": "ben@example.com",
                        "type": "Site Time",
                        "clockIn": "2025-11-10T07:00",
                        "clockOut": "2025-11-10T15:00",
                        "perDiem": "25",
                    },
                    {
                        "_id": "ts-4",
                        "employee": "ben@example.com",
                        "type": "Drive Time",
                        "manualDistance": "55",
                    },
                    "not-an-entry",
                ],
            },
        ],
        "initialData": {
            "employees": [
                {"value": "ana@example.com", "label": "Ana Ruiz", "hourlyRateSITE": "$50.00"},
                {"value": "ben@example.com", "label": "Ben Cho", "hourlyRateSITE": 40, "hourlyRateDrive": "30"},
            ],
            "estimates": [
                {"value": "E-200", "fringe": "Local 99"},
            ],
        },
    },
}


@pytest.fixture
def snapshot_data() -> dict:
    """A fresh copy of the sample store payload."""
    return json.loads(json.dumps(SNAPSHOT))


@pytest.fixture
def snapshot_path(tmp_path: Path, snapshot_data: dict) -> Generator[Path, None, None]:
    """The sample payload written to a temporary file."""
    path = tmp_path / "schedules.json"
    path.write_text(json.dumps(snapshot_data))
    yield path


@pytest.fixture
def site_entry():
    """A Site Time entry after the rounding cutoff: 8.5h on site, 30 min lunch."""
    from models import SITE_TIME, TimesheetEntry

    return TimesheetEntry(
        employee="ana@example.com",
        type=SITE_TIME,
        clock_in=utc(2025, 11, 3, 8, 0),
        clock_out=utc(2025, 11, 3, 16, 30),
        lunch_start=utc(2025, 11, 3, 12, 0),
        lunch_end=utc(2025, 11, 3, 12, 30),
    )


@pytest.fixture
def drive_entry():
    """A Drive Time entry between two points about 8 road miles apart."""
    from models import DRIVE_TIME, TimesheetEntry

    return TimesheetEntry(
        employee="ana@example.com",
        type=DRIVE_TIME,
        location_in="33.0,-117.0",
        location_out="33.1,-117.0",
    )


@pytest.fixture
def make_record():
    """Factory for computed records with fixed hours."""
    from models import SITE_TIME, ComputedRecord, TimesheetEntry

    def _make(employee: str, clock_in: datetime | None, hours: float, type: str = SITE_TIME, fringe: str = "No", **kwargs):
        entry = TimesheetEntry(employee=employee, type=type, clock_in=clock_in)
        return ComputedRecord(
            entry=entry,
            clock_in=clock_in,
            hours=hours,
            distance=0.0,
            fringe=fringe,
            **kwargs,
        )

    return _make


@pytest.fixture
def sample_config():
    """Create a sample Config for testing."""
    from models import Config

    return Config()
