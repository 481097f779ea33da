from __future__ import annotations

import json
import logging
import math
import os
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path

from import_data import (
    employees_from_list,
    estimate_fringes_from_list,
    schedule_from_dict,
    workers_comp_rates_from_list,
)
from models import Config, Employee, Schedule
from timestamps import parse_instant

logger = logging.getLogger(__name__)


class SnapshotError(ValueError):
    """Raised when a snapshot or config file cannot be used at all."""


def _get_snapshot_path() -> Path:
    """Get snapshot path from environment variable or default location."""
    if env_path := os.environ.get("TIMECARDS_SNAPSHOT"):
        return Path(env_path)
    return Path(__file__).parent / "data" / "schedules.json"


def _get_config_path() -> Path:
    """Get config path from environment variable or default location."""
    if env_path := os.environ.get("TIMECARDS_CONFIG"):
        return Path(env_path)
    return Path(__file__).parent / "data" / "config.json"


@dataclass
class Snapshot:
    schedules: list[Schedule] = field(default_factory=list)
    employees: dict[str, Employee] = field(default_factory=dict)
    estimates: list[dict] = field(default_factory=list)
    wc_rates: dict[str, Decimal] = field(default_factory=dict)
    source: Path | None = None

    @property
    def employee_labels(self) -> dict[str, str]:
        return {key: emp.display_name for key, emp in self.employees.items()}


def _read_json(path: Path):
    try:
        with path.open(encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise SnapshotError(f"File not found: {path}") from e
    except json.JSONDecodeError as e:
        raise SnapshotError(f"Invalid JSON in {path}: {e}") from e


def parse_snapshot(data, config: Config | None = None) -> Snapshot:
    """Turn a ``getSchedulesPage`` payload into a Snapshot.

    Accepts the bare result or the ``{"success": ..., "result": ...}`` envelope.
    """
    if isinstance(data, dict) and isinstance(data.get("result"), dict):
        data = data["result"]
    if isinstance(data, list):
        data = {"schedules": data}
    if not isinstance(data, dict):
        raise SnapshotError("Snapshot must be a JSON object or a list of schedules")

    initial = data.get("initialData") or {}
    employees = employees_from_list(initial.get("employees") or data.get("employees") or [])
    estimates = initial.get("estimates") or data.get("estimates") or []
    fringes = estimate_fringes_from_list(estimates)
    wc_rates = workers_comp_rates_from_list(initial.get("constants") or data.get("constants") or [])

    schedules = []
    for raw in data.get("schedules") or []:
        if not isinstance(raw, dict):
            logger.warning("Skipping malformed schedule document: %r", raw)
            continue
        schedules.append(schedule_from_dict(raw, fringes, config))

    logger.info(
        "Loaded snapshot",
        extra={"schedules": len(schedules), "employees": len(employees)},
    )
    return Snapshot(schedules=schedules, employees=employees, estimates=estimates, wc_rates=wc_rates)


def load_snapshot(path: Path | str | None = None, config: Config | None = None) -> Snapshot:
    """Load a schedules snapshot from disk."""
    path = Path(path) if path else _get_snapshot_path()
    snapshot = parse_snapshot(_read_json(path), config)
    snapshot.source = path
    return snapshot


# Must stay > 0
_POSITIVE_KEYS = {"average_speed_mph", "driving_factor"}


def _coerce(value, default):
    """Convert a config value to the type of its default, or None if it does not fit."""
    if isinstance(value, bool):
        return None
    if isinstance(default, Decimal):
        try:
            result = Decimal(str(value))
        except InvalidOperation:
            return None
        return result if result.is_finite() else None
    if isinstance(default, datetime):
        return parse_instant(value)
    if isinstance(default, float):
        try:
            result = float(value)
        except (TypeError, ValueError):
            return None
        return result if math.isfinite(result) else None
    if isinstance(default, str):
        return str(value)
    return None


def get_config(path: Path | str | None = None) -> Config:
    """Load config, overlaying any values found in the config file on the defaults."""
    path = Path(path) if path else _get_config_path()
    config = Config()
    if not path.exists():
        return config

    data = _read_json(path)
    if not isinstance(data, dict):
        raise SnapshotError(f"Config file {path} must contain a JSON object")

    for key, value in data.items():
        if not hasattr(config, key):
            logger.warning("Ignoring unknown config key %s", key)
            continue
        converted = _coerce(value, getattr(config, key))
        if converted is None:
            logger.warning("Ignoring invalid value for config key %s: %r", key, value)
            continue
        if key in _POSITIVE_KEYS and converted <= 0:
            logger.warning("Ignoring non-positive value for config key %s: %r", key, value)
            continue
        setattr(config, key, converted)

    return config
