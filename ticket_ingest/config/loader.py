from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import DEFAULT_SHIFTS, IngestConfig, ShiftTable, ShiftWindow, SLAThresholds
from ..models.records import RecordKind, Shift
from ..services.shifts import ShiftConfigError, validate_shift_table
from ..services.sla import SLAConfigError

"""Config loader.

Responsibilities:
- Load YAML (config/ingest.yml, or $TICKET_INGEST_CONFIG)
- Validate against config_schema.json
- Apply defaults (timezone=UTC, yield_every=100, built-in shifts / SLA tables)
- Run the shift tiling and SLA threshold validators on the loaded tables
"""

__all__ = [
    "CONFIG_ENV_VAR",
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "ConfigError",
    "resolve_config_path",
    "load_config",
]

CONFIG_ENV_VAR = "TICKET_INGEST_CONFIG"
DEFAULT_CONFIG_PATH = Path("config/ingest.yml")
SCHEMA_PATH = Path(__file__).parent / "config_schema.json"


class ConfigError(Exception):
    pass


def resolve_config_path(path: Path | None = None) -> Path:
    """Explicit path, else $TICKET_INGEST_CONFIG, else config/ingest.yml."""
    if path is not None:
        return Path(path)
    env = os.getenv(CONFIG_ENV_VAR)
    if env:
        return Path(env)
    return DEFAULT_CONFIG_PATH


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing / not JSON, or data violates the schema
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        where = "/".join(str(p) for p in e.absolute_path) or "<root>"
        raise ConfigError(f"config validation failed at {where}: {e.message}") from e


def _build_shifts(raw: dict[str, Any] | None) -> ShiftTable:
    if not raw:
        return DEFAULT_SHIFTS
    windows = []
    for shift in Shift:
        entry = raw[shift.value]
        default_name = DEFAULT_SHIFTS.get(shift).name
        windows.append(ShiftWindow(shift, entry.get("name", default_name), entry["start"], entry["end"]))
    table = ShiftTable(windows=tuple(windows))
    try:
        return validate_shift_table(table)
    except ShiftConfigError as e:
        raise ConfigError(f"shifts: {e}") from e


def _build_thresholds(raw: dict[str, Any] | None) -> SLAThresholds:
    thresholds = SLAThresholds()
    for kind in RecordKind:
        updates = (raw or {}).get(kind.value)
        if not updates:
            continue
        try:
            thresholds = thresholds.with_updates(kind, updates)
        except SLAConfigError as e:
            raise ConfigError(f"sla_thresholds: {e}") from e
    return thresholds


def load_config(path: Path | None = None) -> IngestConfig:
    """Load and validate the ingestion config.

    ``None`` means built-in defaults, no file is read. Use resolve_config_path()
    first to honour $TICKET_INGEST_CONFIG.
    """
    if path is None:
        return IngestConfig()
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)

    tz = data.get("timezone", "UTC")
    try:
        ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigError(f"unknown timezone: {tz}") from e

    return IngestConfig(
        timezone=tz,
        yield_every=data.get("yield_every", 100),
        shifts=_build_shifts(data.get("shifts")),
        sla_thresholds=_build_thresholds(data.get("sla_thresholds")),
    )
