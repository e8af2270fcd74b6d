# Shared pytest fixtures
from __future__ import annotations

import tempfile
from collections.abc import Callable
from pathlib import Path

import pandas as pd
import pytest

from ticket_ingest.logging.init import reset_logging


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("TICKET_INGEST_CONFIG", raising=False)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """timezone: America/Sao_Paulo
yield_every: 10
shifts:
  MORNING: {name: "Manhã", start: "06:00", end: "14:00"}
  AFTERNOON: {name: "Tarde", start: "14:00", end: "22:00"}
  NIGHT: {name: "Noite", start: "22:00", end: "06:00"}
sla_thresholds:
  incidents: {P1: 2, P3: 24}
  requests: {LOW: 10}
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "ingest.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def fresh_logging():
    reset_logging()
    yield
    reset_logging()


def _incident_row(n: int, **overrides: str) -> dict[str, str]:
    row = {
        "Number": f"INC{n:07d}",
        "Opened": "29/03/2025 14:30",
        "Short description": f"Printer offline #{n}",
        "Priority": "3 - Moderate",
        "State": "Work in Progress",
        "Assignment group": "Brazil-Bahia-Local Support",
        "Assigned to": "Ana Souza",
        "Updated": "30/03/2025 09:15:00",
    }
    row.update(overrides)
    return row


def _request_row(n: int, **overrides: str) -> dict[str, str]:
    row = {
        "Number": f"RITM{n:07d}",
        "Opened": "2025-03-29 08:00:00",
        "Request item [Catalog Task]": "New laptop",
        "Requested for Name": "Carlos Lima",
        "Priority": "Medium",
        "State": "Opened",
        "Assignment group": "Brazil-Santo Andre-Local Support",
    }
    row.update(overrides)
    return row


@pytest.fixture()
def make_workbook(temp_workdir: Path) -> Callable[..., Path]:
    """Write rows (list of dicts) to data/<name> with pandas + openpyxl."""

    def _make(rows: list[dict[str, str]], name: str = "tickets.xlsx", sheet: str = "Page 1") -> Path:
        path = temp_workdir / "data" / name
        df = pd.DataFrame(rows)
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            df.to_excel(writer, sheet_name=sheet, index=False)
        return path

    return _make


@pytest.fixture()
def incident_row() -> Callable[..., dict[str, str]]:
    return _incident_row


@pytest.fixture()
def request_row() -> Callable[..., dict[str, str]]:
    return _request_row
