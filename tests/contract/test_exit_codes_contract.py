from __future__ import annotations

from pathlib import Path

from ticket_ingest.cli import main as cli_main

"""Exit code contract: 0 all valid, 2 some rows rejected, 1 fatal."""


def test_exit_code_all_success(fresh_logging, make_workbook, request_row):
    path = make_workbook([request_row(1)])
    assert cli_main([str(path), "--kind", "requests"]) == 0


def test_exit_code_partial_failure(fresh_logging, make_workbook, request_row):
    path = make_workbook([request_row(1), request_row(2, State="limbo")])
    assert cli_main([str(path), "--kind", "requests"]) == 2


def test_exit_code_fatal_structural(fresh_logging, make_workbook, incident_row):
    rows = [incident_row(1)]
    del rows[0]["Opened"]
    path = make_workbook(rows)
    assert cli_main([str(path), "--kind", "incidents"]) == 1


def test_exit_code_fatal_config(fresh_logging, temp_workdir: Path, make_workbook, request_row):
    (temp_workdir / "config" / "ingest.yml").write_text("timezone: 5\n", encoding="utf-8")
    path = make_workbook([request_row(1)])
    assert cli_main([str(path), "--kind", "requests"]) == 1
