from __future__ import annotations

import json
import os
from pathlib import Path
from unittest.mock import patch

from ticket_ingest.cli import main as cli_main
from ticket_ingest.cli.app import EXIT_FATAL, EXIT_PARTIAL_FAILURE, EXIT_SUCCESS_ALL
from ticket_ingest.services.orchestrator import ingest_file


def test_all_rows_valid(fresh_logging, make_workbook, incident_row, capsys):
    path = make_workbook([incident_row(i) for i in range(1, 4)])
    code = cli_main([str(path), "--kind", "incidents"])
    out = capsys.readouterr().out
    assert code == EXIT_SUCCESS_ALL
    assert "SUMMARY kind=incidents rows=3 valid=3 invalid=0 errors=0" in out
    assert list(Path("logs").iterdir()) == []


def test_partial_failure_writes_error_log(fresh_logging, make_workbook, incident_row, capsys):
    rows = [incident_row(i) for i in range(1, 5)]
    rows[1]["Number"] = ""
    path = make_workbook(rows)
    code = cli_main([str(path), "--kind", "incidents"])
    out = capsys.readouterr().out
    assert code == EXIT_PARTIAL_FAILURE
    assert "WARN 1 row(s) rejected" in out
    logs = list(Path("logs").glob("errors-*.log"))
    assert len(logs) == 1
    entry = json.loads(logs[0].read_text(encoding="utf-8").strip())
    assert entry["row"] == 3
    assert entry["column"] == "Number"


def test_missing_columns_is_fatal(fresh_logging, make_workbook, capsys):
    path = make_workbook([{"Foo": "1", "Bar": "2"}])
    code = cli_main([str(path), "--kind", "requests"])
    out = capsys.readouterr().out
    assert code == EXIT_FATAL
    assert "ERROR ingest: required columns not found: Number, Opened, RequestItem, RequestedForName" in out


def test_no_valid_rows_is_fatal_and_logged(fresh_logging, make_workbook, incident_row, capsys):
    path = make_workbook([incident_row(1, Opened="never")])
    code = cli_main([str(path), "--kind", "incidents"])
    out = capsys.readouterr().out
    assert code == EXIT_FATAL
    assert "no valid records out of 1 row(s)" in out
    assert len(list(Path("logs").glob("errors-*.log"))) == 1


def test_unreadable_file_is_fatal(fresh_logging, temp_workdir: Path, capsys):
    code = cli_main([str(temp_workdir / "data" / "nope.xlsx"), "--kind", "incidents"])
    assert code == EXIT_FATAL
    assert "ERROR ingest: file not found" in capsys.readouterr().out


def test_output_json(fresh_logging, make_workbook, request_row, temp_workdir: Path):
    path = make_workbook([request_row(1), request_row(2, Priority="Alta")])
    out_file = temp_workdir / "out" / "records.json"
    code = cli_main([str(path), "--kind", "requests", "--output", str(out_file)])
    assert code == EXIT_SUCCESS_ALL
    data = json.loads(out_file.read_text(encoding="utf-8"))
    assert [d["priority"] for d in data] == ["MEDIUM", "HIGH"]
    assert data[0]["kind"] == "requests"


def test_config_file_is_used(fresh_logging, write_config, make_workbook, incident_row):
    path = make_workbook([incident_row(1)])
    with patch("ticket_ingest.cli.app.ingest_file", wraps=ingest_file) as spy:
        assert cli_main([str(path), "--kind", "incidents"]) == EXIT_SUCCESS_ALL
    cfg = spy.call_args.args[2]
    assert cfg.timezone == "America/Sao_Paulo"
    assert cfg.yield_every == 10


def test_config_from_env_file(fresh_logging, temp_workdir: Path, make_workbook, incident_row, capsys):
    (temp_workdir / "alt.yml").write_text("yield_every: 0\n", encoding="utf-8")
    (temp_workdir / ".env").write_text("TICKET_INGEST_CONFIG=alt.yml\n", encoding="utf-8")
    path = make_workbook([incident_row(1)])
    try:
        code = cli_main([str(path), "--kind", "incidents"])
    finally:
        os.environ.pop("TICKET_INGEST_CONFIG", None)
    assert code == EXIT_FATAL
    assert "ERROR config:" in capsys.readouterr().out


def test_explicit_missing_config_is_fatal(fresh_logging, make_workbook, incident_row, capsys):
    path = make_workbook([incident_row(1)])
    code = cli_main([str(path), "--kind", "incidents", "--config", "config/absent.yml"])
    assert code == EXIT_FATAL
    assert "ERROR config: config file not found" in capsys.readouterr().out
