from __future__ import annotations

import json
import re
from pathlib import Path

from ticket_ingest.logging.error_log import ErrorLogBuffer
from ticket_ingest.models.error_record import ValidationError


def test_flush_writes_json_lines(temp_workdir: Path):
    buf = ErrorLogBuffer()
    buf.append(ValidationError.create(3, "Opened", "invalid opened date", "32/13/2025"))
    buf.extend([
        ValidationError.create(4, "all", "empty or invalid row"),
        ValidationError.create(5, "ShortDescription", "short description is required"),
    ])
    path = buf.flush()
    assert path.exists()
    assert path.parent == Path("logs")
    assert re.fullmatch(r"errors-\d{8}-\d{6}\.log", path.name)
    lines = path.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) == 3
    for raw in lines:
        assert set(json.loads(raw)) == {"row", "column", "value", "reason"}
    assert json.loads(lines[0])["value"] == "32/13/2025"
    # buffer cleared after flush
    assert len(buf) == 0


def test_flush_without_records_writes_nothing(temp_workdir: Path):
    buf = ErrorLogBuffer()
    assert buf.flush() is None
    assert list((temp_workdir / "logs").iterdir()) == []


def test_multiple_flushes_append_to_same_file(temp_workdir: Path):
    buf = ErrorLogBuffer(logs_dir=temp_workdir / "custom")
    buf.append(ValidationError.create(2, "Number", "ticket number is required"))
    path = buf.flush()
    size1 = path.stat().st_size
    buf.append(ValidationError.create(3, "Number", "ticket number is required"))
    path2 = buf.flush()
    assert path == path2
    assert path2.stat().st_size > size1
    assert path.parent == temp_workdir / "custom"


def test_non_ascii_is_kept_readable():
    line = ValidationError.create(2, "Priority", "invalid priority", "Crítico").to_json_line()
    assert "Crítico" in line
