from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import ValidationError

"""Validation error log: buffered JSON Lines output.

- One file per run: ``logs/errors-YYYYMMDD-HHMMSS.log`` (UTC stamp)
- Fixed key set per line (row, column, value, reason)
- The path is decided on first access, the file is only written on flush()
"""

__all__ = [
    "ValidationError",
    "ErrorLogBuffer",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class ErrorLogBuffer:
    """In-memory buffer of ValidationErrors. flush() appends them as JSON Lines."""

    def __init__(self, logs_dir: Path | None = None) -> None:
        self._records: list[ValidationError] = []
        self._file_path: Path | None = None
        self._logs_dir = logs_dir if logs_dir is not None else LOGS_DIR

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"errors-{stamp}.log"
        return self._file_path

    def append(self, record: ValidationError) -> None:
        self._records.append(record)

    def extend(self, records: Iterable[ValidationError]) -> None:
        self._records.extend(records)

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def flush(self) -> Path | None:
        """Write buffered errors. Returns the log path, or None when nothing was buffered."""
        if not self._records:
            return None
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
