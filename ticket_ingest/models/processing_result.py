from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .error_record import ValidationError
from .records import CanonicalRecord, RecordKind

"""Ingestion result model.

An IngestResult is built once, at the end of a run. Nothing is published to the
caller while rows are still being processed.
"""


@dataclass(frozen=True)
class IngestResult:
    """Outcome of one ingestion run.

    records keep the input row order; errors are ordered by row then by rule.
    """
    kind: RecordKind
    records: list[CanonicalRecord]
    errors: list[ValidationError]
    total_rows: int  # data rows seen (header excluded)
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    sheet_name: str | None = None

    @property
    def valid_rows(self) -> int:
        return len(self.records)

    @property
    def invalid_rows(self) -> int:
        return self.total_rows - len(self.records)

    @property
    def rows_per_sec(self) -> float:
        if self.elapsed_seconds > 0:
            return self.total_rows / self.elapsed_seconds
        return 0.0

    def errors_for_row(self, row: int) -> list[ValidationError]:
        return [e for e in self.errors if e.row == row]
