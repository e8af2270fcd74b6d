from __future__ import annotations

import json
from dataclasses import asdict, dataclass

"""ValidationError model for row-level ingestion reporting.

A ValidationError is a reporting artifact, not an exception: one is produced per
violated rule and the offending row is dropped while the rest of the sheet keeps
flowing. Row addressing matches what a user sees in the spreadsheet (1-based,
header row counted, so the first data row is row 2).

The JSON Lines shape adheres to ticket_ingest/contracts/error_log_schema.json.
"""

__all__ = [
    "ValidationError",
    "ALL_COLUMNS",
]

# Column marker for errors that concern the whole row
ALL_COLUMNS = "all"


@dataclass(frozen=True)
class ValidationError:
    """Structured row-level validation error.

    Attributes:
        row: Spreadsheet row number (1-based, header counted)
        column: Canonical field name, or "all" for row-level problems
        value: Offending raw value ("" when the value is missing)
        reason: Human-readable explanation
    """
    row: int
    column: str
    value: str
    reason: str

    @staticmethod
    def create(row: int, column: str, reason: str, value: str = "") -> ValidationError:
        return ValidationError(row=row, column=column, value=value, reason=reason)

    def to_json_line(self) -> str:
        """Serialize to a single JSON Lines entry (fixed key set)."""
        return json.dumps(asdict(self), ensure_ascii=False)

    def __str__(self) -> str:
        if self.value:
            return f"row {self.row}: {self.reason} (value: {self.value})"
        return f"row {self.row}: {self.reason}"
