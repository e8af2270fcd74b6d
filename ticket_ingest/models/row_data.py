from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

"""RowData model: one raw spreadsheet row with its workbook address."""

__all__ = [
    "RowData",
]


@dataclass(frozen=True)
class RowData:
    """A single RawRow before field resolution.

    row_number is the spreadsheet row (header is row 1, first data row is 2).
    values maps arbitrary header strings to cell strings.
    """
    row_number: int
    values: Mapping[str, str]

    @property
    def is_blank(self) -> bool:
        """True when the row carries no keys or only empty / whitespace cells."""
        if not self.values:
            return True
        return all(str(v if v is not None else "").strip() == "" for v in self.values.values())
