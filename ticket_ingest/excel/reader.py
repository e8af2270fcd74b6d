from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd

"""Spreadsheet reader.

Row 1 is the header, every following row is data. All cells come back as
strings (empty cell -> ""); pandas NA inference is disabled so literal text
such as "NA" or "None" survives untouched. Blank rows inside the data are kept
so row numbers keep matching the workbook; trailing blank rows are trimmed.
"""

__all__ = [
    "SheetReadError",
    "SheetHeaderError",
    "SheetData",
    "read_sheet",
    "frame_to_sheet",
]


class SheetReadError(Exception):
    """Raised when the file cannot be opened or holds no sheets."""


class SheetHeaderError(Exception):
    """Raised when the header row (1st line) is missing or blank."""


@dataclass
class SheetData:
    sheet_name: str
    columns: list[str]
    rows: list[dict[str, str]]  # header -> cell text, data rows in workbook order


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        if pd.isna(value):
            return ""
        # openpyxl hands back integral numbers as float when the column is mixed
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if value is pd.NaT:
        return ""
    return str(value)


def frame_to_sheet(df: pd.DataFrame, sheet_name: str) -> SheetData:
    """Turn a header-less raw frame into SheetData (row 1 = header)."""
    if df.shape[0] < 1:
        raise SheetHeaderError(f"sheet '{sheet_name}' has no header row")
    columns = [_cell_text(c).strip() for c in df.iloc[0].tolist()]
    if not any(columns):
        raise SheetHeaderError(f"sheet '{sheet_name}' header row is blank")

    rows: list[dict[str, str]] = []
    for raw in df.iloc[1:].itertuples(index=False, name=None):
        row: dict[str, str] = {}
        for col, val in zip(columns, raw, strict=False):
            if not col:
                continue
            text = _cell_text(val)
            # duplicate headers: first non-empty cell wins
            if row.get(col):
                continue
            row[col] = text
        rows.append(row)

    while rows and all(not v.strip() for v in rows[-1].values()):
        rows.pop()

    return SheetData(sheet_name=sheet_name, columns=[c for c in columns if c], rows=rows)


def read_sheet(path: Path, sheet_name: str | None = None) -> SheetData:
    """Read one sheet (default: the first) of an .xlsx/.xls/.csv file.

    Parameters
    ----------
    path: spreadsheet path
    sheet_name: sheet to read; None selects the first sheet

    Raises
    ------
    SheetReadError: unreadable file, unknown sheet, or workbook without sheets
    SheetHeaderError: missing / blank header row
    """
    path = Path(path)
    if not path.exists():
        raise SheetReadError(f"file not found: {path}")

    if path.suffix.lower() == ".csv":
        try:
            df = pd.read_csv(path, header=None, dtype=str, keep_default_na=False)
        except pd.errors.EmptyDataError as e:
            raise SheetHeaderError(f"sheet '{path.stem}' has no header row") from e
        except (OSError, UnicodeDecodeError, pd.errors.ParserError) as e:
            raise SheetReadError(f"cannot read {path.name}: {e}") from e
        return frame_to_sheet(df, path.stem)

    try:
        xls = pd.ExcelFile(path)
    except Exception as e:  # pandas/openpyxl raise a wide range of types for corrupt files
        raise SheetReadError(f"cannot read {path.name}: {e}") from e
    with xls:
        if not xls.sheet_names:
            raise SheetReadError(f"workbook {path.name} has no sheets")

        name = sheet_name if sheet_name is not None else xls.sheet_names[0]
        if name not in xls.sheet_names:
            raise SheetReadError(f"sheet '{name}' not found in {path.name} (available: {xls.sheet_names})")
        df = xls.parse(name, header=None, dtype=object, keep_default_na=False, na_filter=False)
    return frame_to_sheet(df, str(name))
