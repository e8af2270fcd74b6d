from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import replace
from datetime import UTC, datetime, tzinfo
from pathlib import Path
from typing import Any

from ..excel.reader import SheetHeaderError, SheetReadError, read_sheet
from ..models.config_models import IngestConfig
from ..models.error_record import ValidationError
from ..models.processing_result import IngestResult
from ..models.records import CanonicalRecord, RecordKind
from ..models.row_data import RowData
from ..normalize.fields import missing_required_columns, schema_for
from .progress import RowProgress
from .validator import validate_row

"""Ingestion orchestration: raw sheet rows -> IngestResult.

Flow per run:

1. Structural pre-check: every required field of the record kind must be
   present in the header under some alias. Otherwise fail fast, no row work.
2. Row loop: validate_row() on each row, in order. Row numbers are
   spreadsheet numbers (first data row = 2).
3. Global check: zero surviving records is a failure, reported differently from
   a sheet that had zero data rows.

The loop is cooperative: it suspends with ``await asyncio.sleep(0)`` every
``yield_every`` rows. Accumulators are local to the run and the result is only
built once the loop finishes, so a cancelled run publishes nothing.
"""

__all__ = [
    "IngestError",
    "SheetUnreadableError",
    "EmptySheetError",
    "MissingColumnsError",
    "NoValidRecordsError",
    "ProgressCallback",
    "ingest",
    "ingest_sync",
    "ingest_file",
]

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int], None]


class IngestError(Exception):
    """Base exception for structural ingestion failures."""


class SheetUnreadableError(IngestError):
    """The spreadsheet could not be opened or has no usable header row."""


class EmptySheetError(IngestError):
    """The sheet has a header but no data rows."""

    def __init__(self) -> None:
        super().__init__("the sheet has no data rows")


class MissingColumnsError(IngestError):
    """Required canonical fields have no matching header column."""

    def __init__(self, missing: Sequence[str]) -> None:
        self.missing = list(missing)
        super().__init__(f"required columns not found: {', '.join(self.missing)}")


class NoValidRecordsError(IngestError):
    """Every data row was rejected. Usually a column-mapping problem."""

    def __init__(self, total_rows: int, errors: Sequence[ValidationError]) -> None:
        self.total_rows = total_rows
        self.errors = list(errors)
        super().__init__(
            f"no valid records out of {total_rows} row(s); check that the column headers match the expected fields"
        )


def _header_of(rows: Sequence[Mapping[str, Any] | None]) -> list[str]:
    seen: dict[str, None] = {}
    for r in rows:
        for key in r or {}:
            seen.setdefault(key, None)
    return list(seen)


async def ingest(
    rows: Iterable[Mapping[str, str] | None],
    kind: RecordKind | str,
    *,
    columns: Sequence[str] | None = None,
    on_progress: ProgressCallback | None = None,
    yield_every: int = 100,
    tz: tzinfo | None = None,
) -> IngestResult:
    """Validate and normalize a sheet's data rows.

    Args:
        rows: Data rows (header -> cell text) in sheet order
        kind: Record kind ("incidents" / "requests")
        columns: Header row; derived from the row keys when None
        on_progress: Receives a non-decreasing percentage, ending at 100
        yield_every: Rows between cooperative suspension points
        tz: Zone that timezone-aware instants are converted into (UTC when None)

    Raises:
        EmptySheetError: no data rows
        MissingColumnsError: a required field has no header column
        NoValidRecordsError: every row was rejected
    """
    if yield_every < 1:
        raise ValueError(f"yield_every must be >= 1, got {yield_every}")
    kind = RecordKind(kind)
    schema = schema_for(kind)
    data = list(rows)

    if columns is None and not data:
        raise EmptySheetError()
    header = list(columns) if columns is not None else _header_of(data)
    missing = missing_required_columns(header, schema)
    if missing:
        logger.debug("kind=%s header=%s missing=%s", kind.value, header, missing)
        raise MissingColumnsError(missing)
    if not data:
        raise EmptySheetError()

    start_time = datetime.now(UTC)
    t0 = time.perf_counter()
    total = len(data)
    records: list[CanonicalRecord] = []
    errors: list[ValidationError] = []
    last_pct = -1

    for i, values in enumerate(data):
        row = RowData(row_number=i + 2, values=values or {})
        record, row_errors = validate_row(row, schema, tz)
        if record is not None:
            records.append(record)
        else:
            logger.debug("row=%d rejected: %s", row.row_number, "; ".join(e.reason for e in row_errors))
            errors.extend(row_errors)

        pct = round((i + 1) / total * 100)
        if on_progress is not None and pct != last_pct:
            on_progress(pct)
        last_pct = pct

        if (i + 1) % yield_every == 0:
            await asyncio.sleep(0)

    if not records:
        raise NoValidRecordsError(total, errors)

    elapsed = time.perf_counter() - t0
    logger.info(
        "kind=%s rows=%d valid=%d invalid=%d",
        kind.value, total, len(records), total - len(records),
    )
    return IngestResult(
        kind=kind,
        records=records,
        errors=errors,
        total_rows=total,
        start_time=start_time,
        end_time=datetime.now(UTC),
        elapsed_seconds=elapsed,
    )


def ingest_sync(
    rows: Iterable[Mapping[str, str] | None],
    kind: RecordKind | str,
    **kwargs: Any,
) -> IngestResult:
    """Blocking wrapper around ingest() for callers without an event loop."""
    return asyncio.run(ingest(rows, kind, **kwargs))


def ingest_file(
    path: Path,
    kind: RecordKind | str,
    config: IngestConfig | None = None,
    *,
    sheet_name: str | None = None,
) -> IngestResult:
    """Read one sheet of ``path`` and ingest it with a progress bar.

    Reader failures are re-raised as SheetUnreadableError.
    """
    config = config or IngestConfig()
    path = Path(path)
    try:
        sheet = read_sheet(path, sheet_name)
    except (SheetReadError, SheetHeaderError) as e:
        raise SheetUnreadableError(str(e)) from e

    logger.info("file=%s sheet=%s rows=%d", path.name, sheet.sheet_name, len(sheet.rows))
    with RowProgress(len(sheet.rows), description=f"Ingesting {path.name}") as progress:
        result = ingest_sync(
            sheet.rows,
            kind,
            columns=sheet.columns,
            on_progress=progress.update_percent,
            yield_every=config.yield_every,
            tz=config.zone,
        )
    return replace(result, sheet_name=sheet.sheet_name)
