from __future__ import annotations

import re
from datetime import UTC, datetime, timedelta, tzinfo
from typing import Any

"""Date normalization for heterogeneous spreadsheet date cells.

Accepted representations, tried in order (first success wins):

1. ISO-8601 / machine timestamps ("2025-03-29T14:30:00", "2025-03-29 14:30:00Z")
2. dd/MM/yyyy HH:mm:ss   (day-first, captured explicitly, never locale-guessed)
3. dd/MM/yyyy HH:mm      (seconds default to 0)
4. dd/MM/yyyy            (midnight)
5. Spreadsheet serial numbers: days since 1899-12-30, fraction = time of day.
   The 1899-12-30 base absorbs the historical 1900 leap-year bug, so serial 1
   is 1899-12-31 and serial 45000 is 2023-03-15.

Canonical instants are naive wall-clock datetimes: aware inputs are converted
into the configured zone first and then stripped of tzinfo. Failure is always
``None``, never "now" and never the epoch.
"""

__all__ = [
    "EXCEL_EPOCH",
    "parse_date",
    "normalize_date",
    "format_br_date",
]

EXCEL_EPOCH = datetime(1899, 12, 30)

_DMY = r"(\d{1,2})[/-](\d{1,2})[/-](\d{4})"
_DAY_FIRST_PATTERNS = (
    re.compile(rf"^{_DMY}[ T](\d{{1,2}}):(\d{{2}}):(\d{{2}})$"),
    re.compile(rf"^{_DMY}[ T](\d{{1,2}}):(\d{{2}})$"),
    re.compile(rf"^{_DMY}$"),
)
_SERIAL = re.compile(r"^\d+(?:[.,]\d+)?$")

_SECONDS_PER_DAY = 86400


def _clean(raw: str) -> str:
    return raw.strip().strip("'\"").strip()


def _parse_iso(text: str, tz: tzinfo | None) -> datetime | None:
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(tz or UTC).replace(tzinfo=None)
    return dt


def _parse_day_first(text: str) -> datetime | None:
    for pattern in _DAY_FIRST_PATTERNS:
        m = pattern.match(text)
        if m is None:
            continue
        parts = [int(g) for g in m.groups()]
        day, month, year = parts[:3]
        hour, minute, second = (parts[3:] + [0, 0, 0])[:3]
        try:
            return datetime(year, month, day, hour, minute, second)
        except ValueError:
            # 31/02/2025 and friends: the shape matched but the date is impossible
            return None
    return None


def _parse_serial(text: str) -> datetime | None:
    if not _SERIAL.match(text):
        return None
    serial = float(text.replace(",", "."))
    try:
        return EXCEL_EPOCH + timedelta(seconds=round(serial * _SECONDS_PER_DAY))
    except OverflowError:
        return None


def parse_date(raw: Any, tz: tzinfo | None = None) -> datetime | None:
    """Parse a raw cell into a naive wall-clock datetime, or None.

    Args:
        raw: Cell content (str, datetime, or None). Surrounding quotes and
            whitespace are ignored.
        tz: Zone that aware timestamps are converted into (default UTC).

    Returns:
        The parsed datetime, or None when no supported representation matches.
    """
    if raw is None:
        return None
    if isinstance(raw, datetime):
        if raw.tzinfo is not None:
            return raw.astimezone(tz or UTC).replace(tzinfo=None)
        return raw
    text = _clean(str(raw))
    if not text:
        return None
    return _parse_iso(text, tz) or _parse_day_first(text) or _parse_serial(text)


def normalize_date(raw: Any, tz: tzinfo | None = None) -> str | None:
    """Canonical ISO-8601 string ("YYYY-MM-DDTHH:MM:SS") for ``raw``, or None."""
    dt = parse_date(raw, tz)
    if dt is None:
        return None
    return dt.isoformat(timespec="seconds")


def format_br_date(value: Any, with_seconds: bool = False) -> str | None:
    """Render a canonical instant back as dd/MM/yyyy HH:mm[:ss]."""
    dt = parse_date(value)
    if dt is None:
        return None
    return dt.strftime("%d/%m/%Y %H:%M:%S" if with_seconds else "%d/%m/%Y %H:%M")
