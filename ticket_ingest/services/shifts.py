from __future__ import annotations

import re
from dataclasses import replace
from datetime import datetime, tzinfo
from typing import Any

from ..models.config_models import DEFAULT_SHIFTS, ShiftTable, ShiftWindow
from ..models.records import Shift
from ..normalize.dates import parse_date

"""Shift classification and shift-table validation.

Windows are compared in minutes since midnight. A window with start < end
matches start <= t < end; a window with start >= end wraps midnight and matches
t >= start or t < end.

The tiling invariant (three windows, every minute of the day covered exactly
once) is checked when a table is loaded or edited, not on every classification.
"""

__all__ = [
    "DEFAULT_SHIFT",
    "MINUTES_PER_DAY",
    "ShiftConfigError",
    "to_minutes",
    "window_contains",
    "validate_shift_table",
    "apply_shift_edit",
    "classify_shift",
    "shift_name",
]

DEFAULT_SHIFT = Shift.MORNING
MINUTES_PER_DAY = 24 * 60

_HHMM = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


class ShiftConfigError(ValueError):
    """Raised when a shift table violates the 24h tiling invariant."""


def to_minutes(hhmm: str) -> int:
    """'HH:MM' -> minutes since midnight. Raises ShiftConfigError on bad input."""
    m = _HHMM.match(hhmm.strip()) if isinstance(hhmm, str) else None
    if m is None:
        raise ShiftConfigError(f"invalid time of day (expected HH:MM): {hhmm!r}")
    return int(m.group(1)) * 60 + int(m.group(2))


def window_contains(window: ShiftWindow, minute: int) -> bool:
    start = to_minutes(window.start)
    end = to_minutes(window.end)
    if start < end:
        return start <= minute < end
    return minute >= start or minute < end


def validate_shift_table(table: ShiftTable) -> ShiftTable:
    """Check that ``table`` tiles the 24h cycle with no gap and no overlap.

    Returns:
        The same table, so the call can be used inline.

    Raises:
        ShiftConfigError: malformed time, missing/duplicate shift, overlap or gap.
    """
    shifts = [w.shift for w in table.windows]
    if sorted(s.value for s in shifts) != sorted(s.value for s in Shift):
        raise ShiftConfigError(
            f"shift table must define each of {[s.value for s in Shift]} exactly once, got {[s.value for s in shifts]}"
        )

    owner: list[Shift | None] = [None] * MINUTES_PER_DAY
    for window in table.windows:
        start = to_minutes(window.start)
        end = to_minutes(window.end)
        if end <= start:
            end += MINUTES_PER_DAY
        for i in range(start, end):
            slot = i % MINUTES_PER_DAY
            if owner[slot] is not None:
                raise ShiftConfigError(
                    f"shifts {owner[slot].value} and {window.shift.value} overlap at {slot // 60:02d}:{slot % 60:02d}"
                )
            owner[slot] = window.shift

    gaps = [i for i, s in enumerate(owner) if s is None]
    if gaps:
        first = gaps[0]
        raise ShiftConfigError(
            f"shifts must cover all 24 hours; {len(gaps)} minute(s) uncovered starting at {first // 60:02d}:{first % 60:02d}"
        )
    return table


def apply_shift_edit(
    table: ShiftTable,
    shift: Shift,
    *,
    start: str | None = None,
    end: str | None = None,
    name: str | None = None,
) -> ShiftTable:
    """Return a new table with one window edited, or raise without applying.

    The edit is treated as a proposal: the candidate table is validated as a
    whole and ``table`` itself is never modified.
    """
    windows = []
    for w in table.windows:
        if w.shift == shift:
            w = replace(
                w,
                start=start if start is not None else w.start,
                end=end if end is not None else w.end,
                name=name if name is not None else w.name,
            )
        windows.append(w)
    return validate_shift_table(ShiftTable(windows=tuple(windows)))


def classify_shift(
    instant: datetime | str | Any,
    table: ShiftTable = DEFAULT_SHIFTS,
    tz: tzinfo | None = None,
) -> Shift:
    """Shift whose window contains the time of day of ``instant``.

    Aware instants are read as wall-clock time in ``tz`` (UTC when None).
    Unparseable input yields DEFAULT_SHIFT. Assumes ``table`` was validated.
    """
    dt = parse_date(instant, tz)
    if dt is None:
        return DEFAULT_SHIFT
    minute = dt.hour * 60 + dt.minute
    for window in table.windows:
        if window_contains(window, minute):
            return window.shift
    return DEFAULT_SHIFT


def shift_name(shift: Shift, table: ShiftTable = DEFAULT_SHIFTS) -> str:
    return table.get(shift).name
