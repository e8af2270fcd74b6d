from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from ticket_ingest.models.config_models import DEFAULT_SHIFTS, ShiftTable, ShiftWindow
from ticket_ingest.models.records import Shift
from ticket_ingest.services.shifts import (
    DEFAULT_SHIFT,
    MINUTES_PER_DAY,
    ShiftConfigError,
    apply_shift_edit,
    classify_shift,
    shift_name,
    to_minutes,
    validate_shift_table,
    window_contains,
)


def test_afternoon_from_brazilian_date():
    assert classify_shift("29/03/2025 14:30") == Shift.AFTERNOON


@pytest.mark.parametrize(
    "hhmm, expected",
    [
        ("00:00", Shift.NIGHT),
        ("05:59", Shift.NIGHT),
        ("06:00", Shift.MORNING),
        ("13:59", Shift.MORNING),
        ("14:00", Shift.AFTERNOON),
        ("21:59", Shift.AFTERNOON),
        ("22:00", Shift.NIGHT),
        ("23:59", Shift.NIGHT),
    ],
)
def test_boundaries(hhmm, expected):
    h, m = (int(x) for x in hhmm.split(":"))
    assert classify_shift(datetime(2025, 1, 1, h, m)) == expected


def test_aware_instant_is_read_in_the_given_zone():
    instant = "2025-01-01T21:30:00-03:00"
    assert classify_shift(instant, tz=ZoneInfo("America/Sao_Paulo")) == Shift.AFTERNOON
    # without a zone the instant is read as UTC (00:30)
    assert classify_shift(instant) == Shift.NIGHT
    # naive wall-clock instants are never shifted
    assert classify_shift("2025-01-01T21:30:00", tz=ZoneInfo("Asia/Tokyo")) == Shift.AFTERNOON


def test_unparseable_instant_uses_default_shift():
    assert DEFAULT_SHIFT == Shift.MORNING
    assert classify_shift("not a date") == Shift.MORNING
    assert classify_shift(None) == Shift.MORNING


def test_default_table_tiles_the_day():
    validate_shift_table(DEFAULT_SHIFTS)
    for minute in range(MINUTES_PER_DAY):
        owners = [w for w in DEFAULT_SHIFTS.windows if window_contains(w, minute)]
        assert len(owners) == 1, minute


def test_edit_creating_overlap_is_rejected_and_not_applied():
    with pytest.raises(ShiftConfigError, match="overlap"):
        apply_shift_edit(DEFAULT_SHIFTS, Shift.MORNING, end="15:00")
    assert DEFAULT_SHIFTS.get(Shift.MORNING).end == "14:00"


def test_edit_creating_gap_is_rejected():
    with pytest.raises(ShiftConfigError, match="uncovered"):
        apply_shift_edit(DEFAULT_SHIFTS, Shift.MORNING, end="13:00")


def test_full_day_window_plus_others_is_rejected():
    with pytest.raises(ShiftConfigError):
        apply_shift_edit(DEFAULT_SHIFTS, Shift.MORNING, start="00:00", end="00:00")


def test_consistent_table_is_accepted():
    table = validate_shift_table(ShiftTable(windows=(
        ShiftWindow(Shift.MORNING, "Manhã", "05:00", "13:00"),
        ShiftWindow(Shift.AFTERNOON, "Tarde", "13:00", "21:00"),
        ShiftWindow(Shift.NIGHT, "Noite", "21:00", "05:00"),
    )))
    assert classify_shift("01/01/2025 21:30", table) == Shift.NIGHT
    assert classify_shift("01/01/2025 04:59", table) == Shift.NIGHT
    assert classify_shift("01/01/2025 05:00", table) == Shift.MORNING


def test_rename_only_edit():
    table = apply_shift_edit(DEFAULT_SHIFTS, Shift.NIGHT, name="Madrugada")
    assert shift_name(Shift.NIGHT, table) == "Madrugada"
    assert shift_name(Shift.NIGHT) == "Noite"


def test_missing_or_duplicate_shift_is_rejected():
    two = ShiftTable(windows=DEFAULT_SHIFTS.windows[:2])
    with pytest.raises(ShiftConfigError, match="exactly once"):
        validate_shift_table(two)
    dup = ShiftTable(windows=DEFAULT_SHIFTS.windows + (DEFAULT_SHIFTS.windows[0],))
    with pytest.raises(ShiftConfigError):
        validate_shift_table(dup)


@pytest.mark.parametrize("bad", ["24:00", "6:00", "12:60", "", "noon"])
def test_to_minutes_rejects_malformed_times(bad):
    with pytest.raises(ShiftConfigError):
        to_minutes(bad)


def test_to_minutes():
    assert to_minutes("00:00") == 0
    assert to_minutes("22:30") == 1350
