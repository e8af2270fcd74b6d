from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from zoneinfo import ZoneInfo

from .records import IncidentPriority, RecordKind, RequestPriority, Shift

"""Configuration dataclasses for the ingestion pipeline.

These are edit-time validated structures: the shift table must tile the full
24-hour cycle and the SLA tables must carry a positive budget per known priority.
Validation lives in services.shifts / services.sla; the dataclasses themselves
are immutable so a rejected edit can never leave a half-applied table behind.
"""


@dataclass(frozen=True)
class ShiftWindow:
    """One named time-of-day interval.

    start / end are "HH:MM" strings. start >= end means the window wraps
    midnight (e.g. 22:00-06:00).
    """
    shift: Shift
    name: str  # display label
    start: str
    end: str


@dataclass(frozen=True)
class ShiftTable:
    """Ordered set of shift windows. Classification tries windows in order."""
    windows: tuple[ShiftWindow, ...]

    def get(self, shift: Shift) -> ShiftWindow:
        for w in self.windows:
            if w.shift == shift:
                return w
        raise KeyError(shift)

    def to_dict(self) -> dict[str, dict[str, str]]:
        return {
            w.shift.value: {"name": w.name, "start": w.start, "end": w.end}
            for w in self.windows
        }


DEFAULT_SHIFTS = ShiftTable(windows=(
    ShiftWindow(Shift.MORNING, "Manhã", "06:00", "14:00"),
    ShiftWindow(Shift.AFTERNOON, "Tarde", "14:00", "22:00"),
    ShiftWindow(Shift.NIGHT, "Noite", "22:00", "06:00"),
))


# Incidents: budget in hours. Requests: budget in days.
DEFAULT_INCIDENT_SLA_HOURS: Mapping[IncidentPriority, float] = MappingProxyType({
    IncidentPriority.P1: 1,
    IncidentPriority.P2: 4,
    IncidentPriority.P3: 36,
    IncidentPriority.P4: 72,
})

DEFAULT_REQUEST_SLA_DAYS: Mapping[RequestPriority, float] = MappingProxyType({
    RequestPriority.HIGH: 3,
    RequestPriority.MEDIUM: 5,
    RequestPriority.LOW: 7,
})


@dataclass(frozen=True)
class SLAThresholds:
    """Priority-indexed SLA budgets for both record kinds."""
    incidents: Mapping[IncidentPriority, float] = field(default_factory=lambda: DEFAULT_INCIDENT_SLA_HOURS)
    requests: Mapping[RequestPriority, float] = field(default_factory=lambda: DEFAULT_REQUEST_SLA_DAYS)

    def for_kind(self, kind: RecordKind) -> Mapping[IncidentPriority, float] | Mapping[RequestPriority, float]:
        if kind == RecordKind.INCIDENTS:
            return self.incidents
        return self.requests

    @staticmethod
    def unit_for(kind: RecordKind) -> str:
        return "hours" if kind == RecordKind.INCIDENTS else "days"

    def with_updates(self, kind: RecordKind, updates: Mapping[str, float]) -> SLAThresholds:
        """Validated copy with ``updates`` ({priority name: budget}) applied to one kind."""
        from ..services.sla import with_threshold_updates

        return with_threshold_updates(self, kind, updates)


@dataclass(frozen=True)
class IngestConfig:
    """Root configuration object (loaded from YAML by config.loader)."""
    timezone: str = "UTC"  # zone naive wall-clock instants are normalized into
    yield_every: int = 100  # rows between cooperative suspension points
    shifts: ShiftTable = DEFAULT_SHIFTS
    sla_thresholds: SLAThresholds = field(default_factory=SLAThresholds)

    @property
    def zone(self) -> ZoneInfo:
        """Zone that canonical instants are expressed in."""
        return ZoneInfo(self.timezone)
