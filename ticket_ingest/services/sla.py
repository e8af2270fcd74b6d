from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from datetime import UTC, datetime, tzinfo
from types import MappingProxyType
from typing import Any

from ..models.config_models import SLAThresholds
from ..models.records import (
    CanonicalRecord,
    IncidentPriority,
    RecordKind,
    RequestPriority,
    SLAStatus,
)
from ..normalize.dates import parse_date
from ..normalize.values import classify_priority

"""SLA evaluation against priority-indexed budgets.

One function serves both questions the dashboard asks:

- still open (closed=None): how much of the budget is consumed, how much is left
- already closed: was it resolved within the budget

Budgets are hours for incidents and days for requests. percent is capped at 100,
remaining is floored at 0. Status: normal < 75 <= warning < 100 <= critical.

Canonical instants are naive wall-clock time in the configured zone, so "now"
for an open ticket is read in that same zone (``tz``, UTC when omitted).
"""

__all__ = [
    "WARNING_PERCENT",
    "CRITICAL_PERCENT",
    "SLAConfigError",
    "SLAResult",
    "PriorityCompliance",
    "ComplianceSummary",
    "validate_thresholds",
    "with_threshold_updates",
    "threshold_for",
    "evaluate_sla",
    "record_closed_instant",
    "evaluate_record",
    "compliance_summary",
]

WARNING_PERCENT = 75.0
CRITICAL_PERCENT = 100.0

_UNIT_SECONDS = {
    RecordKind.INCIDENTS: 3600.0,
    RecordKind.REQUESTS: 86400.0,
}

# Fallback budget for a priority missing from a (custom) table
_FALLBACK_PRIORITY = {
    RecordKind.INCIDENTS: IncidentPriority.P3,
    RecordKind.REQUESTS: RequestPriority.MEDIUM,
}


class SLAConfigError(ValueError):
    """Raised when an SLA threshold table is rejected."""


@dataclass(frozen=True)
class SLAResult:
    """SLA snapshot for one ticket.

    elapsed / threshold / remaining are expressed in ``unit`` ("hours" or "days").
    valid is False for the neutral result returned on unparseable input.
    """
    elapsed: float
    threshold: float
    percent: float
    remaining: float
    status: SLAStatus
    compliant: bool
    unit: str
    valid: bool = True

    @staticmethod
    def neutral(unit: str) -> SLAResult:
        return SLAResult(
            elapsed=0.0,
            threshold=0.0,
            percent=0.0,
            remaining=0.0,
            status=SLAStatus.NORMAL,
            compliant=True,
            unit=unit,
            valid=False,
        )


@dataclass(frozen=True)
class PriorityCompliance:
    within: int = 0
    outside: int = 0

    @property
    def total(self) -> int:
        return self.within + self.outside

    @property
    def percent(self) -> float:
        return (self.within / self.total) * 100 if self.total else 0.0


@dataclass(frozen=True)
class ComplianceSummary:
    by_priority: dict[str, PriorityCompliance]
    skipped: int  # records whose instants could not be evaluated

    @property
    def within(self) -> int:
        return sum(p.within for p in self.by_priority.values())

    @property
    def outside(self) -> int:
        return sum(p.outside for p in self.by_priority.values())

    @property
    def percent(self) -> float:
        total = self.within + self.outside
        return (self.within / total) * 100 if total else 0.0


def validate_thresholds(thresholds: SLAThresholds) -> SLAThresholds:
    """Every priority of both kinds must carry a positive finite budget."""
    for kind, enum in ((RecordKind.INCIDENTS, IncidentPriority), (RecordKind.REQUESTS, RequestPriority)):
        table = thresholds.for_kind(kind)
        for priority in enum:
            if priority not in table:
                raise SLAConfigError(f"{kind.value}: missing SLA threshold for {priority.value}")
            value = table[priority]
            if isinstance(value, bool) or not isinstance(value, (int, float)) or not 0 < value < float("inf"):
                raise SLAConfigError(f"{kind.value}: SLA threshold for {priority.value} must be a positive number, got {value!r}")
        extra = [p for p in table if not isinstance(p, enum)]
        if extra:
            raise SLAConfigError(f"{kind.value}: unknown priorities in SLA table: {extra!r}")
    return thresholds


def with_threshold_updates(
    thresholds: SLAThresholds,
    kind: RecordKind,
    updates: Mapping[str, float],
) -> SLAThresholds:
    """Return a new SLAThresholds with ``updates`` applied, or raise SLAConfigError.

    Keys are priority names ("P1", "HIGH", ...). Nothing is applied on failure.
    """
    enum = IncidentPriority if kind == RecordKind.INCIDENTS else RequestPriority
    merged: dict[Any, float] = dict(thresholds.for_kind(kind))
    for key, value in updates.items():
        try:
            priority = enum(key)
        except ValueError as e:
            raise SLAConfigError(f"{kind.value}: unknown priority {key!r}") from e
        merged[priority] = value
    if kind == RecordKind.INCIDENTS:
        candidate = replace(thresholds, incidents=MappingProxyType(merged))
    else:
        candidate = replace(thresholds, requests=MappingProxyType(merged))
    return validate_thresholds(candidate)


def threshold_for(
    priority: IncidentPriority | RequestPriority | str | None,
    kind: RecordKind,
    thresholds: SLAThresholds | None = None,
) -> float:
    """Budget for ``priority``; raw strings are classified first."""
    table = (thresholds or SLAThresholds()).for_kind(kind)
    if not isinstance(priority, (IncidentPriority, RequestPriority)):
        priority = classify_priority(priority, kind)
    value = table.get(priority)  # type: ignore[call-overload]
    if value is None:
        value = table[_FALLBACK_PRIORITY[kind]]  # type: ignore[index]
    return float(value)


def _status(percent: float) -> SLAStatus:
    if percent >= CRITICAL_PERCENT:
        return SLAStatus.CRITICAL
    if percent >= WARNING_PERCENT:
        return SLAStatus.WARNING
    return SLAStatus.NORMAL


def evaluate_sla(
    priority: IncidentPriority | RequestPriority | str | None,
    opened: datetime | str | None,
    closed: datetime | str | None = None,
    *,
    kind: RecordKind,
    thresholds: SLAThresholds | None = None,
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> SLAResult:
    """Evaluate one ticket against its SLA budget.

    Args:
        priority: Normalized priority (raw strings are classified first)
        opened: Instant the ticket was opened
        closed: Resolution instant; None means still open, evaluated at ``now``
        kind: Record kind (selects the threshold table and unit)
        thresholds: Threshold tables (defaults when None)
        now: Evaluation instant for open tickets (defaults to the current time in ``tz``)
        tz: Zone of the canonical instants; aware inputs are converted into it

    Returns:
        SLAResult. Unparseable instants yield SLAResult.neutral(), never an exception.
    """
    unit = SLAThresholds.unit_for(kind)
    opened_dt = parse_date(opened, tz)
    if opened_dt is None:
        return SLAResult.neutral(unit)
    if closed is None or closed == "":
        if now is None:
            now = datetime.now(tz or UTC).replace(tzinfo=None)
        end_dt = parse_date(now, tz)
    else:
        end_dt = parse_date(closed, tz)
    if end_dt is None:
        return SLAResult.neutral(unit)

    threshold = threshold_for(priority, kind, thresholds)
    elapsed_seconds = max((end_dt - opened_dt).total_seconds(), 0.0)
    elapsed = elapsed_seconds / _UNIT_SECONDS[kind]
    percent = min(CRITICAL_PERCENT, (elapsed / threshold) * 100)
    return SLAResult(
        elapsed=elapsed,
        threshold=threshold,
        percent=percent,
        remaining=max(0.0, threshold - elapsed),
        status=_status(percent),
        compliant=elapsed_seconds <= threshold * _UNIT_SECONDS[kind],
        unit=unit,
    )


def record_closed_instant(record: CanonicalRecord) -> str | None:
    """Closed instant of a record, or None while it is still active.

    Terminal records without an explicit close date fall back to their last
    update, which is when the ticket was moved to its final state.
    """
    if not record.state.is_terminal:
        return None
    return record.closed or record.updated or None


def evaluate_record(
    record: CanonicalRecord,
    thresholds: SLAThresholds | None = None,
    now: datetime | None = None,
    tz: tzinfo | None = None,
) -> SLAResult:
    return evaluate_sla(
        record.priority,
        record.opened,
        record_closed_instant(record),
        kind=record.kind,
        thresholds=thresholds,
        now=now,
        tz=tz,
    )


def compliance_summary(
    records: Iterable[CanonicalRecord],
    thresholds: SLAThresholds | None = None,
    now: datetime | None = None,
    *,
    closed_only: bool = True,
    tz: tzinfo | None = None,
) -> ComplianceSummary:
    """Within/outside SLA counts per priority.

    With closed_only (default) active tickets are ignored; otherwise they are
    judged against ``now``.
    """
    counts: dict[str, list[int]] = {}
    skipped = 0
    for record in records:
        if closed_only and record.is_active:
            continue
        if closed_only and record_closed_instant(record) is None:
            skipped += 1
            continue
        result = evaluate_record(record, thresholds, now, tz)
        if not result.valid:
            skipped += 1
            continue
        bucket = counts.setdefault(record.priority.value, [0, 0])
        bucket[0 if result.compliant else 1] += 1
    return ComplianceSummary(
        by_priority={k: PriorityCompliance(within=v[0], outside=v[1]) for k, v in counts.items()},
        skipped=skipped,
    )
