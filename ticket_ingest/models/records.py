from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any

"""Canonical record model and closed enumerations.

Every field downstream code reads from a CanonicalRecord is already normalized:
priority and state are enum members, dates are ISO-8601 strings, optional text
fields are "" when absent (never None).
"""

__all__ = [
    "RecordKind",
    "IncidentPriority",
    "RequestPriority",
    "LifecycleState",
    "Shift",
    "SLAStatus",
    "CanonicalRecord",
]


class RecordKind(Enum):
    """The two sheet flavours accepted by the ingestion pipeline."""
    INCIDENTS = "incidents"
    REQUESTS = "requests"


class IncidentPriority(Enum):
    P1 = "P1"
    P2 = "P2"
    P3 = "P3"
    P4 = "P4"


class RequestPriority(Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class LifecycleState(Enum):
    """Lifecycle states shared by incidents and requests.

    CLOSED_SKIPPED also covers cancelled tickets.
    """
    OPENED = "Opened"
    ASSIGNED = "Assigned"
    IN_PROGRESS = "Work in Progress"
    CLOSED_COMPLETE = "Closed Complete"
    CLOSED_INCOMPLETE = "Closed Incomplete"
    CLOSED_SKIPPED = "Closed Skipped"
    ON_HOLD = "On Hold"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL_STATES


_TERMINAL_STATES = frozenset({
    LifecycleState.CLOSED_COMPLETE,
    LifecycleState.CLOSED_INCOMPLETE,
    LifecycleState.CLOSED_SKIPPED,
})


class Shift(Enum):
    MORNING = "MORNING"
    AFTERNOON = "AFTERNOON"
    NIGHT = "NIGHT"


class SLAStatus(Enum):
    NORMAL = "normal"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass(frozen=True)
class CanonicalRecord:
    """A validated incident or request.

    Attributes:
        kind: Which sheet flavour produced the record
        row_number: Workbook row (1-based, header row counted)
        number: Ticket identifier
        opened: ISO-8601 instant the ticket was opened
        priority: IncidentPriority for incidents, RequestPriority for requests
        state: Normalized lifecycle state
        raw_priority / raw_state: Source strings kept for display and auditing
    """
    kind: RecordKind
    row_number: int
    number: str
    opened: str
    priority: IncidentPriority | RequestPriority
    state: LifecycleState
    short_description: str = ""
    description: str = ""
    assignment_group: str = ""
    location: str = ""
    assigned_to: str = ""
    updated: str = ""
    closed: str = ""
    caller: str = ""
    request_item: str = ""
    category: str = ""
    subcategory: str = ""
    updated_by: str = ""
    business_impact: str = ""
    response_time: str = ""
    notes: str = ""
    raw_priority: str = ""
    raw_state: str = ""

    @property
    def group_code(self) -> str:
        """Short display code for the assignment group."""
        from ..normalize.values import normalize_location

        return normalize_location(self.assignment_group)

    @property
    def is_active(self) -> bool:
        return not self.state.is_terminal

    @property
    def is_high_priority(self) -> bool:
        return self.priority in (
            IncidentPriority.P1,
            IncidentPriority.P2,
            RequestPriority.HIGH,
        )

    def to_dict(self) -> dict[str, Any]:
        """Plain JSON-serializable mapping (enums flattened to their values)."""
        data = asdict(self)
        data["kind"] = self.kind.value
        data["priority"] = self.priority.value
        data["state"] = self.state.value
        return data
