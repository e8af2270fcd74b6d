from __future__ import annotations

from collections.abc import Mapping, Sequence
from types import MappingProxyType
from typing import TypeVar

from ..models.records import IncidentPriority, LifecycleState, RecordKind, RequestPriority

"""Value normalizers: free-text priority / state / group strings -> closed sets.

All matching is case-insensitive substring containment over the trimmed input.
Keyword tables are ordered and the first table with a hit wins, so the more
specific multi-word phrases ("closed incomplete") sit ahead of the shorter ones
they contain ("complete", "closed").

Each classifier comes in two flavours:

- ``match_*`` returns None when no keyword matches (used for strict fields)
- ``classify_*`` falls back to the named DEFAULT_* constant and never fails

NOTE: bare digit markers ("1", "4") are matched anywhere in the string, as the
source sheets do. Text such as "P2 (SLA 1h)" therefore lands on the first tier.
"""

__all__ = [
    "DEFAULT_INCIDENT_PRIORITY",
    "DEFAULT_REQUEST_PRIORITY",
    "DEFAULT_STATE",
    "LOCATION_UNSPECIFIED",
    "LOCATION_CODES",
    "match_incident_priority",
    "classify_incident_priority",
    "match_request_priority",
    "classify_request_priority",
    "match_priority",
    "classify_priority",
    "match_state",
    "classify_state",
    "normalize_location",
    "original_location_name",
    "is_high_priority",
    "is_cancelled",
    "is_active_state",
]

E = TypeVar("E")

DEFAULT_INCIDENT_PRIORITY = IncidentPriority.P3
DEFAULT_REQUEST_PRIORITY = RequestPriority.MEDIUM
DEFAULT_STATE = LifecycleState.OPENED

_INCIDENT_PRIORITY_KEYWORDS: tuple[tuple[IncidentPriority, tuple[str, ...]], ...] = (
    (IncidentPriority.P1, ("p1", "1", "critical", "crítico", "critico", "alta", "urgent")),
    (IncidentPriority.P2, ("p2", "2", "high", "alto")),
    (IncidentPriority.P3, ("p3", "3", "medium", "moderate", "média", "media", "médio", "medio")),
    (IncidentPriority.P4, ("p4", "4", "low", "baixa", "baixo", "planning")),
)

_REQUEST_PRIORITY_KEYWORDS: tuple[tuple[RequestPriority, tuple[str, ...]], ...] = (
    (RequestPriority.HIGH, ("high", "alta", "urgent", "urgente", "critical", "crítico", "p1", "1")),
    (RequestPriority.LOW, ("low", "baixa", "p4", "4")),
    (RequestPriority.MEDIUM, ("medium", "média", "media", "moderate", "normal", "p2", "p3", "2", "3")),
)

_STATE_KEYWORDS: tuple[tuple[LifecycleState, tuple[str, ...]], ...] = (
    (LifecycleState.CLOSED_INCOMPLETE, ("closed incomplete", "fechado incompleto")),
    (LifecycleState.CLOSED_SKIPPED, ("closed skipped", "fechado ignorado")),
    (LifecycleState.CLOSED_COMPLETE, ("closed complete", "fechado completo")),
    (LifecycleState.CLOSED_SKIPPED, ("cancelled", "canceled", "cancelado", "cancelada", "skipped")),
    (LifecycleState.CLOSED_INCOMPLETE, ("incomplete", "incompleto")),
    (LifecycleState.CLOSED_COMPLETE, (
        "complete", "concluído", "concluido", "resolved", "resolvido", "closed", "fechado", "done",
    )),
    (LifecycleState.ON_HOLD, ("on hold", "hold", "em espera", "espera", "pending", "pendente", "aguardando")),
    (LifecycleState.IN_PROGRESS, ("work in progress", "in progress", "progress", "andamento")),
    (LifecycleState.ASSIGNED, ("assigned", "atribuído", "atribuido")),
    (LifecycleState.OPENED, ("opened", "open", "new", "novo", "aberto")),
)

LOCATION_UNSPECIFIED = "Não especificado"

LOCATION_CODES: Mapping[str, str] = MappingProxyType({
    "Brazil-Santo Andre-Manufacturing-Local Support": "SA-MNF-local Sup",
    "Brazil-Santo Andre-Network/Telecom": "SA-Net/Tel",
    "Brazil-Bahia-Manufacturing-Local Support": "BA-MNF-local Sup",
    "Brazil-Santo Andre-Local Support": "SA-Local Sup",
    "Brazil-Bahia-Local Support": "BA-Local Sup",
    "Brazil-Bahia-Network/Telecom": "BA-Net/Tel",
    "Brazil-Bandag-Local Support": "Berrini-Local Sup",
    "Brazil-Bandag-Manufacturing-Local Support": "Campinas-MNF-local Sup",
    "Brazil-Bandag-Network/Telecom": "Berrini-Net/Tel",
    "Brazil-Local Support": "BR-Local Sup",
    "Brazil-Mafra-Local Support": "SC-Local Sup",
    "Brazil-Telephony": "BR-Net/Tel",
    "Brazil-Ticket Manager": "BR-TM",
})

_LOCATION_NAMES: Mapping[str, str] = MappingProxyType({v: k for k, v in LOCATION_CODES.items()})


def _scan(raw: str | None, table: Sequence[tuple[E, tuple[str, ...]]]) -> E | None:
    if not raw:
        return None
    text = raw.strip().casefold()
    if not text:
        return None
    for value, keywords in table:
        if any(k in text for k in keywords):
            return value
    return None


def match_incident_priority(raw: str | None) -> IncidentPriority | None:
    return _scan(raw, _INCIDENT_PRIORITY_KEYWORDS)


def classify_incident_priority(raw: str | None) -> IncidentPriority:
    return match_incident_priority(raw) or DEFAULT_INCIDENT_PRIORITY


def match_request_priority(raw: str | None) -> RequestPriority | None:
    return _scan(raw, _REQUEST_PRIORITY_KEYWORDS)


def classify_request_priority(raw: str | None) -> RequestPriority:
    return match_request_priority(raw) or DEFAULT_REQUEST_PRIORITY


def match_priority(raw: str | None, kind: RecordKind) -> IncidentPriority | RequestPriority | None:
    if kind == RecordKind.INCIDENTS:
        return match_incident_priority(raw)
    return match_request_priority(raw)


def classify_priority(raw: str | None, kind: RecordKind) -> IncidentPriority | RequestPriority:
    if kind == RecordKind.INCIDENTS:
        return classify_incident_priority(raw)
    return classify_request_priority(raw)


def match_state(raw: str | None) -> LifecycleState | None:
    return _scan(raw, _STATE_KEYWORDS)


def classify_state(raw: str | None) -> LifecycleState:
    return match_state(raw) or DEFAULT_STATE


def normalize_location(raw: str | None) -> str:
    """Short display code for a known assignment group; unknown names pass through."""
    if not raw or not raw.strip():
        return LOCATION_UNSPECIFIED
    name = raw.strip()
    return LOCATION_CODES.get(name, name)


def original_location_name(code: str | None) -> str:
    """Inverse of normalize_location for known codes."""
    if not code:
        return LOCATION_UNSPECIFIED
    return _LOCATION_NAMES.get(code.strip(), code.strip())


def is_high_priority(raw: str | None, kind: RecordKind = RecordKind.INCIDENTS) -> bool:
    """P1/P2 for incidents, HIGH for requests. Unrecognized text is not high."""
    matched = match_priority(raw, kind)
    return matched in (IncidentPriority.P1, IncidentPriority.P2, RequestPriority.HIGH)


def is_cancelled(raw: str | None) -> bool:
    if not raw:
        return False
    text = raw.strip().casefold()
    return any(k in text for k in ("canceled", "cancelled", "cancelado", "cancelada"))


def is_active_state(raw: str | None) -> bool:
    """Empty state counts as active (the ticket has not been closed)."""
    return not classify_state(raw).is_terminal
