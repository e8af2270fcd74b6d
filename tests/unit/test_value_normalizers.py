from __future__ import annotations

import pytest

from ticket_ingest.models.records import IncidentPriority, LifecycleState, RecordKind, RequestPriority
from ticket_ingest.normalize.values import (
    DEFAULT_INCIDENT_PRIORITY,
    DEFAULT_REQUEST_PRIORITY,
    DEFAULT_STATE,
    LOCATION_CODES,
    LOCATION_UNSPECIFIED,
    classify_incident_priority,
    classify_priority,
    classify_request_priority,
    classify_state,
    is_active_state,
    is_cancelled,
    is_high_priority,
    match_incident_priority,
    match_request_priority,
    match_state,
    normalize_location,
    original_location_name,
)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("1 - Crítico", IncidentPriority.P1),
        ("P1", IncidentPriority.P1),
        ("Critical", IncidentPriority.P1),
        ("2 - High", IncidentPriority.P2),
        ("Alta", IncidentPriority.P1),
        ("Alta prioridade", IncidentPriority.P1),
        ("Alto", IncidentPriority.P2),
        ("3 - Moderate", IncidentPriority.P3),
        ("Média", IncidentPriority.P3),
        ("4 - Low", IncidentPriority.P4),
        ("baixa", IncidentPriority.P4),
    ],
)
def test_incident_priority_keywords(raw, expected):
    assert classify_incident_priority(raw) == expected


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("High", RequestPriority.HIGH),
        ("Alta", RequestPriority.HIGH),
        ("Urgente", RequestPriority.HIGH),
        ("Low", RequestPriority.LOW),
        ("Baixa", RequestPriority.LOW),
        ("Medium", RequestPriority.MEDIUM),
        ("Normal", RequestPriority.MEDIUM),
    ],
)
def test_request_priority_keywords(raw, expected):
    assert classify_request_priority(raw) == expected


def test_priority_defaults_are_middle_tiers():
    assert DEFAULT_INCIDENT_PRIORITY == IncidentPriority.P3
    assert DEFAULT_REQUEST_PRIORITY == RequestPriority.MEDIUM
    for raw in ("", "   ", None, "whatever"):
        assert classify_incident_priority(raw) == IncidentPriority.P3
        assert classify_request_priority(raw) == RequestPriority.MEDIUM
    assert match_incident_priority("whatever") is None
    assert match_request_priority("") is None


def test_priority_classification_is_idempotent():
    for p in IncidentPriority:
        assert classify_priority(p.value, RecordKind.INCIDENTS) == p
    for p in RequestPriority:
        assert classify_priority(p.value, RecordKind.REQUESTS) == p


def test_digit_markers_match_anywhere_in_text():
    assert classify_incident_priority("P2 (SLA 1h)") == IncidentPriority.P1


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("New", LifecycleState.OPENED),
        ("Aberto", LifecycleState.OPENED),
        ("Assigned", LifecycleState.ASSIGNED),
        ("Em andamento", LifecycleState.IN_PROGRESS),
        ("In Progress", LifecycleState.IN_PROGRESS),
        ("Pending", LifecycleState.ON_HOLD),
        ("Closed", LifecycleState.CLOSED_COMPLETE),
        ("Resolved", LifecycleState.CLOSED_COMPLETE),
        ("Closed Complete", LifecycleState.CLOSED_COMPLETE),
        ("Closed Incomplete", LifecycleState.CLOSED_INCOMPLETE),
        ("closed skipped", LifecycleState.CLOSED_SKIPPED),
        ("Cancelled", LifecycleState.CLOSED_SKIPPED),
    ],
)
def test_state_keywords(raw, expected):
    assert classify_state(raw) == expected


def test_specific_state_phrases_beat_shorter_ones():
    assert classify_state("CLOSED INCOMPLETE") == LifecycleState.CLOSED_INCOMPLETE
    assert classify_state("Closed Skipped") != LifecycleState.CLOSED_COMPLETE


def test_state_default_and_idempotence():
    assert DEFAULT_STATE == LifecycleState.OPENED
    assert classify_state("") == LifecycleState.OPENED
    assert match_state("xyz") is None
    for s in LifecycleState:
        assert classify_state(s.value) == s


def test_location_codes():
    assert normalize_location("Brazil-Bahia-Local Support") == "BA-Local Sup"
    assert normalize_location("  Brazil-Ticket Manager ") == "BR-TM"
    assert normalize_location("Somewhere Else") == "Somewhere Else"
    assert normalize_location("") == LOCATION_UNSPECIFIED
    assert normalize_location(None) == LOCATION_UNSPECIFIED
    for name, code in LOCATION_CODES.items():
        assert original_location_name(code) == name
    assert original_location_name("XYZ") == "XYZ"


def test_predicates():
    assert is_high_priority("P1")
    assert is_high_priority("2 - High")
    assert not is_high_priority("P3")
    assert not is_high_priority("")
    assert is_high_priority("Alta", RecordKind.REQUESTS)
    assert not is_high_priority("Medium", RecordKind.REQUESTS)
    assert is_cancelled("Cancelado")
    assert not is_cancelled("Closed Complete")
    assert is_active_state("")
    assert is_active_state("On Hold")
    assert not is_active_state("Closed Complete")
