from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from ..models.records import RecordKind

"""Field resolution: arbitrary spreadsheet headers -> canonical field names.

Each record kind has an alias table mapping a canonical field to an ordered list
of accepted header spellings (English and Portuguese). Lookup is exact first,
then case-insensitive, always in declared alias order, so specific aliases win
over generic fallbacks. No header spelling may be an alias for two different
canonical fields of the same kind (enforced by tests/contract).
"""

__all__ = [
    "RecordSchema",
    "INCIDENT_ALIASES",
    "REQUEST_ALIASES",
    "INCIDENT_SCHEMA",
    "REQUEST_SCHEMA",
    "schema_for",
    "find_column_value",
    "header_matches",
    "missing_required_columns",
    "resolve_row",
]

_NOTES_ALIASES = (
    "Comments and Work notes",
    "Work notes",
    "Additional comments",
    "Comments",
    "Comentários",
    "Comentarios",
    "Notas de Trabalho",
    "Observações",
    "Notas",
)

_SHARED_ALIASES: dict[str, tuple[str, ...]] = {
    "State": ("State", "Status", "Current State", "Estado", "Situação"),
    "AssignedTo": ("Assigned to", "Owner", "Atribuído para", "Atribuido para", "Responsável"),
    "Updated": ("Updated", "Last Modified Date", "Modified Date", "Data Atualização", "Última Atualização"),
    "Closed": ("Closed", "Closed Date", "Resolved Date", "Data Fechamento", "Data de Encerramento"),
    "UpdatedBy": ("Updated by", "Last Modified By", "Modified By", "Atualizado por", "Modificado por"),
    "CommentsAndWorkNotes": _NOTES_ALIASES,
}

INCIDENT_ALIASES: Mapping[str, tuple[str, ...]] = {
    "Number": (
        "Number", "Incident Number", "ID", "Reference", "IncidentNumber",
        "Número", "Numero", "Chamado", "Ticket",
    ),
    "Opened": (
        "Opened", "Created Date", "Open Date", "Start Date", "Created",
        "Data Abertura", "Data", "Data Criação", "Início",
    ),
    "ShortDescription": ("Short description", "Summary", "Resumo", "Descrição Curta", "Descricao Curta"),
    "Description": ("Description", "Details", "Full Description", "Descrição", "Descricao"),
    "Caller": (
        "Caller", "Request item [Catalog Task] Requested for Name", "Requested for Name",
        "Reported By", "Created By", "Requestor", "Solicitante", "Usuario", "Usuário",
    ),
    "Priority": ("Priority", "Incident Priority", "Urgency", "Prioridade", "Urgência"),
    "Category": ("Category", "Incident Category", "Type", "Categoria", "Tipo"),
    "Subcategory": ("Subcategory", "Sub Category", "Sub-Category", "Subcategoria", "Sub-Categoria"),
    "AssignmentGroup": ("Assignment group", "Assigned Group", "Team", "Grupo", "Grupo Atribuído"),
    "BusinessImpact": ("Business impact", "Impact", "Severity", "Impacto", "Severidade"),
    "ResponseTime": ("Response Time", "Resolution Time", "Time to Resolve", "Tempo Resposta", "Tempo de Resolução"),
    "Location": ("Location", "Site", "Local", "Localidade", "Localização"),
    **_SHARED_ALIASES,
}

REQUEST_ALIASES: Mapping[str, tuple[str, ...]] = {
    "Number": (
        "Number", "Request Number", "ID", "Reference", "RequestNumber",
        "Número", "Numero", "Chamado", "Ticket",
    ),
    "Opened": (
        "Opened", "Open", "Created Date", "Open Date", "Start Date", "Created",
        "Data Abertura", "Data", "Data Criação", "Início",
    ),
    "ShortDescription": ("Short description", "Summary", "Resumo", "Descrição Curta", "Descricao Curta"),
    "Description": (
        "Description", "Details", "Full Description", "Descrição", "Descricao",
        "Descrição Completa", "Descricao Completa",
    ),
    "RequestItem": ("Request item [Catalog Task]", "Catalog Task", "Item Catálogo", "Item", "Tipo de Solicitação"),
    "RequestedForName": (
        "Requested for Name", "Request item [Catalog Task] Requested for Name", "Requested For",
        "Solicitado Para", "Solicitante", "Usuario", "Usuário",
    ),
    "Priority": ("Priority", "Request Priority", "Urgency", "Prioridade", "Urgência"),
    "AssignmentGroup": ("Assignment group", "Assigned Group", "Team", "Grupo", "Grupo Atribuído", "Localidade"),
    **_SHARED_ALIASES,
}


@dataclass(frozen=True)
class RecordSchema:
    """Per-kind ingestion rules.

    required: fields whose column must exist in the header and whose value must
        be non-empty on every row.
    strict: fields where a non-empty value that cannot be classified or parsed
        rejects the row (other fields fall back to documented defaults).
    fallbacks: field -> field whose value stands in when the first is empty;
        a header matching the stand-in also satisfies the column pre-check.
    """
    kind: RecordKind
    aliases: Mapping[str, tuple[str, ...]]
    required: tuple[str, ...]
    strict: frozenset[str]
    fallbacks: Mapping[str, str] = field(default_factory=dict)

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(self.aliases.keys())


INCIDENT_SCHEMA = RecordSchema(
    kind=RecordKind.INCIDENTS,
    aliases=INCIDENT_ALIASES,
    required=("Number", "Opened", "ShortDescription"),
    strict=frozenset({"Priority"}),
    fallbacks={"ShortDescription": "Description"},
)

REQUEST_SCHEMA = RecordSchema(
    kind=RecordKind.REQUESTS,
    aliases=REQUEST_ALIASES,
    required=("Number", "Opened", "RequestItem", "RequestedForName"),
    strict=frozenset({"Priority", "State", "Updated"}),
)


def schema_for(kind: RecordKind) -> RecordSchema:
    if kind == RecordKind.INCIDENTS:
        return INCIDENT_SCHEMA
    return REQUEST_SCHEMA


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def find_column_value(row: Mapping[str, Any], aliases: Sequence[str]) -> str:
    """Return the first non-empty value stored under one of ``aliases``.

    Pass 1 tries exact header matches in alias order, pass 2 tries
    case-insensitive matches in alias order. Returns "" when nothing matches or
    every matching cell is blank. Never raises.
    """
    for alias in aliases:
        if alias in row:
            text = _cell_text(row[alias])
            if text:
                return text

    folded: dict[str, list[str]] = {}
    for key in row:
        folded.setdefault(str(key).strip().casefold(), []).append(key)
    for alias in aliases:
        for key in folded.get(alias.casefold(), ()):
            text = _cell_text(row[key])
            if text:
                return text
    return ""


def header_matches(columns: Iterable[Any], aliases: Sequence[str]) -> bool:
    """True when any header in ``columns`` equals an alias, ignoring case."""
    found = {str(c).strip().casefold() for c in columns if c is not None}
    return any(alias.casefold() in found for alias in aliases)


def missing_required_columns(columns: Iterable[Any], schema: RecordSchema) -> list[str]:
    """Canonical required fields with zero alias matches across the header."""
    cols = list(columns)
    missing = []
    for name in schema.required:
        aliases = schema.aliases[name]
        if name in schema.fallbacks:
            aliases = aliases + schema.aliases[schema.fallbacks[name]]
        if not header_matches(cols, aliases):
            missing.append(name)
    return missing


def resolve_row(row: Mapping[str, Any], schema: RecordSchema) -> dict[str, str]:
    """Resolve every canonical field of ``schema`` from one RawRow."""
    fields = {name: find_column_value(row, aliases) for name, aliases in schema.aliases.items()}
    for name, stand_in in schema.fallbacks.items():
        if not fields[name]:
            fields[name] = fields[stand_in]
    return fields
