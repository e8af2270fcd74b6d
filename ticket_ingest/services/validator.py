from __future__ import annotations

import logging
from datetime import tzinfo

from ..models.error_record import ALL_COLUMNS, ValidationError
from ..models.records import CanonicalRecord, RecordKind
from ..models.row_data import RowData
from ..normalize.dates import normalize_date
from ..normalize.fields import RecordSchema, resolve_row
from ..normalize.values import classify_priority, classify_state, match_priority, match_state

"""Per-row validation: RawRow -> CanonicalRecord or a list of ValidationErrors.

Rules, in reporting order:

1. A structurally empty row yields a single "all" error and nothing else.
2. Each required field must resolve to a non-empty value.
3. Date fields must parse when present. An unparseable required/strict date is
   an error; an unparseable optional date is dropped to "".
4. Priority / State must match a keyword set when the field is strict for the
   record kind; otherwise they fall back to the documented defaults.

A row with zero violations becomes a record even if optional fields are empty.
"""

__all__ = [
    "DATE_FIELDS",
    "validate_row",
]

logger = logging.getLogger(__name__)

DATE_FIELDS = ("Opened", "Updated", "Closed")

# canonical field -> CanonicalRecord attribute
_ATTRIBUTES = {
    "Number": "number",
    "Opened": "opened",
    "ShortDescription": "short_description",
    "Description": "description",
    "Caller": "caller",
    "RequestedForName": "caller",
    "RequestItem": "request_item",
    "Category": "category",
    "Subcategory": "subcategory",
    "AssignmentGroup": "assignment_group",
    "AssignedTo": "assigned_to",
    "Updated": "updated",
    "Closed": "closed",
    "UpdatedBy": "updated_by",
    "BusinessImpact": "business_impact",
    "ResponseTime": "response_time",
    "Location": "location",
    "CommentsAndWorkNotes": "notes",
}

_REQUIRED_REASONS = {
    "Number": "ticket number is required",
    "Opened": "opened date is required",
    "ShortDescription": "short description is required",
    "RequestItem": "request item is required",
    "RequestedForName": "requested-for name is required",
}

_PRIORITY_HINT = {
    RecordKind.INCIDENTS: "use P1, P2, P3 or P4",
    RecordKind.REQUESTS: "use High, Medium or Low",
}


def validate_row(
    row: RowData,
    schema: RecordSchema,
    tz: tzinfo | None = None,
) -> tuple[CanonicalRecord | None, list[ValidationError]]:
    """Validate and normalize one row.

    Returns:
        (record, []) on success, (None, errors) when the row is rejected.
    """
    if row.is_blank:
        return None, [ValidationError.create(row.row_number, ALL_COLUMNS, "empty or invalid row")]

    n = row.row_number
    fields = resolve_row(row.values, schema)
    errors: list[ValidationError] = []

    for name in schema.required:
        if not fields[name]:
            errors.append(ValidationError.create(n, name, _REQUIRED_REASONS.get(name, f"{name} is required")))

    for name in DATE_FIELDS:
        raw = fields.get(name, "")
        if not raw:
            continue
        iso = normalize_date(raw, tz)
        if iso is not None:
            fields[name] = iso
        elif name in schema.required or name in schema.strict:
            errors.append(ValidationError.create(n, name, f"invalid {name.lower()} date", raw))
        else:
            logger.debug("row=%d field=%s unparseable optional date dropped: %r", n, name, raw)
            fields[name] = ""

    raw_priority = fields["Priority"]
    priority = classify_priority(raw_priority, schema.kind)
    if raw_priority and "Priority" in schema.strict and match_priority(raw_priority, schema.kind) is None:
        errors.append(ValidationError.create(
            n, "Priority", f"invalid priority ({_PRIORITY_HINT[schema.kind]})", raw_priority,
        ))

    raw_state = fields["State"]
    state = classify_state(raw_state)
    if raw_state and "State" in schema.strict and match_state(raw_state) is None:
        errors.append(ValidationError.create(
            n,
            "State",
            "invalid state (Opened, Assigned, Work in Progress, Closed Complete, "
            "Closed Incomplete, Closed Skipped, On Hold)",
            raw_state,
        ))

    if errors:
        return None, errors

    if schema.kind == RecordKind.INCIDENTS and not fields.get("ResponseTime"):
        fields["ResponseTime"] = "0"

    values = {
        attr: fields[name]
        for name, attr in _ATTRIBUTES.items()
        if name in fields
    }
    record = CanonicalRecord(
        kind=schema.kind,
        row_number=n,
        priority=priority,
        state=state,
        raw_priority=raw_priority,
        raw_state=raw_state,
        **values,
    )
    return record, []
