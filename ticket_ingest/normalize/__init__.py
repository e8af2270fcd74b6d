"""Field, date and value normalization.

All functions here are total: unrecognized input yields a sentinel (None / "")
or a documented default, never an exception.
"""

from .dates import format_br_date, normalize_date, parse_date
from .fields import INCIDENT_SCHEMA, REQUEST_SCHEMA, RecordSchema, find_column_value, schema_for
from .values import classify_priority, classify_state, normalize_location

__all__ = [
    "INCIDENT_SCHEMA",
    "REQUEST_SCHEMA",
    "RecordSchema",
    "classify_priority",
    "classify_state",
    "find_column_value",
    "format_br_date",
    "normalize_date",
    "normalize_location",
    "parse_date",
    "schema_for",
]
