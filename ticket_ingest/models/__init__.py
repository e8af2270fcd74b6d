"""Domain models for the ticket ingestion pipeline.

Records, enumerations, validation errors, configuration structures and the
per-run result object.
"""

from .config_models import DEFAULT_SHIFTS, IngestConfig, ShiftTable, ShiftWindow, SLAThresholds
from .error_record import ValidationError
from .processing_result import IngestResult
from .records import (
    CanonicalRecord,
    IncidentPriority,
    LifecycleState,
    RecordKind,
    RequestPriority,
    Shift,
    SLAStatus,
)
from .row_data import RowData

__all__ = [
    # Records & enumerations
    "CanonicalRecord",
    "IncidentPriority",
    "LifecycleState",
    "RecordKind",
    "RequestPriority",
    "Shift",
    "SLAStatus",
    # Processing models
    "IngestResult",
    "RowData",
    "ValidationError",
    # Configuration models
    "DEFAULT_SHIFTS",
    "IngestConfig",
    "ShiftTable",
    "ShiftWindow",
    "SLAThresholds",
]
