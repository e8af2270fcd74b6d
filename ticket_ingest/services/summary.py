from __future__ import annotations

from ..models.processing_result import IngestResult

"""SUMMARY line rendering.

Format:
SUMMARY kind=<kind> rows=<n> valid=<v> invalid=<i> errors=<e> elapsed_sec=<s> throughput_rps=<r>
"""

__all__ = ["render_summary_line"]


def _format_number(value: float) -> str:
    # Integers print bare; tiny values avoid scientific notation
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: IngestResult) -> str:
    """Render the SUMMARY line for one ingestion run.

    Examples:
        >>> from datetime import datetime, timezone
        >>> from ticket_ingest.models import IngestResult, RecordKind
        >>> t = datetime(2025, 1, 1, tzinfo=timezone.utc)
        >>> r = IngestResult(RecordKind.INCIDENTS, [], [], 0, t, t, 2.0)
        >>> render_summary_line(r)
        'SUMMARY kind=incidents rows=0 valid=0 invalid=0 errors=0 elapsed_sec=2 throughput_rps=0'
    """
    return (
        f"SUMMARY kind={result.kind.value} "
        f"rows={result.total_rows} "
        f"valid={result.valid_rows} "
        f"invalid={result.invalid_rows} "
        f"errors={len(result.errors)} "
        f"elapsed_sec={_format_number(result.elapsed_seconds)} "
        f"throughput_rps={_format_number(result.rows_per_sec)}"
    )
