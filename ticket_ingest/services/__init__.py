"""Pipeline services: validation, orchestration, shifts, SLA, progress, summary."""
