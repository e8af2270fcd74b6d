"""Command-line interface (python -m ticket_ingest.cli)."""

from .app import main

__all__ = ["main"]
