from __future__ import annotations

from .app import main

"""Entrypoint for ``python -m ticket_ingest.cli``."""

if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
