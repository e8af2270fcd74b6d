from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH, ConfigError, load_config, resolve_config_path
from ..excel.reader import SheetHeaderError, SheetReadError, read_sheet
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import log_summary, setup_logging
from ..models.config_models import IngestConfig
from ..models.records import CanonicalRecord, RecordKind
from ..services.orchestrator import IngestError, NoValidRecordsError, ingest_file
from ..services.summary import render_summary_line

"""CLI application.

python -m ticket_ingest.cli FILE --kind {incidents,requests} [--config PATH]
    [--output JSON] [--sheet NAME] [--debug] [--inspect-data]

Exit codes:
- 0: every data row became a record
- 2: partial success, some rows were rejected (see logs/errors-*.log)
- 1: fatal (config, unreadable / structurally invalid sheet, no valid rows)
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

INSPECT_SAMPLE_ROWS = 3


def _load_env_file(path: Path) -> None:
    """Load .env (if present) so TICKET_INGEST_CONFIG can be set there."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=False)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="ticket_ingest",
        description="Validate and normalize an incident / request spreadsheet",
    )
    p.add_argument("file", type=Path, help="Spreadsheet to ingest (.xlsx, .xls or .csv)")
    p.add_argument("--kind", required=True, choices=[k.value for k in RecordKind], help="Record kind of the sheet")
    p.add_argument("--config", type=Path, default=None, help=f"Config YAML (default: ${CONFIG_ENV_VAR} or {DEFAULT_CONFIG_PATH})")
    p.add_argument("--sheet", default=None, help="Sheet name (default: first sheet)")
    p.add_argument("--output", type=Path, default=None, help="Write the canonical records as JSON")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print sheet header & first rows then exit")
    return p.parse_args(argv)


def _load(args: argparse.Namespace) -> IngestConfig:
    path = resolve_config_path(args.config)
    # An absent default file means built-in defaults; an explicitly named one must exist
    if args.config is None and path == DEFAULT_CONFIG_PATH and not path.exists():
        return load_config(None)
    return load_config(path)


def _inspect_data(path: Path, sheet_name: str | None) -> int:
    try:
        sheet = read_sheet(path, sheet_name)
    except (SheetReadError, SheetHeaderError) as e:
        print(f"inspect: {e}")
        return EXIT_FATAL
    print(f"FILE: {path.name}")
    print(f"  SHEET: {sheet.sheet_name} rows={len(sheet.rows)} cols={sheet.columns}")
    print("    sample_rows=", sheet.rows[:INSPECT_SAMPLE_ROWS])
    return EXIT_SUCCESS_ALL


def _write_output(path: Path, records: list[CanonicalRecord]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = [r.to_dict() for r in records]
    path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None only: an explicit [] must not fall back to sys.argv (pytest flags)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"))

    if args.debug:
        for h in logger.handlers:
            h.setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
        logger.debug("debug mode enabled")

    try:
        cfg = _load(args)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.inspect_data:
        return _inspect_data(args.file, args.sheet)

    logger.info(f"Ingesting {args.kind} from: {args.file}")
    error_log = ErrorLogBuffer()
    try:
        result = ingest_file(args.file, args.kind, cfg, sheet_name=args.sheet)
    except NoValidRecordsError as e:
        error_log.extend(e.errors)
        log_path = error_log.flush()
        logger.error(f"ingest: {e}")
        if log_path is not None:
            logger.error(f"validation errors written to {log_path}")
        return EXIT_FATAL
    except IngestError as e:
        logger.error(f"ingest: {e}")
        return EXIT_FATAL

    if result.errors:
        error_log.extend(result.errors)
        log_path = error_log.flush()
        logger.warning(f"{result.invalid_rows} row(s) rejected; details in {log_path}")

    if args.output is not None:
        _write_output(args.output, result.records)
        logger.info(f"wrote {result.valid_rows} record(s) to {args.output}")

    # log_summary adds the "SUMMARY " label itself
    log_summary(render_summary_line(result)[len("SUMMARY "):])

    if result.errors:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL
