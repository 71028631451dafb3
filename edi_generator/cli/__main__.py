from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from ..excel.reader import SheetReadError, read_sheet
from ..logging.init import log_summary, setup_logging
from ..models.config_models import GenerationConfig
from ..models.row_data import FieldOverrideError
from ..services.errors import GenerationError, InvalidRecord, SchemaMismatch
from ..services.field_mapping import METADATA_FIELDS, ORDER_FIELDS, build_field_mapping
from ..services.orchestrator import ProcessingError, run_metadata, run_orders
from ..services.summary import render_edi_summary_line, render_metadata_summary_line

"""CLI entrypoint.

    python -m edi_generator orders  FILE [--batch-id N] [--map key=COL ...]
    python -m edi_generator metadata FILE

Flow: load .env -> load config -> read sheet -> generate -> SUMMARY line.
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_REJECTED = 2


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env so EDI_* values override the YAML config."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_map(values: list[str] | None) -> dict[str, int]:
    """``key=COL`` pairs (0-based column, -1 unmaps) -> overrides dict."""
    overrides: dict[str, int] = {}
    for item in values or []:
        key, sep, raw = item.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"--map expects key=COLUMN, got {item!r}")
        try:
            overrides[key.strip()] = int(raw)
        except ValueError as e:
            raise ValueError(f"--map column must be an integer, got {raw!r}") from e
    return overrides


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Journal order EDI / metadata XML generator")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="YAML config path")
    p.add_argument("--output-dir", type=Path, default=None, help="Override output_directory")
    p.add_argument("--inspect-data", action="store_true", help="Print headers, mapping & first rows then exit")
    sub = p.add_subparsers(dest="command", required=True)

    orders = sub.add_parser("orders", help="Generate the fixed-width EDI order file")
    orders.add_argument("file", type=Path)
    orders.add_argument("--batch-id", default=None, help="File id for $$HDR/$$EOF and the file name")
    orders.add_argument(
        "--map", action="append", metavar="KEY=COL",
        help="Point a field at a 0-based column (-1 = unmapped); repeatable",
    )

    metadata = sub.add_parser("metadata", help="Generate XML specification documents")
    metadata.add_argument("file", type=Path)
    metadata.add_argument("--map", action="append", metavar="KEY=COL")
    return p.parse_args(argv)


def _inspect_data(path: Path, command: str) -> int:
    try:
        sheet = read_sheet(path)
    except SheetReadError as e:
        print(f"inspect: {e}")
        return EXIT_FATAL
    fields = ORDER_FIELDS if command == "orders" else METADATA_FIELDS
    mapping = build_field_mapping(sheet.headers, fields)
    print(f"FILE: {sheet.name} rows={len(sheet.rows)}")
    print(f"  headers={list(sheet.headers)}")
    for f in fields:
        if mapping.is_mapped(f.key):
            idx = mapping.index_of(f.key)
            source = f"{idx}: {sheet.headers[idx]!r}"
        else:
            source = "(none)"
        print(f"  {f.label:<24} -> {source}")
    for raw in sheet.rows[:3]:
        print(f"  row {raw.row_number}: {list(raw.cells)}")
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # argv=[] must not fall back to sys.argv (pytest flags would leak in)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)

    if args.debug:
        for h in logger.handlers:
            h.setLevel("DEBUG")
        logger.setLevel("DEBUG")
        logger.debug("debug mode enabled")

    if args.inspect_data:
        return _inspect_data(args.file, args.command)

    _load_env_file(Path(".env"), override=True)
    try:
        cfg: GenerationConfig = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    batch_id = getattr(args, "batch_id", None)
    if batch_id is not None:
        if not batch_id.strip().isdigit() or len(batch_id.strip()) > 7:
            logger.error(f"config: --batch-id must be 1-7 digits, got {batch_id!r}")
            return EXIT_FATAL
        cfg = replace(cfg, batch_id=batch_id.strip())

    try:
        overrides = _parse_map(args.map)
    except ValueError as e:
        logger.error(str(e))
        return EXIT_FATAL

    logger.info(f"Processing {args.command} file: {args.file}")
    try:
        if args.command == "orders":
            result = run_orders(args.file, cfg, output_dir=args.output_dir, overrides=overrides)
            summary_line = render_edi_summary_line(result)
        else:
            result = run_metadata(args.file, cfg, output_dir=args.output_dir, overrides=overrides)
            summary_line = render_metadata_summary_line(result)
    except SchemaMismatch as e:
        logger.error(f"column mismatch - file rejected: {e}")
        for detail in e.details:
            logger.error(f"  {detail}")
        return EXIT_REJECTED
    except InvalidRecord as e:
        logger.error(f"{e.error_type.lower()}: {e}")
        return EXIT_REJECTED
    except GenerationError as e:  # pragma: no cover (all kinds handled above)
        logger.error(f"rejected: {e}")
        return EXIT_REJECTED
    except FieldOverrideError as e:
        logger.error(f"mapping: {e}")
        return EXIT_FATAL
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    # log_summary adds the "SUMMARY " prefix itself
    log_summary(summary_line[len("SUMMARY "):])
    return EXIT_SUCCESS


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
