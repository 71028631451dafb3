from __future__ import annotations

import logging
import time
import zipfile
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

from ..excel.reader import SheetData, SheetReadError, read_sheet
from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import GenerationConfig
from ..models.processing_result import (
    EdiBatch,
    EdiGenerationResult,
    MetadataBatch,
    MetadataGenerationResult,
)
from .edi_encoder import EdiEncoder, edi_filename
from .errors import InvalidRecord, SchemaMismatch
from .field_mapping import (
    METADATA_FIELDS,
    METADATA_TEMPLATE_COLUMNS,
    ORDER_FIELDS,
    ORDER_TEMPLATE_COLUMNS,
)
from .grouping import group_rows
from .metadata import build_metadata_batch
from .progress import ProgressTracker
from .run_context import RunContext, build_run_context
from .sequencer import OrderNumberSequencer
from .xml_assembler import build_xml, document_name, render_metadata_summary

"""Generation orchestration.

Each ``run_*`` call reads one spreadsheet, takes one wall-clock reading,
builds a RunContext and pushes it through its path:

    orders:   validate -> group -> number -> encode -> write .txt
    metadata: validate -> derive -> assemble XML -> write .zip + summary

Rejections (SchemaMismatch, InvalidIdentifier, ...) are recorded in the
structured error log and re-raised; the CLI turns them into exit code 2.
"""

logger = logging.getLogger(__name__)

ARCHIVE_NAME = "metadata.zip"
SUMMARY_NAME = "metadata_summary.txt"


class ProcessingError(Exception):
    """Input could not be read or output could not be written."""


def current_time(config: GenerationConfig) -> datetime:
    """The run's single wall-clock reading, in the configured zone."""
    return datetime.now(ZoneInfo(config.timezone)).replace(microsecond=0)


def _read(path: Path, error_log: ErrorLogBuffer) -> SheetData:
    try:
        sheet = read_sheet(path)
    except SheetReadError as e:
        error_log.add(path.name, -1, "READ_ERROR", str(e))
        raise ProcessingError(str(e)) from e
    logger.info(f"Loaded {len(sheet.rows)} rows from \"{sheet.name}\"")
    return sheet


def _record_rejection(error: Exception, source: str, error_log: ErrorLogBuffer) -> None:
    if isinstance(error, SchemaMismatch):
        for detail in error.details:
            error_log.add(source, -1, "SCHEMA_MISMATCH", detail)
    elif isinstance(error, InvalidRecord):
        if not error.problems:
            error_log.add(source, -1, error.error_type, str(error))
        for p in error.problems:
            error_log.add(source, p.row, error.error_type, p.describe())


def _output_dir(config: GenerationConfig, output_dir: Path | None) -> Path:
    directory = output_dir if output_dir is not None else Path(config.output_directory)
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ProcessingError(f"cannot create output directory {directory}: {e}") from e
    return directory


# ----------------------------------------------------------------------
# Order path
# ----------------------------------------------------------------------

def generate_edi(ctx: RunContext) -> EdiBatch:
    """Pure order path: group rows, number orders, encode the batch."""
    orders = group_rows(ctx.rows)
    sequencer = OrderNumberSequencer.for_moment(ctx.generated_at)
    numbered = sequencer.assign(orders)
    logger.debug("order seed=%d orders=%d", sequencer.seed, len(numbered))
    return EdiEncoder(ctx.config, ctx.generated_at).encode(numbered)


def run_orders(
    path: Path,
    config: GenerationConfig,
    *,
    output_dir: Path | None = None,
    overrides: Mapping[str, int] | None = None,
    now: datetime | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> EdiGenerationResult:
    """Read an order spreadsheet and write the EDI order file."""
    started = time.perf_counter()
    error_log = error_log if error_log is not None else ErrorLogBuffer()
    try:
        sheet = _read(path, error_log)
        generated_at = now if now is not None else current_time(config)
        try:
            ctx = build_run_context(
                sheet, ORDER_TEMPLATE_COLUMNS, "Order", ORDER_FIELDS, config, generated_at, overrides
            )
        except SchemaMismatch as e:
            _record_rejection(e, sheet.name, error_log)
            raise

        unmapped = ctx.mapping.unmapped_keys()
        if unmapped:
            logger.warning(f"unmapped fields will be blank: {', '.join(unmapped)}")

        batch = generate_edi(ctx)
        for warning in batch.warnings:
            logger.warning(warning)
            error_log.add(sheet.name, -1, "COUNTRY_CODE_FALLBACK", warning)

        target = _output_dir(config, output_dir) / edi_filename(config, generated_at)
        try:
            target.write_bytes(batch.to_text().encode("ascii"))
        except OSError as e:
            raise ProcessingError(f"cannot write {target}: {e}") from e
        logger.info(f"Wrote {target}")

        return EdiGenerationResult(
            batch=batch,
            output_path=target,
            generated_at=generated_at,
            elapsed_seconds=time.perf_counter() - started,
        )
    finally:
        error_log.flush()


# ----------------------------------------------------------------------
# Metadata path
# ----------------------------------------------------------------------

def generate_metadata(ctx: RunContext) -> MetadataBatch:
    return build_metadata_batch(ctx)


def write_metadata_archive(
    batch: MetadataBatch,
    directory: Path,
    *,
    source_name: str,
    generated_at: datetime,
) -> tuple[Path, Path]:
    """Write ``metadata.zip`` (one XML per record) and the summary report."""
    archive_path = directory / ARCHIVE_NAME
    summary_path = directory / SUMMARY_NAME
    # metadata.zip only appears once every document is written
    partial_path = archive_path.with_name(archive_path.name + ".part")
    try:
        with zipfile.ZipFile(partial_path, "w", compression=zipfile.ZIP_DEFLATED) as zf, \
                ProgressTracker(len(batch.records), description="Building ZIP") as progress:
            for record in batch.records:
                name = document_name(record.identifier)
                zf.writestr(name, build_xml(record).encode("utf-8"))
                progress.advance(name)
        partial_path.replace(archive_path)
        summary = render_metadata_summary(
            batch.records, batch.skipped_rows, source_name, generated_at.isoformat(timespec="seconds")
        )
        summary_path.write_text(summary, encoding="utf-8")
    except OSError as e:
        partial_path.unlink(missing_ok=True)
        raise ProcessingError(f"cannot write metadata output in {directory}: {e}") from e
    return archive_path, summary_path


def run_metadata(
    path: Path,
    config: GenerationConfig,
    *,
    output_dir: Path | None = None,
    overrides: Mapping[str, int] | None = None,
    now: datetime | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> MetadataGenerationResult:
    """Read a metadata spreadsheet and write the XML archive + summary."""
    started = time.perf_counter()
    error_log = error_log if error_log is not None else ErrorLogBuffer()
    try:
        sheet = _read(path, error_log)
        generated_at = now if now is not None else current_time(config)
        try:
            ctx = build_run_context(
                sheet, METADATA_TEMPLATE_COLUMNS, "Metadata", METADATA_FIELDS, config, generated_at, overrides
            )
            batch = generate_metadata(ctx)
        except (SchemaMismatch, InvalidRecord) as e:
            _record_rejection(e, sheet.name, error_log)
            raise

        if batch.skipped_count:
            logger.warning(f"{batch.skipped_count} row(s) skipped - no ISSN")

        archive_path, summary_path = write_metadata_archive(
            batch,
            _output_dir(config, output_dir),
            source_name=sheet.name,
            generated_at=generated_at,
        )
        logger.info(f"Generated {len(batch.records)} XML file(s) -> {archive_path}")

        return MetadataGenerationResult(
            batch=batch,
            archive_path=archive_path,
            summary_path=summary_path,
            generated_at=generated_at,
            elapsed_seconds=time.perf_counter() - started,
        )
    finally:
        error_log.flush()
