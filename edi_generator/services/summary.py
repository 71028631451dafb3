from __future__ import annotations

from ..models.processing_result import EdiGenerationResult, MetadataGenerationResult

"""SUMMARY line rendering.

Formats:
    SUMMARY orders={n} line_items={n} records={n} warnings={n} file={name} elapsed_sec={s}
    SUMMARY documents={n} skipped={n} archive={name} elapsed_sec={s}
"""


def _format_seconds(seconds: float) -> str:
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        # avoid scientific notation
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return f"{seconds:.3f}".rstrip("0").rstrip(".")


def render_edi_summary_line(result: EdiGenerationResult) -> str:
    batch = result.batch
    return (
        f"SUMMARY orders={batch.order_count} "
        f"line_items={batch.line_item_count} "
        f"records={batch.record_count} "
        f"warnings={len(batch.warnings)} "
        f"file={result.output_path.name} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )


def render_metadata_summary_line(result: MetadataGenerationResult) -> str:
    batch = result.batch
    return (
        f"SUMMARY documents={len(batch.records)} "
        f"skipped={batch.skipped_count} "
        f"archive={result.archive_path.name} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )
