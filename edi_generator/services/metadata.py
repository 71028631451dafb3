from __future__ import annotations

import logging
import re

from ..models.metadata_record import MetadataRecord
from ..models.processing_result import MetadataBatch
from ..models.row_data import SourceRow
from .errors import InvalidIdentifier, InvalidPageExtent, RowProblem
from .run_context import RunContext
from .spec_derivation import (
    BINDING_STYLE,
    LAMINATION,
    TRIM_HEIGHT_MM,
    TRIM_WIDTH_MM,
    select_paper,
    spine_thickness_mm,
)

"""Metadata path: validated rows -> MetadataRecords.

Rows with an empty ISSN are skipped and tallied. Any non-empty ISSN that is
not exactly 13 digits, or repeats an earlier row's ISSN, blocks the whole
batch, as does a page extent that is not a positive whole number. All
offending rows are reported together.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "build_metadata_batch",
    "is_valid_issn",
    "parse_page_extent",
]

_ISSN = re.compile(r"[0-9]{13}")
# whole number, optional ".0" tail from numeric cells; 9 digits caps the spine maths
_PAGE_EXTENT = re.compile(r"([0-9]{1,9})(?:\.0+)?")


def is_valid_issn(value: str) -> bool:
    """True iff ``value`` is exactly 13 digit characters and nothing else."""
    return _ISSN.fullmatch(value) is not None


def parse_page_extent(text: str) -> int | None:
    """Positive whole page count from ``text`` ("120", "120.0"), else None."""
    match = _PAGE_EXTENT.fullmatch(text.strip())
    if match is None:
        return None
    extent = int(match.group(1))
    return extent if extent >= 1 else None


def _record_for(row: SourceRow, identifier: str, extent: int) -> MetadataRecord:
    paper = select_paper(extent)
    return MetadataRecord(
        identifier=identifier,
        title=row.text("title"),
        page_extent=extent,
        paper=paper,
        spine_mm=spine_thickness_mm(extent, paper),
        trim_height_mm=TRIM_HEIGHT_MM,
        trim_width_mm=TRIM_WIDTH_MM,
        binding_style=BINDING_STYLE,
        lamination=LAMINATION,
        row_number=row.row_number,
    )


def build_metadata_batch(ctx: RunContext) -> MetadataBatch:
    """Derive one MetadataRecord per row carrying an ISSN.

    Raises:
        InvalidIdentifier: malformed or duplicated ISSNs, or no usable row
        InvalidPageExtent: page extent missing or not a positive integer
    """
    bad_ids: list[RowProblem] = []
    bad_extents: list[RowProblem] = []
    skipped: list[int] = []
    seen: dict[str, int] = {}
    accepted: list[tuple[SourceRow, str, int]] = []

    for row in ctx.rows:
        issn = row.text("issn")
        if not issn:
            skipped.append(row.row_number)
            logger.debug("row %d skipped: no ISSN", row.row_number)
            continue
        if not is_valid_issn(issn):
            bad_ids.append(RowProblem(row.row_number, issn, "ISSN must be exactly 13 digits, got"))
            continue
        if issn in seen:
            bad_ids.append(RowProblem(row.row_number, issn, f"duplicate of row {seen[issn]}:"))
            continue
        seen[issn] = row.row_number

        raw_extent = row.text("pageExtent")
        extent = parse_page_extent(raw_extent)
        if extent is None:
            bad_extents.append(RowProblem(row.row_number, raw_extent, "page extent must be a positive integer, got"))
            continue
        accepted.append((row, issn, extent))

    if bad_ids:
        raise InvalidIdentifier(bad_ids)
    if bad_extents:
        raise InvalidPageExtent(bad_extents)
    if not accepted:
        raise InvalidIdentifier([], "no rows with a valid ISSN found - no XML files were generated")

    records = tuple(_record_for(row, issn, extent) for row, issn, extent in accepted)
    return MetadataBatch(records=records, skipped_rows=tuple(skipped))
