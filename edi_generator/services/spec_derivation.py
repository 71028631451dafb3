from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from ..models.metadata_record import PaperSpec

"""Physical specification derivation from page extent.

Paper: up to 32 pages print on 130gsm, anything longer on 90gsm; both stocks
share bulk volume 10. Spine thickness (mm):

    round_half_up(extent * grammage * volume / SPINE_BULK_DIVISOR + BINDING_ALLOWANCE_MM)

Trim size, binding style and lamination are fixed for the current product
line.
"""

__all__ = [
    "BINDING_ALLOWANCE_MM",
    "BINDING_STYLE",
    "HEAVY_PAPER",
    "LAMINATION",
    "LIGHT_PAPER",
    "LIGHT_PAPER_THRESHOLD",
    "SPINE_BULK_DIVISOR",
    "TRIM_HEIGHT_MM",
    "TRIM_WIDTH_MM",
    "select_paper",
    "spine_thickness_mm",
]

PAPER_VOLUME = 10
HEAVY_PAPER = PaperSpec(grammage=130, volume=PAPER_VOLUME)
LIGHT_PAPER = PaperSpec(grammage=90, volume=PAPER_VOLUME)
LIGHT_PAPER_THRESHOLD = 32  # extents above this use LIGHT_PAPER

SPINE_BULK_DIVISOR = Decimal("20000")
BINDING_ALLOWANCE_MM = Decimal("0.65")

TRIM_HEIGHT_MM = 246
TRIM_WIDTH_MM = 189
BINDING_STYLE = "Perfect Bound"
LAMINATION = "Matt"


def select_paper(page_extent: int) -> PaperSpec:
    if page_extent <= LIGHT_PAPER_THRESHOLD:
        return HEAVY_PAPER
    return LIGHT_PAPER


def spine_thickness_mm(page_extent: int, paper: PaperSpec | None = None) -> int:
    """Spine thickness in whole millimetres, halves rounded up.

    Decimal arithmetic keeps .5 boundaries exact.

    >>> spine_thickness_mm(32)
    3
    >>> spine_thickness_mm(120)
    6
    """
    if paper is None:
        paper = select_paper(page_extent)
    bulk = Decimal(page_extent) * paper.grammage * paper.volume / SPINE_BULK_DIVISOR
    return int((bulk + BINDING_ALLOWANCE_MM).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
