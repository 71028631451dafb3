from __future__ import annotations

from dataclasses import dataclass

"""MetadataRecord model: one derived XML specification document."""

__all__ = [
    "MetadataRecord",
    "PaperSpec",
]


@dataclass(frozen=True)
class PaperSpec:
    grammage: int  # g/m2
    volume: int  # bulk volume

    @property
    def name(self) -> str:
        return f"{self.grammage}gsm"


@dataclass(frozen=True)
class MetadataRecord:
    """Specification values for one title, keyed by its 13-digit identifier.

    Dimensions are millimetres.
    """
    identifier: str
    title: str
    page_extent: int
    paper: PaperSpec
    spine_mm: int
    trim_height_mm: int
    trim_width_mm: int
    binding_style: str
    lamination: str
    row_number: int = -1

    @property
    def paper_type(self) -> str:
        return self.paper.name
