from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from .metadata_record import MetadataRecord
from .order import Order

"""Result models for the two generation paths.

EdiBatch is the encoded order file; the *Result classes add where it was
written and how long the run took, for the SUMMARY line.
"""


@dataclass(frozen=True)
class EdiBatch:
    """Encoded EDI batch: marker lines, record lines and counters."""
    lines: tuple[str, ...]  # $$HDR ... $$EOF, no line terminators
    orders: tuple[Order, ...]
    record_count: int  # H1 + H2 + H3 + D1 only
    line_item_count: int
    warnings: tuple[str, ...] = ()

    @property
    def order_count(self) -> int:
        return len(self.orders)

    def to_text(self) -> str:
        """CRLF-joined output with a trailing CRLF."""
        return "\r\n".join(self.lines) + "\r\n"


@dataclass(frozen=True)
class EdiGenerationResult:
    batch: EdiBatch
    output_path: Path
    generated_at: datetime
    elapsed_seconds: float


@dataclass(frozen=True)
class MetadataBatch:
    """Accepted metadata records plus the rows skipped for lacking an ISSN."""
    records: tuple[MetadataRecord, ...]
    skipped_rows: tuple[int, ...] = ()

    @property
    def skipped_count(self) -> int:
        return len(self.skipped_rows)


@dataclass(frozen=True)
class MetadataGenerationResult:
    batch: MetadataBatch
    archive_path: Path
    summary_path: Path
    generated_at: datetime
    elapsed_seconds: float
