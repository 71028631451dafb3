from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime

from ..excel.reader import SheetData
from ..models.config_models import GenerationConfig
from ..models.row_data import FieldDefinition, FieldMapping, SourceRow
from .field_mapping import build_field_mapping
from .schema_validator import ensure_headers

"""RunContext: the immutable input snapshot of one generation call.

Holds the validated headers, the resolved rows, the field mapping, the
configuration and the single wall-clock reading taken at entry. Every stage
of the pipeline reads from it; nothing writes to it.
"""

__all__ = [
    "RunContext",
    "build_run_context",
]


@dataclass(frozen=True)
class RunContext:
    source_name: str
    headers: tuple[str, ...]
    rows: tuple[SourceRow, ...]
    mapping: FieldMapping
    config: GenerationConfig
    generated_at: datetime


def build_run_context(
    sheet: SheetData,
    template: Sequence[str],
    template_name: str,
    fields: Sequence[FieldDefinition],
    config: GenerationConfig,
    generated_at: datetime,
    overrides: Mapping[str, int] | None = None,
) -> RunContext:
    """Validate headers, resolve the field mapping and freeze the rows.

    Raises:
        SchemaMismatch: before any row is resolved, if headers differ
        FieldOverrideError: for an invalid operator override
    """
    ensure_headers(sheet.headers, template, template_name)

    mapping = build_field_mapping(sheet.headers, fields)
    for key, index in (overrides or {}).items():
        mapping = mapping.override(key, index)

    rows = tuple(mapping.resolve(r.cells, r.row_number) for r in sheet.rows)
    return RunContext(
        source_name=sheet.name,
        headers=tuple(sheet.headers),
        rows=rows,
        mapping=mapping,
        config=config,
        generated_at=generated_at,
    )
