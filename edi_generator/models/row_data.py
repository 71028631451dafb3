from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType

"""SourceRow, FieldDefinition and FieldMapping models.

A SourceRow is one spreadsheet row after column-position resolution: every
canonical field key maps to the raw cell text (blank when unmapped).
"""

__all__ = [
    "FieldDefinition",
    "FieldMapping",
    "FieldOverrideError",
    "SourceRow",
    "UNMAPPED",
]

UNMAPPED = -1


class FieldOverrideError(ValueError):
    """An operator column override names an unknown field or column."""


@dataclass(frozen=True)
class FieldDefinition:
    """A canonical input field and the header names that resolve to it."""
    key: str
    label: str
    header: str  # template header, exact text
    aliases: tuple[str, ...] = ()  # lower-case alternatives


@dataclass(frozen=True)
class FieldMapping:
    """Field key -> 0-based source column index (UNMAPPED when absent).

    Built once at load time; ``override`` returns a new mapping so the value
    stays read-only while a run is in progress.
    """
    columns: Mapping[str, int]
    column_count: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "columns", MappingProxyType(dict(self.columns)))

    def index_of(self, key: str) -> int:
        return self.columns.get(key, UNMAPPED)

    def is_mapped(self, key: str) -> bool:
        return self.index_of(key) != UNMAPPED

    def unmapped_keys(self) -> list[str]:
        return [k for k, idx in self.columns.items() if idx == UNMAPPED]

    def override(self, key: str, index: int) -> FieldMapping:
        """Return a copy with ``key`` pointed at column ``index`` (-1 unmaps)."""
        if key not in self.columns:
            raise FieldOverrideError(f"unknown field key: {key}")
        if index != UNMAPPED and not 0 <= index < self.column_count:
            raise FieldOverrideError(
                f"column index {index} out of range for field '{key}' "
                f"(file has {self.column_count} columns)"
            )
        updated = dict(self.columns)
        updated[key] = index
        return FieldMapping(columns=updated, column_count=self.column_count)

    def resolve(self, cells: Sequence[str], row_number: int) -> SourceRow:
        """Build a SourceRow from raw cells using this mapping."""
        values: dict[str, str] = {}
        for key, idx in self.columns.items():
            if idx == UNMAPPED or idx >= len(cells):
                values[key] = ""
            else:
                values[key] = cells[idx]
        return SourceRow(row_number=row_number, values=values)


@dataclass(frozen=True)
class SourceRow:
    """Immutable field key -> raw string mapping for one spreadsheet row."""
    row_number: int  # spreadsheet row number (header row = 1)
    values: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    def raw(self, key: str) -> str:
        return self.values.get(key, "")

    def text(self, key: str) -> str:
        """Trimmed cell text ("" when unmapped or empty)."""
        return self.raw(key).strip()

