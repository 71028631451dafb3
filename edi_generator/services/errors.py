from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

"""Input rejection errors.

Both kinds are terminal for the invocation: the input must be corrected and
resubmitted. Nothing in the generator retries.
"""

__all__ = [
    "ColumnMismatch",
    "GenerationError",
    "InvalidIdentifier",
    "InvalidPageExtent",
    "InvalidRecord",
    "RowProblem",
    "SchemaMismatch",
]


class GenerationError(Exception):
    """Base class for input rejections."""


@dataclass(frozen=True)
class ColumnMismatch:
    position: int  # 1-based column number
    expected: str
    actual: str

    def describe(self) -> str:
        return f'Column {self.position}: expected "{self.expected}" - got "{self.actual}".'


class SchemaMismatch(GenerationError):
    """Header row does not match the template exactly."""

    def __init__(self, template: str, details: Sequence[str], mismatches: Sequence[ColumnMismatch]) -> None:
        self.template = template
        self.details = list(details)
        self.mismatches = list(mismatches)
        super().__init__(
            f"the uploaded file does not match the {template} template "
            f"({len(self.details)} problem{'s' if len(self.details) != 1 else ''})"
        )


@dataclass(frozen=True)
class RowProblem:
    row: int  # spreadsheet row number
    value: str
    reason: str

    def describe(self) -> str:
        return f'row {self.row}: {self.reason} "{self.value}"'


class InvalidRecord(GenerationError):
    """One or more data rows carry a value that blocks generation."""

    error_type = "INVALID_RECORD"

    def __init__(self, problems: Sequence[RowProblem], message: str | None = None) -> None:
        self.problems = list(problems)
        if message is None:
            message = "; ".join(p.describe() for p in self.problems)
        super().__init__(message)


class InvalidIdentifier(InvalidRecord):
    error_type = "INVALID_IDENTIFIER"


class InvalidPageExtent(InvalidRecord):
    error_type = "INVALID_PAGE_EXTENT"
