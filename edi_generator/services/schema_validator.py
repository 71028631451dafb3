from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from .errors import ColumnMismatch, SchemaMismatch

"""Header schema validator.

Field positions are assigned purely by column index once a file passes, so a
single transposed column would corrupt every derived record. Any mismatch
therefore rejects the whole file; there is no partial acceptance and no
auto-repair.
"""

__all__ = [
    "MISSING",
    "UNEXPECTED",
    "SchemaValidationResult",
    "ensure_headers",
    "validate_headers",
]

MISSING = "(missing)"
UNEXPECTED = "(unexpected)"


@dataclass(frozen=True)
class SchemaValidationResult:
    expected_count: int
    actual_count: int
    mismatches: tuple[ColumnMismatch, ...] = field(default_factory=tuple)

    @property
    def count_matches(self) -> bool:
        return self.expected_count == self.actual_count

    @property
    def valid(self) -> bool:
        return self.count_matches and not self.mismatches

    @property
    def details(self) -> list[str]:
        """One message per problem, count problem first."""
        out: list[str] = []
        if not self.count_matches:
            plural = "s" if self.expected_count != 1 else ""
            out.append(f"Expected {self.expected_count} column{plural}, found {self.actual_count}.")
        out.extend(m.describe() for m in self.mismatches)
        return out


def validate_headers(actual: Sequence[str], expected: Sequence[str]) -> SchemaValidationResult:
    """Compare headers position by position, reporting every difference.

    Comparison is exact: case, inner double spaces and trailing whitespace
    all count.
    """
    mismatches: list[ColumnMismatch] = []
    for i in range(max(len(actual), len(expected))):
        act = actual[i] if i < len(actual) else MISSING
        exp = expected[i] if i < len(expected) else UNEXPECTED
        if act != exp:
            mismatches.append(ColumnMismatch(position=i + 1, expected=exp, actual=act))
    return SchemaValidationResult(
        expected_count=len(expected),
        actual_count=len(actual),
        mismatches=tuple(mismatches),
    )


def ensure_headers(actual: Sequence[str], expected: Sequence[str], template: str) -> None:
    """Raise SchemaMismatch unless ``actual`` matches ``expected`` exactly."""
    result = validate_headers(actual, expected)
    if not result.valid:
        raise SchemaMismatch(template, result.details, result.mismatches)
