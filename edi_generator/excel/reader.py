from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pandas as pd

"""Spreadsheet reader.

The first row of the first sheet is the header row, kept verbatim (trailing
spaces are part of the template contract). Every cell is read as text so
that identifiers such as ISSNs keep their leading zeros. Rows whose cells
are all empty are dropped.
"""

EXCEL_SUFFIXES = {".xlsx", ".xlsm"}  # openpyxl formats only
CSV_SUFFIXES = {".csv"}


class SheetReadError(Exception):
    """Raised when a file cannot be read or has no header row."""


@dataclass(frozen=True)
class RawRow:
    row_number: int  # spreadsheet row number (header row = 1)
    cells: tuple[str, ...]


@dataclass(frozen=True)
class SheetData:
    name: str
    headers: tuple[str, ...]
    rows: tuple[RawRow, ...]


def cell_text(value: Any) -> str:
    """Coerce a raw cell to text ("" for empty / NaN)."""
    if value is None or value is pd.NA:
        return ""
    if isinstance(value, float):
        if pd.isna(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value)


def _read_frame(path: Path) -> pd.DataFrame:
    suffix = path.suffix.lower()
    if suffix in EXCEL_SUFFIXES:
        return pd.read_excel(path, sheet_name=0, header=None, dtype=str, keep_default_na=False)
    if suffix in CSV_SUFFIXES:
        # blank lines kept so row numbers match the file; read_sheet drops them
        return pd.read_csv(
            path, header=None, dtype=str, keep_default_na=False,
            skip_blank_lines=False, encoding="utf-8-sig",
        )
    raise SheetReadError(f"unsupported file type: {path.suffix or '(none)'}")


def read_sheet(path: Path) -> SheetData:
    """Read headers and non-empty data rows from a spreadsheet or CSV file."""
    if not path.exists():
        raise SheetReadError(f"file not found: {path}")
    try:
        df = _read_frame(path)
    except SheetReadError:
        raise
    except Exception as e:
        raise SheetReadError(f"failed to read {path.name}: {e}") from e

    if df.shape[0] < 1:
        raise SheetReadError(f"'{path.name}' appears to be empty")

    headers = tuple(cell_text(v) for v in df.iloc[0].tolist())
    # Trailing header cells that are empty come from ragged sheet ranges
    while headers and headers[-1] == "" and df.iloc[1:, len(headers) - 1].map(cell_text).eq("").all():
        headers = headers[:-1]

    rows: list[RawRow] = []
    for offset, raw in enumerate(df.iloc[1:].itertuples(index=False, name=None)):
        cells = tuple(cell_text(v) for v in raw)
        if all(c.strip() == "" for c in cells):
            continue
        rows.append(RawRow(row_number=offset + 2, cells=cells))

    return SheetData(name=path.name, headers=headers, rows=tuple(rows))
