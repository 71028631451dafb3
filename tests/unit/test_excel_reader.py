from __future__ import annotations

import math
from pathlib import Path

import pandas as pd
import pytest

from edi_generator.excel.reader import SheetReadError, cell_text, read_sheet


def _make_excel(path: Path, rows: list[list[object]]) -> Path:
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame(rows).to_excel(writer, sheet_name="Sheet1", header=False, index=False)
    return path


def test_cell_text():
    assert cell_text(None) == ""
    assert cell_text(math.nan) == ""
    assert cell_text(120.0) == "120"
    assert cell_text(12.5) == "12.5"
    assert cell_text(" a ") == " a "


def test_headers_kept_verbatim_and_cells_as_text(tmp_path: Path):
    path = _make_excel(tmp_path / "m.xlsx", [
        ["ISSN", "Title ", "Page Extent"],
        ["0771472645051", "Journal", 120],
    ])
    sheet = read_sheet(path)

    assert sheet.name == "m.xlsx"
    assert sheet.headers == ("ISSN", "Title ", "Page Extent")
    assert len(sheet.rows) == 1
    assert sheet.rows[0].row_number == 2
    assert sheet.rows[0].cells == ("0771472645051", "Journal", "120")


def test_blank_rows_dropped_row_numbers_kept(tmp_path: Path):
    path = _make_excel(tmp_path / "m.xlsx", [
        ["ISSN", "Title", "Page Extent"],
        ["9771472645051", "A", "10"],
        ["", "", ""],
        ["9771234567003", "B", "20"],
    ])
    sheet = read_sheet(path)
    assert [r.row_number for r in sheet.rows] == [2, 4]


def test_csv_input(tmp_path: Path):
    path = tmp_path / "m.csv"
    path.write_text("ISSN,Title,Page Extent \n0012345678901,A,10\n", encoding="utf-8")
    sheet = read_sheet(path)

    assert sheet.headers == ("ISSN", "Title", "Page Extent ")
    assert sheet.rows[0].cells[0] == "0012345678901"


def test_trailing_empty_columns_trimmed(tmp_path: Path):
    path = tmp_path / "m.csv"
    path.write_text("ISSN,Title,Page Extent,\n1,A,10,\n", encoding="utf-8")
    assert read_sheet(path).headers == ("ISSN", "Title", "Page Extent")


def test_missing_file(tmp_path: Path):
    with pytest.raises(SheetReadError, match="file not found"):
        read_sheet(tmp_path / "nope.xlsx")


def test_unsupported_suffix(tmp_path: Path):
    p = tmp_path / "orders.txt"
    p.write_text("x", encoding="utf-8")
    with pytest.raises(SheetReadError, match="unsupported file type"):
        read_sheet(p)


def test_corrupt_workbook(tmp_path: Path):
    p = tmp_path / "broken.xlsx"
    p.write_bytes(b"not a zip")
    with pytest.raises(SheetReadError, match="failed to read broken.xlsx"):
        read_sheet(p)


def test_csv_blank_lines_keep_file_row_numbers(tmp_path: Path):
    path = tmp_path / "m.csv"
    path.write_text("ISSN,Title,Page Extent\n9771472645051,A,10\n\n123-45 6,B,20\n", encoding="utf-8")
    sheet = read_sheet(path)

    assert [r.row_number for r in sheet.rows] == [2, 4]
    assert sheet.rows[1].cells[0] == "123-45 6"


def test_legacy_xls_is_unsupported(tmp_path: Path):
    p = tmp_path / "orders.xls"
    p.write_bytes(b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1")
    with pytest.raises(SheetReadError, match="unsupported file type: .xls"):
        read_sheet(p)
