from __future__ import annotations

import json
import zipfile
from pathlib import Path
from unittest.mock import patch

import pytest

from edi_generator.logging.error_log import ErrorLogBuffer
from edi_generator.services.errors import InvalidIdentifier, SchemaMismatch
from edi_generator.services.orchestrator import (
    ARCHIVE_NAME,
    SUMMARY_NAME,
    ProcessingError,
    current_time,
    run_metadata,
    run_orders,
)


def _log_lines(logs_dir: Path) -> list[dict]:
    files = list(logs_dir.glob("errors-*.log"))
    assert len(files) == 1
    return [json.loads(line) for line in files[0].read_text(encoding="utf-8").splitlines()]


def test_run_orders_writes_ascii_crlf_file(temp_workdir, config, fixed_now, order_workbook):
    path = order_workbook([
        {"subscriptionNum": "A", "isbn": "9771472645051", "quantity": "2", "deliveryCompany": "Acme", "country": "GB"},
        {"subscriptionNum": "A", "isbn": "9771234567003", "deliveryCompany": "Acme", "country": "GB"},
        {"subscriptionNum": "B", "isbn": "9771472645051", "country": "FR"},
    ])
    result = run_orders(path, config, output_dir=temp_workdir / "out", now=fixed_now)

    assert result.output_path == temp_workdir / "out" / "T1.0027816_1423_(24-02-26).txt"
    data = result.output_path.read_bytes()
    data.decode("ascii")
    assert data.endswith(b"\r\n")
    lines = data.decode("ascii").split("\r\n")[:-1]
    assert len(lines) == 2 + 3 + 2 + 3 + 1
    assert result.batch.order_count == 2
    assert result.batch.line_item_count == 3
    assert result.batch.record_count == 9
    assert lines[1][2:17].rstrip() == "32602241423"
    assert lines[6][2:17].rstrip() == "32602241424"
    assert result.generated_at == fixed_now


def test_run_orders_schema_mismatch_logged(temp_workdir, config, fixed_now, order_workbook):
    headers = ["Order Ref", "ISSN"]
    path = order_workbook([], headers=headers)
    log = ErrorLogBuffer(temp_workdir / "logs")

    with pytest.raises(SchemaMismatch):
        run_orders(path, config, output_dir=temp_workdir / "out", now=fixed_now, error_log=log)

    records = _log_lines(temp_workdir / "logs")
    assert all(r["error_type"] == "SCHEMA_MISMATCH" for r in records)
    assert records[0]["message"] == "Expected 16 columns, found 2."
    assert records[0]["row"] == -1
    assert not (temp_workdir / "out").exists()


def test_run_orders_unknown_country_recorded(temp_workdir, config, fixed_now, order_workbook, capsys):
    path = order_workbook([{"subscriptionNum": "A", "country": "XX"}])
    log = ErrorLogBuffer(temp_workdir / "logs")
    result = run_orders(path, config, output_dir=temp_workdir / "out", now=fixed_now, error_log=log)

    assert len(result.batch.warnings) == 1
    records = _log_lines(temp_workdir / "logs")
    assert records[0]["error_type"] == "COUNTRY_CODE_FALLBACK"


def test_run_orders_override_unmaps_field(temp_workdir, config, fixed_now, order_workbook):
    path = order_workbook([{"subscriptionNum": "A", "quantity": "9"}])
    result = run_orders(
        path, config, output_dir=temp_workdir / "out", now=fixed_now, overrides={"quantity": -1}
    )
    d1 = result.batch.lines[4]
    assert d1[146:153] == "0000001"


def test_run_orders_missing_input(temp_workdir, config, fixed_now):
    log = ErrorLogBuffer(temp_workdir / "logs")
    with pytest.raises(ProcessingError, match="file not found"):
        run_orders(temp_workdir / "data" / "missing.xlsx", config, now=fixed_now, error_log=log)
    assert _log_lines(temp_workdir / "logs")[0]["error_type"] == "READ_ERROR"


def test_run_metadata_writes_archive_and_summary(temp_workdir, config, fixed_now, metadata_workbook):
    path = metadata_workbook([
        ["9771472645051", "Journal & Review", 120],
        ["", "No ISSN", 10],
        ["9771234567003", "Short", 32],
    ])
    result = run_metadata(path, config, output_dir=temp_workdir / "out", now=fixed_now)

    assert result.archive_path == temp_workdir / "out" / ARCHIVE_NAME
    assert result.summary_path == temp_workdir / "out" / SUMMARY_NAME
    with zipfile.ZipFile(result.archive_path) as zf:
        assert sorted(zf.namelist()) == ["9771234567003.xml", "9771472645051.xml"]
        xml = zf.read("9771472645051.xml").decode("utf-8")
    assert "<title>Journal &amp; Review</title>" in xml
    assert "<spine_size>6</spine_size>" in xml

    summary = result.summary_path.read_text(encoding="utf-8")
    assert "documents=2 skipped=1" in summary
    assert "skipped rows (no ISSN): 3" in summary
    assert result.batch.skipped_count == 1


def test_run_metadata_invalid_identifier_writes_nothing(temp_workdir, config, fixed_now, metadata_workbook):
    path = metadata_workbook([["123-45 6", "Bad", 10]])
    log = ErrorLogBuffer(temp_workdir / "logs")

    with pytest.raises(InvalidIdentifier):
        run_metadata(path, config, output_dir=temp_workdir / "out", now=fixed_now, error_log=log)

    assert not (temp_workdir / "out").exists()
    record = _log_lines(temp_workdir / "logs")[0]
    assert record["error_type"] == "INVALID_IDENTIFIER"
    assert record["row"] == 2


def test_current_time_uses_configured_zone(config):
    now = current_time(config)
    assert str(now.tzinfo) == "Europe/London"
    assert now.microsecond == 0


def test_failed_archive_write_leaves_no_partial_zip(temp_workdir, config, fixed_now, metadata_workbook):
    path = metadata_workbook([["9771472645051", "A", 120], ["9771234567003", "B", 32]])
    out = temp_workdir / "out"
    with patch(
        "edi_generator.services.orchestrator.build_xml",
        side_effect=["<book/>", OSError("disk full")],
    ):
        with pytest.raises(ProcessingError, match="disk full"):
            run_metadata(path, config, output_dir=out, now=fixed_now)

    assert not (out / ARCHIVE_NAME).exists()
    assert list(out.iterdir()) == []
