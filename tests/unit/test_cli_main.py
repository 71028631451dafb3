from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from edi_generator.cli import main as cli_main
from edi_generator.cli.__main__ import _parse_map


def test_parse_map():
    assert _parse_map(None) == {}
    assert _parse_map(["quantity=6", " email = -1"]) == {"quantity": 6, "email": -1}
    with pytest.raises(ValueError, match="key=COLUMN"):
        _parse_map(["quantity"])
    with pytest.raises(ValueError, match="must be an integer"):
        _parse_map(["quantity=six"])


def test_command_is_required(temp_workdir: Path):
    with pytest.raises(SystemExit) as exc:
        cli_main([])
    assert exc.value.code == 2


def test_bad_batch_id_is_fatal(write_config, order_workbook, capsys):
    path = order_workbook([{"subscriptionNum": "A"}])
    code = cli_main(["orders", str(path), "--batch-id", "12345678"])

    assert code == 1
    assert "ERROR config: --batch-id must be 1-7 digits" in capsys.readouterr().out


def test_bad_map_is_fatal(write_config, order_workbook, capsys):
    path = order_workbook([{"subscriptionNum": "A"}])
    code = cli_main(["orders", str(path), "--map", "quantity=99"])

    assert code == 1
    assert "ERROR mapping:" in capsys.readouterr().out


def test_batch_id_flag_wins(write_config, order_workbook, temp_workdir: Path, capsys):
    path = order_workbook([{"subscriptionNum": "A"}])
    code = cli_main(["orders", str(path), "--batch-id", "42"])

    assert code == 0
    files = list((temp_workdir / "output").glob("T1.42_*.txt"))
    assert len(files) == 1
    assert files[0].read_text(encoding="ascii").startswith("$$HDRBLOO  0000042")


def test_dotenv_overrides_yaml(write_config, order_workbook, temp_workdir: Path, monkeypatch):
    # registered so monkeypatch restores it after load_dotenv writes os.environ
    monkeypatch.setenv("EDI_BATCH_ID", "1")
    (temp_workdir / ".env").write_text("EDI_BATCH_ID=777\n", encoding="utf-8")
    path = order_workbook([{"subscriptionNum": "A"}])

    assert cli_main(["orders", str(path)]) == 0
    assert len(list((temp_workdir / "output").glob("T1.777_*.txt"))) == 1


def test_output_dir_flag(write_config, order_workbook, temp_workdir: Path):
    path = order_workbook([{"subscriptionNum": "A"}])
    code = cli_main(["--output-dir", str(temp_workdir / "elsewhere"), "orders", str(path)])

    assert code == 0
    assert len(list((temp_workdir / "elsewhere").glob("*.txt"))) == 1
    assert not (temp_workdir / "output").exists()


def test_inspect_data(temp_workdir: Path, order_workbook, capsys):
    path = order_workbook([{"subscriptionNum": "A", "isbn": "9771472645051"}])
    code = cli_main(["--inspect-data", "orders", str(path)])
    out = capsys.readouterr().out

    assert code == 0
    assert "FILE: orders.xlsx rows=1" in out
    assert "Order Ref" in out
    assert "row 2:" in out
    assert not (temp_workdir / "output").exists()


def test_inspect_data_unreadable(temp_workdir: Path, capsys):
    code = cli_main(["--inspect-data", "metadata", str(temp_workdir / "missing.xlsx")])
    assert code == 1
    assert "inspect: file not found" in capsys.readouterr().out


def test_debug_flag(write_config, order_workbook, capsys):
    path = order_workbook([{"subscriptionNum": "A"}])
    code = cli_main(["--debug", "orders", str(path)])

    assert code == 0
    assert "DEBUG debug mode enabled" in capsys.readouterr().out


def test_inspect_data_marks_unmapped_fields(temp_workdir: Path, metadata_workbook, capsys):
    path = metadata_workbook([["9771472645051", "A"]], headers=["ISSN", "Title"])
    assert cli_main(["--inspect-data", "metadata", str(path)]) == 0

    out = capsys.readouterr().out
    assert "0: 'ISSN'" in out
    assert "Page Extent" in out and "-> (none)" in out


def test_unrelated_value_error_is_not_a_mapping_error(write_config, order_workbook, capsys):
    path = order_workbook([{"subscriptionNum": "A"}])
    with patch("edi_generator.cli.__main__.run_orders", side_effect=ValueError("boom")):
        with pytest.raises(ValueError, match="boom"):
            cli_main(["orders", str(path)])
    assert "ERROR mapping:" not in capsys.readouterr().out
