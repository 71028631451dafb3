# Shared pytest fixtures
from __future__ import annotations

import tempfile
from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

import pandas as pd
import pytest

from edi_generator.logging.init import reset_logging
from edi_generator.models.config_models import GenerationConfig
from edi_generator.services.field_mapping import (
    METADATA_TEMPLATE_COLUMNS,
    ORDER_FIELDS,
    ORDER_TEMPLATE_COLUMNS,
)

ORDER_KEYS = [f.key for f in ORDER_FIELDS]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in (
        "EDI_SENDER_CODE", "EDI_CURRENCY", "EDI_PAYMENT_TERMS", "EDI_DEFAULT_QUANTITY",
        "EDI_BATCH_ID", "EDI_FILE_PREFIX", "EDI_OUTPUT_DIRECTORY",
    ):
        monkeypatch.delenv(var, raising=False)
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """sender_code: BLOO
currency: GBP
payment_terms: DAP
default_quantity: 1
batch_id: "0027816"
file_prefix: T1
output_directory: ./output
timezone: Europe/London
carrier_code: RMA
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "generate.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def config() -> GenerationConfig:
    return GenerationConfig(
        sender_code="BLOO",
        currency="GBP",
        payment_terms="DAP",
        default_quantity=1,
        batch_id="0027816",
        file_prefix="T1",
        output_directory="./output",
        timezone="Europe/London",
        carrier_code="RMA",
    )


@pytest.fixture()
def fixed_now() -> datetime:
    return datetime(2026, 2, 24, 14, 23, 5, tzinfo=ZoneInfo("Europe/London"))


def order_row(**values: str) -> list[str]:
    """One order sheet row in template column order; unspecified cells blank."""
    return [values.get(k, "") for k in ORDER_KEYS]


def make_excel(path: Path, rows: list[list[object]]) -> Path:
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame(rows).to_excel(writer, sheet_name="Sheet1", header=False, index=False)
    return path


@pytest.fixture()
def order_workbook(temp_workdir: Path):
    """Build an order sheet from ``{field key: text}`` dicts."""
    def _build(rows: list[dict[str, str]], headers=None, name: str = "orders.xlsx") -> Path:
        header = list(headers) if headers is not None else list(ORDER_TEMPLATE_COLUMNS)
        body = [order_row(**r) for r in rows]
        return make_excel(temp_workdir / "data" / name, [header, *body])
    return _build


@pytest.fixture()
def metadata_workbook(temp_workdir: Path):
    def _build(rows: list[list[object]], headers=None, name: str = "metadata.xlsx") -> Path:
        header = list(headers) if headers is not None else list(METADATA_TEMPLATE_COLUMNS)
        return make_excel(temp_workdir / "data" / name, [header, *rows])
    return _build
