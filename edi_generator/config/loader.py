from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import GenerationConfig

"""Config loader.

Responsibilities:
- Load YAML config (default config/generate.yml)
- Apply EDI_* environment overrides (populated from .env by the CLI)
- Validate against the packaged JSON schema
- Apply defaults (default_quantity=1, timezone=UTC, file_prefix=T1 ...)
"""

SCHEMA_PATH = Path(__file__).with_name("schema.json")
DEFAULT_CONFIG_PATH = Path("config/generate.yml")

# Environment variable -> config key. Integers are coerced after lookup.
ENV_OVERRIDES = {
    "EDI_SENDER_CODE": "sender_code",
    "EDI_CURRENCY": "currency",
    "EDI_PAYMENT_TERMS": "payment_terms",
    "EDI_DEFAULT_QUANTITY": "default_quantity",
    "EDI_BATCH_ID": "batch_id",
    "EDI_FILE_PREFIX": "file_prefix",
    "EDI_OUTPUT_DIRECTORY": "output_directory",
}
_INT_KEYS = {"default_quantity"}


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing/invalid, or data fails validation
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def apply_env_overrides(data: dict[str, Any], environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Return a copy of ``data`` with EDI_* environment values applied."""
    env = os.environ if environ is None else environ
    merged = dict(data)
    for var, key in ENV_OVERRIDES.items():
        value = env.get(var)
        if value is None or value.strip() == "":
            continue
        value = value.strip()
        if key in _INT_KEYS:
            try:
                merged[key] = int(value)
            except ValueError as e:
                raise ConfigError(f"{var} must be an integer, got {value!r}") from e
        else:
            merged[key] = value
    return merged


def load_config(path: Path, environ: Mapping[str, str] | None = None) -> GenerationConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config validation failed: top level must be a mapping")

    data = apply_env_overrides(data, environ)
    _validate_config_schema(data)

    tz = data.get("timezone", "UTC")
    try:
        ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigError(f"unknown timezone: {tz}") from e

    return GenerationConfig(
        sender_code=data["sender_code"],
        currency=data["currency"],
        payment_terms=data["payment_terms"],
        default_quantity=data.get("default_quantity", 1),
        batch_id=str(data["batch_id"]),
        file_prefix=data.get("file_prefix", "T1"),
        output_directory=data.get("output_directory", "./output"),
        timezone=tz,
        carrier_code=data.get("carrier_code", "RMA"),
    )
