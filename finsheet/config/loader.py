from __future__ import annotations

import json
from pathlib import Path
from types import MappingProxyType
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import (
    DEFAULT_CATEGORY,
    DEFAULT_CURRENCY_SYMBOLS,
    DEFAULT_FIELD_TOKENS,
    DEFAULT_SHEET_KEYWORDS,
    AppConfig,
    FieldTokens,
    NormalizerConfig,
)
from ..models.sheet_process import SheetRole

"""Config loader.

Responsibilities:
- Load YAML (config/ingest.yml by default)
- Validate against the bundled JSON schema (config_schema.json)
- Apply defaults for every missing key
- Merge token overrides over the default token tables, field by field
"""

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/ingest.yml")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: If the schema file is missing or invalid, or the config data
            fails validation (wrong types, unknown keys, empty token lists).
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


def _merge_tokens(overrides: dict[str, dict[str, list[str]]]) -> dict[SheetRole, FieldTokens]:
    merged: dict[SheetRole, FieldTokens] = {}
    for role, table in DEFAULT_FIELD_TOKENS.items():
        role_overrides = overrides.get(role.value, {})
        # Field order stays the default resolution order
        merged[role] = MappingProxyType({
            name: tuple(role_overrides.get(name, tokens)) for name, tokens in table.items()
        })
    return merged


def _merge_keywords(overrides: dict[str, list[str]]) -> dict[SheetRole, tuple[str, ...]]:
    return {
        role: tuple(overrides.get(role.value, words)) for role, words in DEFAULT_SHEET_KEYWORDS.items()
    }


def build_config(data: dict[str, Any]) -> AppConfig:
    """Validate a raw mapping and turn it into an AppConfig."""
    _validate_config_schema(data)
    normalizer = NormalizerConfig(
        field_tokens=MappingProxyType(_merge_tokens(data.get("field_tokens", {}))),
        sheet_keywords=MappingProxyType(_merge_keywords(data.get("sheet_keywords", {}))),
        default_category=data.get("default_category", DEFAULT_CATEGORY),
        currency_symbols=data.get("currency_symbols", DEFAULT_CURRENCY_SYMBOLS),
        date1904=data.get("date1904", False),
        null_sentinels=frozenset(s.strip().upper() for s in data.get("null_sentinels", [])),
        exclusive_header_binding=data.get("exclusive_header_binding", False),
        strict_schedule_dates=data.get("strict_schedule_dates", False),
        infer_role_from_headers=data.get("infer_role_from_headers", False),
    )
    return AppConfig(
        source_directory=data.get("source_directory", "./data"),
        log_directory=data.get("log_directory", "./logs"),
        normalizer=normalizer,
    )


def load_config(path: Path, required: bool = True) -> AppConfig:
    """Load configuration from YAML.

    A missing file is a ConfigError when ``required``; otherwise the built-in
    defaults are returned.
    """
    if not path.exists():
        if required:
            raise ConfigError(f"config file not found: {path}")
        return AppConfig()
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping: {path}")
    return build_config(data)
