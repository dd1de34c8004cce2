from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import ManifestConfig

"""Config loader.

Responsibilities:
- Load YAML config (default config/manifest.yml)
- Validate against config_schema.json (shipped next to this module)
- Apply defaults (timezone=UTC, empty query)

Relative paths in the config (csvfile, inventory, output) are used as-is,
i.e. relative to the working directory the CLI runs in.
"""

SCHEMA_PATH = Path(__file__).parent / "config_schema.json"
DEFAULT_CONFIG_PATH = Path("config/manifest.yml")
CONFIG_ENV_VAR = "VM_MANIFEST_CONFIG"


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against JSON schema.

    Raises:
        ConfigError: schema file missing/invalid or the data fails validation
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


def resolve_config_path(cli_value: str | None = None) -> Path:
    """--config wins over $VM_MANIFEST_CONFIG, which wins over the default."""
    if cli_value:
        return Path(cli_value)
    env_value = os.getenv(CONFIG_ENV_VAR)
    if env_value:
        return Path(env_value)
    return DEFAULT_CONFIG_PATH


def load_config(path: Path) -> ManifestConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config validation failed: top level must be a mapping")

    _validate_config_schema(data)

    tz = data.get("timezone", "UTC")
    try:
        ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigError(f"unknown timezone: {tz}") from e

    # YAML では数値がそのまま int になるので文字列に揃える
    query = {str(k): str(v) for k, v in (data.get("query") or {}).items()}
    default_disks = {str(k): str(v) for k, v in data["default_disks"].items()}
    return ManifestConfig(
        csvfile=data["csvfile"],
        datacenter_id=data["datacenter_id"],
        datastore_cluster=data["datastore_cluster"],
        default_disks=default_disks,
        inventory=data["inventory"],
        query=query,
        timezone=tz,
        output=data.get("output"),
    )
