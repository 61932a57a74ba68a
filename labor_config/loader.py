"""
Configuration Loader (``labor_config.loader``).

Responsibility
--------------
Load YAML files, layer them, and parse the result into the frozen
``labor_config.schema`` dataclasses.  Runtime code goes through
``labor_config.get_active_config()`` instead of calling this directly.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown layout, residual policy or log level  -> ``ValueError``.
"""

from __future__ import annotations

import hashlib
import json
import logging
from pathlib import Path
from typing import Any

import yaml

from labor_config.schema import (
    AppConfig,
    DatabaseConfig,
    LoggingConfig,
    ParserConfig,
    ReconciliationConfig,
)
from labor_engines.types import ResidualPolicy

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load one YAML file; an empty file yields an empty dict."""
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Top level of {path} must be a mapping, got {type(data).__name__}")
    return data


def merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursive dict merge; values in ``override`` win."""
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON form of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "1", "yes", "on"):
        return True
    if isinstance(value, str) and value.strip().lower() in ("false", "0", "no", "off", ""):
        return False
    raise ValueError(f"Cannot parse boolean from {value!r}")


def parse_config(data: dict[str, Any]) -> AppConfig:
    """Build an AppConfig from a merged configuration dict."""
    from labor_ingestion.parsing.layout import LAYOUTS

    db = data.get("database") or {}
    if not db.get("url"):
        raise ValueError("database.url is required")

    level = str((data.get("logging") or {}).get("level", "INFO")).upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ValueError(f"Unknown logging.level: {level!r}")

    layout = str((data.get("parser") or {}).get("layout", "certified_payroll"))
    if layout not in LAYOUTS:
        raise ValueError(
            f"Unknown parser.layout: {layout!r} (known: {', '.join(sorted(LAYOUTS))})"
        )

    policy_raw = (data.get("reconciliation") or {}).get("residual_policy", "last")
    try:
        policy = ResidualPolicy(str(policy_raw).lower())
    except ValueError:
        raise ValueError(
            f"Unknown reconciliation.residual_policy: {policy_raw!r} "
            f"(known: {', '.join(p.value for p in ResidualPolicy)})"
        ) from None

    return AppConfig(
        database=DatabaseConfig(url=str(db["url"]), echo=_parse_bool(db.get("echo", False))),
        logging=LoggingConfig(level=level),
        parser=ParserConfig(layout=layout),
        reconciliation=ReconciliationConfig(residual_policy=policy),
        checksum=compute_checksum(data),
    )


def load_config(
    override_path: Path | None = None,
    database_url: str | None = None,
) -> AppConfig:
    """Bundled defaults, then the override file, then the database URL."""
    data = load_yaml_file(DEFAULTS_PATH)
    if override_path is not None:
        data = merge(data, load_yaml_file(override_path))
    if database_url:
        data = merge(data, {"database": {"url": database_url}})
    return parse_config(data)
