"""
labor_config -- single public entrypoint for runtime configuration.

Responsibility:
    ``get_active_config()`` is the only place that reads configuration
    files or environment variables.  Everything else receives an
    ``AppConfig`` (or a piece of one) as an argument.

Environment:
    LABOR_TRACKER_CONFIG  path to a YAML file layered over the bundled
                          defaults.
    DATABASE_URL          overrides ``database.url``.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from labor_config.loader import load_config
from labor_config.schema import (
    AppConfig,
    DatabaseConfig,
    LoggingConfig,
    ParserConfig,
    ReconciliationConfig,
)
from labor_kernel.logging_config import get_logger

_logger = get_logger("config")

CONFIG_PATH_ENV = "LABOR_TRACKER_CONFIG"
DATABASE_URL_ENV = "DATABASE_URL"


def get_active_config(
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> AppConfig:
    """
    Resolve the active configuration.

    Args:
        config_path: Explicit override file.  Takes precedence over
            LABOR_TRACKER_CONFIG.
        environ: Environment mapping; defaults to ``os.environ``.

    Raises:
        FileNotFoundError: if the override file does not exist.
        ValueError: if any value is invalid.
    """
    env = os.environ if environ is None else environ
    path = config_path
    if path is None and env.get(CONFIG_PATH_ENV):
        path = Path(env[CONFIG_PATH_ENV])

    config = load_config(override_path=path, database_url=env.get(DATABASE_URL_ENV))

    _logger.info(
        "LABOR_CONFIG_TRACE",
        extra={
            "trace_type": "LABOR_CONFIG_TRACE",
            "checksum": config.checksum,
            "override_path": str(path) if path else None,
            "layout": config.parser.layout,
            "residual_policy": config.reconciliation.residual_policy.value,
        },
    )
    return config


__all__ = [
    "AppConfig",
    "DatabaseConfig",
    "LoggingConfig",
    "ParserConfig",
    "ReconciliationConfig",
    "get_active_config",
]
