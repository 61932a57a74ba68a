"""
Configuration schema (``labor_config.schema``).

Frozen dataclasses describing the tracker's runtime configuration.  Built
only by ``labor_config.loader.parse_config``.
"""

from __future__ import annotations

from dataclasses import dataclass

from labor_engines.types import ResidualPolicy


@dataclass(frozen=True)
class DatabaseConfig:
    url: str
    echo: bool = False


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"


@dataclass(frozen=True)
class ParserConfig:
    layout: str = "certified_payroll"


@dataclass(frozen=True)
class ReconciliationConfig:
    residual_policy: ResidualPolicy = ResidualPolicy.LAST


@dataclass(frozen=True)
class AppConfig:
    """Complete runtime configuration with its source checksum."""

    database: DatabaseConfig
    logging: LoggingConfig
    parser: ParserConfig
    reconciliation: ReconciliationConfig
    checksum: str = ""
