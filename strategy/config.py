"""
strategy/config.py - Scanner configuration.

Precedence: dataclass defaults < YAML (config/hawk.yaml) < environment.
The environment is read after python-dotenv loads .env.
"""

import os
from dataclasses import dataclass, field, fields
from decimal import Decimal
from pathlib import Path
from typing import Any, Mapping, Optional

from dotenv import load_dotenv

from config import HAWK_DEFAULTS_PATH, load_yaml
from core.constants import (
    BLOCKFROST_URLS,
    DEFAULT_BASE_TRADE_AMOUNT,
    DEFAULT_ERROR_BACKOFF_MS,
    DEFAULT_MAX_BLOCKS_PER_CYCLE,
    DEFAULT_MAX_CONCURRENCY,
    DEFAULT_MAX_RISK_THRESHOLD,
    DEFAULT_MIN_LIQUIDITY_ADA,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    DEFAULT_SCAN_INTERVAL_MS,
    DEFAULT_STATS_INTERVAL_SECONDS,
    ErrorCode,
    PLACEHOLDER_PROJECT_ID,
)
from core.exceptions import ConfigError
from core.math import safe_decimal


# field name -> environment variable
ENV_VARS: dict[str, str] = {
    "blockfrost_project_id": "BLOCKFROST_PROJECT_ID",
    "network": "HAWK_NETWORK",
    "base_trade_amount": "BASE_TRADE_AMOUNT",
    "max_risk_threshold": "MAX_RISK_THRESHOLD",
    "min_liquidity": "MIN_LIQUIDITY_ADA",
    "scan_interval_ms": "SCAN_INTERVAL_MS",
    "error_backoff_ms": "ERROR_BACKOFF_MS",
    "stats_interval_seconds": "STATS_INTERVAL_SECONDS",
    "dry_run": "DRY_RUN",
    "request_timeout_seconds": "REQUEST_TIMEOUT_SECONDS",
    "max_concurrency": "MAX_CONCURRENCY",
    "max_blocks_per_cycle": "MAX_BLOCKS_PER_CYCLE",
    "ledger_path": "LEDGER_PATH",
    "trades_dir": "TRADES_DIR",
}

TRUE_VALUES = ("1", "true", "yes", "on")


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in TRUE_VALUES


@dataclass
class HawkConfig:
    """Full scanner configuration."""

    blockfrost_project_id: str = ""
    network: str = "mainnet"

    # Trading
    base_trade_amount: Decimal = DEFAULT_BASE_TRADE_AMOUNT
    max_risk_threshold: Decimal = DEFAULT_MAX_RISK_THRESHOLD
    min_liquidity: Decimal = DEFAULT_MIN_LIQUIDITY_ADA
    dry_run: bool = True

    # Scanning
    scan_interval_ms: int = DEFAULT_SCAN_INTERVAL_MS
    error_backoff_ms: int = DEFAULT_ERROR_BACKOFF_MS
    stats_interval_seconds: int = DEFAULT_STATS_INTERVAL_SECONDS
    request_timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT_SECONDS
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    max_blocks_per_cycle: int = DEFAULT_MAX_BLOCKS_PER_CYCLE

    # Persistence
    ledger_path: Optional[Path] = None
    trades_dir: Path = field(default_factory=lambda: Path("data/trades"))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "HawkConfig":
        """Build a config from raw (YAML or env) values, coercing types."""
        config = cls()
        config.apply(data)
        return config

    def apply(self, data: Mapping[str, Any]) -> None:
        """Overlay raw values onto this config. Unknown keys are ignored."""
        known = {f.name for f in fields(self)}
        for key, value in data.items():
            if key not in known:
                continue
            setattr(self, key, self._coerce(key, value))

    def _coerce(self, key: str, value: Any) -> Any:
        try:
            if key in ("base_trade_amount", "max_risk_threshold", "min_liquidity"):
                result = safe_decimal(value, default=None)
                if result is None:
                    raise ValueError(value)
                return result
            if key in (
                "scan_interval_ms",
                "error_backoff_ms",
                "stats_interval_seconds",
                "max_concurrency",
                "max_blocks_per_cycle",
            ):
                return int(value)
            if key == "request_timeout_seconds":
                return float(value)
            if key == "dry_run":
                return parse_bool(value)
            if key == "ledger_path":
                return Path(value) if value else None
            if key == "trades_dir":
                return Path(value)
        except (TypeError, ValueError) as e:
            raise ConfigError(
                f"Invalid value for {key}: {value!r}",
                details={"field": key},
            ) from e
        return str(value) if value is not None else ""

    def validate(self) -> None:
        """
        Check the config is usable.

        Raises:
            ConfigError: missing/placeholder project id or out-of-range values
        """
        if not self.blockfrost_project_id or self.blockfrost_project_id == PLACEHOLDER_PROJECT_ID:
            raise ConfigError(
                "BLOCKFROST_PROJECT_ID is not set",
                code=ErrorCode.CONFIG_MISSING,
                details={"field": "blockfrost_project_id"},
            )
        if self.network not in BLOCKFROST_URLS:
            raise ConfigError(
                f"Unknown network: {self.network}",
                details={"field": "network", "known": sorted(BLOCKFROST_URLS)},
            )
        for name in ("scan_interval_ms", "error_backoff_ms", "stats_interval_seconds", "max_concurrency"):
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} must be positive", details={"field": name})
        if self.request_timeout_seconds <= 0:
            raise ConfigError("request_timeout_seconds must be positive", details={"field": "request_timeout_seconds"})
        if self.max_blocks_per_cycle < 0:
            raise ConfigError("max_blocks_per_cycle must not be negative", details={"field": "max_blocks_per_cycle"})
        for name in ("max_risk_threshold", "min_liquidity", "base_trade_amount"):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must not be negative", details={"field": name})

    def to_dict(self) -> dict[str, Any]:
        """Loggable view (project id masked)."""
        masked = f"{self.blockfrost_project_id[:6]}..." if self.blockfrost_project_id else ""
        return {
            "blockfrost_project_id": masked,
            "network": self.network,
            "base_trade_amount": str(self.base_trade_amount),
            "max_risk_threshold": str(self.max_risk_threshold),
            "min_liquidity": str(self.min_liquidity),
            "dry_run": self.dry_run,
            "scan_interval_ms": self.scan_interval_ms,
            "error_backoff_ms": self.error_backoff_ms,
            "stats_interval_seconds": self.stats_interval_seconds,
            "request_timeout_seconds": self.request_timeout_seconds,
            "max_concurrency": self.max_concurrency,
            "max_blocks_per_cycle": self.max_blocks_per_cycle,
            "ledger_path": str(self.ledger_path) if self.ledger_path else None,
            "trades_dir": str(self.trades_dir),
        }


def env_overrides(environ: Mapping[str, str]) -> dict[str, str]:
    """Collect config values present in the environment."""
    values = {
        name: environ[var]
        for name, var in ENV_VARS.items()
        if environ.get(var, "") != ""
    }
    # Legacy switch, only when no explicit network is set
    if "network" not in values and parse_bool(environ.get("TESTNET_MODE", "false")):
        values["network"] = "preprod"
    return values


def load_hawk_config(
    config_path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> HawkConfig:
    """
    Load scanner configuration.

    Args:
        config_path: YAML file (default: config/hawk.yaml, skipped if missing)
        environ: Environment mapping (default: os.environ after loading .env)

    Returns:
        HawkConfig (not validated)
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    if config_path is None:
        config_path = HAWK_DEFAULTS_PATH
    elif not Path(config_path).exists():
        raise ConfigError(
            f"Config file not found: {config_path}",
            code=ErrorCode.CONFIG_MISSING,
            details={"path": str(config_path)},
        )

    config = HawkConfig()

    if Path(config_path).exists():
        config.apply(load_yaml(config_path))

    config.apply(env_overrides(environ))
    return config
