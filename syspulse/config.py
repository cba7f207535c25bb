"""
SysPulse Agent - Configuration

Loads the agent configuration from a YAML file, merged over defaults.
"""

import copy
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import structlog
import yaml

from .errors import ConfigError
from .reporter.client import TELEMETRY_PATH, Endpoint

logger = structlog.get_logger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

DEFAULT_CONFIG: Dict[str, Dict[str, Any]] = {
    "agent": {"name": "syspulse-agent", "version": "1.0.0"},
    "collector": {"host": "127.0.0.1", "port": 3000, "path": TELEMETRY_PATH, "timeout": 5},
    "telemetry": {
        "interval_ms": 1000,
        "warmup_ms": 100,
        "stat_path": "/proc/stat",
        "meminfo_path": "/proc/meminfo",
    },
    "logging": {"level": "INFO"},
}


@dataclass(frozen=True)
class AgentConfig:
    """Settings injected into the scheduler and reporter."""
    host: str = "127.0.0.1"
    port: int = 3000
    path: str = TELEMETRY_PATH
    interval: float = 1.0       # seconds
    warmup: float = 0.1         # seconds
    timeout: float = 5.0        # seconds
    stat_path: str = "/proc/stat"
    meminfo_path: str = "/proc/meminfo"
    log_level: str = "INFO"
    name: str = "syspulse-agent"
    version: str = "1.0.0"

    @property
    def endpoint(self) -> Endpoint:
        return Endpoint(host=self.host, port=self.port, path=self.path)

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "AgentConfig":
        """Build from a nested config dict (same layout as config.yaml)."""
        merged = merge_config(DEFAULT_CONFIG, config)

        try:
            agent = merged["agent"]
            collector = merged["collector"]
            telemetry = merged["telemetry"]
            result = cls(
                host=str(collector["host"]),
                port=int(collector["port"]),
                path=str(collector["path"]),
                interval=float(telemetry["interval_ms"]) / 1000.0,
                warmup=float(telemetry["warmup_ms"]) / 1000.0,
                timeout=float(collector["timeout"]),
                stat_path=str(telemetry["stat_path"]),
                meminfo_path=str(telemetry["meminfo_path"]),
                log_level=str(merged["logging"]["level"]).upper(),
                name=str(agent["name"]),
                version=str(agent["version"]),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid configuration value: {e}") from e

        result.validate()
        return result

    def validate(self) -> None:
        if not self.host:
            raise ConfigError("collector.host must not be empty")
        if not 1 <= self.port <= 65535:
            raise ConfigError(f"collector.port out of range: {self.port}")
        if not self.path.startswith("/"):
            raise ConfigError(f"collector.path must start with '/': {self.path}")
        if self.interval <= 0:
            raise ConfigError("telemetry.interval_ms must be positive")
        if self.warmup < 0:
            raise ConfigError("telemetry.warmup_ms must not be negative")
        if self.timeout <= 0:
            raise ConfigError("collector.timeout must be positive")
        if self.log_level not in LOG_LEVELS:
            raise ConfigError(f"logging.level must be one of {', '.join(LOG_LEVELS)}")


def merge_config(base: Dict[str, Any], override: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Merge override sections over base, one level deep."""
    merged = copy.deepcopy(base)
    for section, values in (override or {}).items():
        if values is None:
            continue
        if isinstance(values, dict) and isinstance(merged.get(section), dict):
            merged[section].update(values)
        else:
            merged[section] = values
    return merged


def load_config(config_path: str = "config.yaml") -> Dict[str, Any]:
    """Load configuration from YAML file, falling back to defaults."""
    path = Path(config_path)
    if not path.exists():
        logger.warning("Config file not found, using defaults", path=config_path)
        return copy.deepcopy(DEFAULT_CONFIG)

    try:
        with open(path, "r") as f:
            config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Cannot parse {config_path}: {e}") from e

    if not isinstance(config, dict):
        raise ConfigError(f"{config_path} must contain a mapping")

    logger.info("Configuration loaded", path=config_path)
    return merge_config(DEFAULT_CONFIG, config)
