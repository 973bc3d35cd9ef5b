"""
Simulator settings for resilience-sim.

Supports configuration via:
1. Environment variables (highest priority)
2. TOML config file (resilience-sim.toml)
3. Default values (lowest priority)

Environment variables:
- RESILIENCE_SIM_CONFIG_FILE: Path to TOML config file
- RESILIENCE_SIM_PATTERN: Initial pattern (instant, fast, normal, slow, heavy)
- RESILIENCE_SIM_NETWORK_CONDITION: Network preset (fast, slow, unstable)
- RESILIENCE_SIM_ERROR_RATE: Error rate override in [0, 1]
- RESILIENCE_SIM_ENABLED: Whether delays and failures are simulated (true/false)
- RESILIENCE_SIM_DELAY_MULTIPLIER: Scale applied to every wait (0.1 - 10)
- RESILIENCE_SIM_DEBUG: Log every simulated operation at INFO (true/false)
- RESILIENCE_SIM_DOWNLOAD_ORIGIN: Origin embedded in download locators
- RESILIENCE_SIM_ENVIRONMENT: development selects the fast pattern and debug
- RESILIENCE_SIM_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
- RESILIENCE_SIM_STRUCTURED_LOGGING: JSON-style log lines (true/false)

Invalid values are logged and ignored; the previous value is kept.
"""

import os
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # Python < 3.11 fallback

from resilience_sim.core.errors.base import SimulationConfigError
from resilience_sim.core.simulation.manager import SimulationManager
from resilience_sim.core.simulation.registry import get_pattern, parse_network_condition


logger = logging.getLogger(__name__)

ENV_PREFIX = "RESILIENCE_SIM_"
DEFAULT_CONFIG_FILES = ("resilience-sim.toml", ".resilience-sim.toml")
_TRUE_VALUES = ("true", "1", "yes", "on")


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE_VALUES


@dataclass
class SimulatorSettings:
    """Simulator settings with support for env vars and TOML overrides."""

    # Simulation
    pattern: Optional[str] = None
    network_condition: Optional[str] = None
    error_rate: Optional[float] = None
    enabled: bool = True
    delay_multiplier: float = 1.0
    debug: bool = False
    download_origin: str = "http://localhost"
    environment: str = "production"

    # Logging
    log_level: str = "INFO"
    structured_logging: bool = True

    @classmethod
    def from_env(cls, config_file: Optional[str] = None) -> "SimulatorSettings":
        """
        Create settings from environment variables and optional TOML file.

        Priority (highest to lowest):
        1. Environment variables
        2. TOML config file
        3. Default values
        """
        settings = cls()

        toml_path = config_file or os.environ.get(f"{ENV_PREFIX}CONFIG_FILE")
        if toml_path:
            settings._load_toml(Path(toml_path))
        else:
            for default_path in DEFAULT_CONFIG_FILES:
                if Path(default_path).exists():
                    settings._load_toml(Path(default_path))
                    break

        settings._load_env()
        return settings

    def _load_toml(self, path: Path) -> None:
        """Load settings from a TOML file."""
        if not path.exists():
            logger.warning(f"Config file not found: {path}")
            return

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.error(f"Error loading config file {path}: {e}")
            return

        if "simulation" in data:
            self._apply_values(data["simulation"], source=str(path))

        if "logging" in data:
            log = data["logging"]
            if "level" in log:
                self.log_level = str(log["level"]).upper()
            if "structured" in log:
                self.structured_logging = _parse_bool(log["structured"])

    def _load_env(self) -> None:
        """Load settings from environment variables."""
        values: Dict[str, Any] = {}
        for key in (
            "pattern",
            "network_condition",
            "error_rate",
            "enabled",
            "delay_multiplier",
            "debug",
            "download_origin",
            "environment",
        ):
            if raw := os.environ.get(f"{ENV_PREFIX}{key.upper()}"):
                values[key] = raw
        self._apply_values(values, source="environment")

        if level := os.environ.get(f"{ENV_PREFIX}LOG_LEVEL"):
            self.log_level = level.upper()

        if structured := os.environ.get(f"{ENV_PREFIX}STRUCTURED_LOGGING"):
            self.structured_logging = _parse_bool(structured)

    def _apply_values(self, values: Dict[str, Any], source: str) -> None:
        """Validate and assign ``[simulation]`` values one key at a time."""
        for key, raw in values.items():
            try:
                setattr(self, key, self._coerce(key, raw))
            except (SimulationConfigError, TypeError, ValueError) as e:
                logger.warning(f"Ignoring invalid {key}={raw!r} from {source}: {e}")

    @staticmethod
    def _coerce(key: str, raw: Any) -> Any:
        if key == "pattern":
            return get_pattern(str(raw)).key
        if key == "network_condition":
            return parse_network_condition(str(raw)).value
        if key == "error_rate":
            rate = float(raw)
            if not 0.0 <= rate <= 1.0:
                raise ValueError("must be between 0 and 1")
            return rate
        if key == "delay_multiplier":
            multiplier = float(raw)
            if multiplier <= 0:
                raise ValueError("must be positive")
            return multiplier
        if key in ("enabled", "debug"):
            return _parse_bool(raw)
        if key in ("download_origin", "environment"):
            return str(raw)
        raise ValueError(f"unknown setting '{key}'")

    @property
    def resolved_pattern(self) -> str:
        if self.pattern:
            return self.pattern
        return "fast" if self.environment == "development" else "normal"

    def apply(self, manager: SimulationManager) -> SimulationManager:
        """Push these settings into ``manager``.

        The pattern is applied first so that a network condition and an
        explicit error rate override its bounds. Without an explicit
        pattern, development uses "fast" and other environments "normal".
        """
        manager.set_pattern(self.resolved_pattern)
        if self.network_condition:
            manager.set_network_condition(self.network_condition)
        if self.error_rate is not None:
            manager.set_config(error_rate=self.error_rate)
        manager.enabled = self.enabled
        manager.debug = self.debug or self.environment == "development"
        manager.delay_multiplier = self.delay_multiplier
        manager.download_origin = self.download_origin.rstrip("/")
        return manager

    def setup_logging(self) -> None:
        """Configure logging based on settings."""
        level = getattr(logging, self.log_level, logging.INFO)

        if self.structured_logging:
            # JSON-style structured logging
            formatter = logging.Formatter(
                '{"timestamp":"%(asctime)s","level":"%(levelname)s",'
                '"logger":"%(name)s","message":"%(message)s"}'
            )
        else:
            formatter = logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            )

        handler = logging.StreamHandler()
        handler.setFormatter(formatter)

        package_logger = logging.getLogger("resilience_sim")
        package_logger.setLevel(level)
        # Repeated setup (one per CLI invocation) replaces the handler.
        for existing in list(package_logger.handlers):
            package_logger.removeHandler(existing)
        package_logger.addHandler(handler)


# Global settings instance
_settings: Optional[SimulatorSettings] = None


def get_settings() -> SimulatorSettings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = SimulatorSettings.from_env()
    return _settings


def set_settings(settings: SimulatorSettings) -> None:
    """Set the global settings instance."""
    global _settings
    _settings = settings
