"""
================================================================================
Configuration Loader
================================================================================

YAML-based framework configuration with environment variable override support.

Features:
    - Built-in defaults merged with a YAML configuration file
    - Environment variable override (SELF_HEALING_MAX_ATTEMPTS overrides
      self_healing.max_attempts)
    - Dot notation path access
    - Typed, immutable FrameworkConfig built once per composition root

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet, Optional

import yaml
from loguru import logger

from .strategy_generator import StrategyType


# Default configuration file path (repository root /config)
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent.parent / "config" / "config.yaml"

AI_PROVIDERS = ("openai", "gemini", "custom")

# Provider-specific key variables, checked when ai.api_key is not set
PROVIDER_KEY_ENV = {
    "openai": "OPENAI_API_KEY",
    "gemini": "GEMINI_API_KEY",
    "custom": "AI_API_KEY",
}

DEFAULTS: Dict[str, Any] = {
    "ai": {
        "enabled": True,
        "provider": "gemini",
        "api_key": None,
        "model": "gemini-2.5-flash-lite",
        "base_url": None,
        "max_retries": 3,
        "timeout": 30.0,
    },
    "self_healing": {
        "enabled": True,
        "strategies": ["text", "role", "testId", "xpath", "css"],
        "max_attempts": 5,
        "save_healed_locators": True,
        "ai_suggestion_limit": 3,
    },
    "reporting": {
        "ai_analysis": True,
        "generate_insights": True,
        "output_path": "./test-results",
        "results_dir": "reports/allure-results",
    },
    "timeouts": {
        "default": 60000,
        "navigation": 60000,
        "action": 10000,
        "locate": 5000,
        "heal": 3000,
    },
    "logging": {
        "level": "INFO",
        "file": None,
        "rotation": "10 MB",
        "retention": "7 days",
    },
}


class ConfigurationError(Exception):
    """Raised when configuration loading or validation fails."""
    pass


# =============================================================================
# Typed configuration
# =============================================================================

@dataclass(frozen=True)
class AiConfig:
    enabled: bool = True
    provider: str = "gemini"
    api_key: Optional[str] = field(default=None, repr=False)
    model: str = "gemini-2.5-flash-lite"
    base_url: Optional[str] = None
    max_retries: int = 3
    timeout: float = 30.0


@dataclass(frozen=True)
class SelfHealingConfig:
    enabled: bool = True
    strategies: FrozenSet[StrategyType] = frozenset(
        {
            StrategyType.TEXT,
            StrategyType.ROLE,
            StrategyType.TEST_ID,
            StrategyType.XPATH,
            StrategyType.CSS,
        }
    )
    max_attempts: int = 5
    save_healed_locators: bool = True
    ai_suggestion_limit: int = 3


@dataclass(frozen=True)
class ReportingConfig:
    ai_analysis: bool = True
    generate_insights: bool = True
    output_path: str = "./test-results"
    results_dir: str = "reports/allure-results"


@dataclass(frozen=True)
class TimeoutConfig:
    """Timeouts in milliseconds."""
    default: int = 60000
    navigation: int = 60000
    action: int = 10000
    locate: int = 5000
    heal: int = 3000


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"
    file: Optional[str] = None
    rotation: str = "10 MB"
    retention: str = "7 days"


@dataclass(frozen=True)
class FrameworkConfig:
    """
    Complete framework configuration.

    Built once (see ConfigLoader.build) and passed by reference to the
    components that need it. Later edits to the YAML file are not picked up
    by objects that already hold a FrameworkConfig.
    """
    ai: AiConfig = field(default_factory=AiConfig)
    self_healing: SelfHealingConfig = field(default_factory=SelfHealingConfig)
    reporting: ReportingConfig = field(default_factory=ReportingConfig)
    timeouts: TimeoutConfig = field(default_factory=TimeoutConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


# =============================================================================
# Loader
# =============================================================================

class ConfigLoader:
    """
    Configuration loader with YAML and environment variable support.

    Configuration hierarchy (highest to lowest priority):
        1. Environment variables (SELF_HEALING_ENABLED)
        2. YAML configuration file
        3. Built-in defaults

    Usage:
        >>> loader = ConfigLoader()
        >>> loader.get("self_healing.max_attempts")
        5
        >>> config = loader.build()
        >>> config.timeouts.heal
        3000

    Environment Variable Mapping:
        - self_healing.enabled -> SELF_HEALING_ENABLED
        - reporting.output_path -> REPORTING_OUTPUT_PATH
        - ai.api_key -> AI_API_KEY (or GEMINI_API_KEY / OPENAI_API_KEY)
    """

    def __init__(self, config_path: Optional[Path] = None) -> None:
        """
        Initialize configuration loader.

        Args:
            config_path: Path to YAML configuration file.
                        Uses DEFAULT_CONFIG_PATH if not specified.
        """
        env_path = os.environ.get("AGENTIC_CONFIG")
        self._config_path = Path(config_path or env_path or DEFAULT_CONFIG_PATH)
        self._config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from YAML file on top of the defaults."""
        if not self._config_path.exists():
            logger.warning(
                f"Configuration file not found: {self._config_path}. "
                f"Using defaults and environment variables only."
            )
            self._config = _deep_merge(DEFAULTS, {})
            return

        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                file_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in configuration file: {e}"
            ) from e

        if not isinstance(file_config, dict):
            raise ConfigurationError(
                f"Configuration root must be a mapping: {self._config_path}"
            )

        self._config = _deep_merge(DEFAULTS, file_config)
        logger.debug(f"Loaded configuration from: {self._config_path}")

    @property
    def config_path(self) -> Path:
        return self._config_path

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-notation path.

        First checks environment variables, then YAML config, then default.

        Args:
            key: Dot-notation path (e.g., "self_healing.max_attempts")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        value = self._config
        for part in key.split("."):
            if isinstance(value, dict):
                value = value.get(part)
            else:
                value = None

            if value is None:
                break

        if value is None:
            value = default

        env_key = key.upper().replace(".", "_")
        env_value = os.environ.get(env_key)
        if env_value is not None:
            return self._convert_type(env_value, value)

        return value

    def get_section(self, section: str) -> Dict[str, Any]:
        """
        Get entire configuration section.

        Args:
            section: Section name (e.g., "ai", "self_healing")

        Returns:
            Section dictionary or empty dict if not found
        """
        return dict(self._config.get(section, {}))

    def reload(self) -> None:
        """
        Reload configuration from file.

        Objects built from a previous build() keep their values.
        """
        self._load_config()
        logger.info(f"Configuration reloaded from: {self._config_path}")

    def build(self) -> FrameworkConfig:
        """
        Build the typed, validated FrameworkConfig.

        Raises:
            ConfigurationError: When a value is out of range or unknown
        """
        provider = str(self.get("ai.provider", "gemini")).lower()
        if provider not in AI_PROVIDERS:
            raise ConfigurationError(
                f"Unknown AI provider '{provider}'. Expected one of {AI_PROVIDERS}"
            )

        api_key = self.get("ai.api_key") or os.environ.get(PROVIDER_KEY_ENV[provider])

        ai = AiConfig(
            enabled=self._as_bool("ai.enabled"),
            provider=provider,
            api_key=api_key or None,
            model=str(self.get("ai.model")),
            base_url=self.get("ai.base_url"),
            max_retries=self._as_int("ai.max_retries", minimum=0),
            timeout=float(self.get("ai.timeout")),
        )

        self_healing = SelfHealingConfig(
            enabled=self._as_bool("self_healing.enabled"),
            strategies=self._parse_strategies(self.get("self_healing.strategies")),
            max_attempts=self._as_int("self_healing.max_attempts", minimum=0),
            save_healed_locators=self._as_bool("self_healing.save_healed_locators"),
            ai_suggestion_limit=self._as_int("self_healing.ai_suggestion_limit", minimum=0),
        )

        reporting = ReportingConfig(
            ai_analysis=self._as_bool("reporting.ai_analysis"),
            generate_insights=self._as_bool("reporting.generate_insights"),
            output_path=str(self.get("reporting.output_path")),
            results_dir=str(self.get("reporting.results_dir")),
        )

        timeouts = TimeoutConfig(
            **{
                name: self._as_int(f"timeouts.{name}", minimum=0)
                for name in ("default", "navigation", "action", "locate", "heal")
            }
        )

        logging_config = LoggingConfig(
            level=str(self.get("logging.level")).upper(),
            file=self.get("logging.file"),
            rotation=str(self.get("logging.rotation")),
            retention=str(self.get("logging.retention")),
        )

        return FrameworkConfig(
            ai=ai,
            self_healing=self_healing,
            reporting=reporting,
            timeouts=timeouts,
            logging=logging_config,
        )

    def _as_bool(self, key: str) -> bool:
        value = self.get(key)
        if isinstance(value, str):
            return value.lower() in ("true", "1", "yes", "on")
        return bool(value)

    def _as_int(self, key: str, minimum: Optional[int] = None) -> int:
        value = self.get(key)
        try:
            number = int(value)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"{key} must be an integer, got {value!r}") from e
        if minimum is not None and number < minimum:
            raise ConfigurationError(f"{key} must be >= {minimum}, got {number}")
        return number

    def _parse_strategies(self, value: Any) -> FrozenSet[StrategyType]:
        if isinstance(value, str):
            value = [part.strip() for part in value.split(",") if part.strip()]
        try:
            return frozenset(StrategyType.parse(item) for item in value or [])
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

    def _convert_type(self, value: str, reference: Any) -> Any:
        """
        Convert string value to match reference type.

        Used for environment variables which are always strings.
        """
        if reference is None:
            return value

        if isinstance(reference, bool):
            return value.lower() in ("true", "1", "yes", "on")
        if isinstance(reference, int):
            try:
                return int(value)
            except ValueError:
                return value
        if isinstance(reference, float):
            try:
                return float(value)
            except ValueError:
                return value
        if isinstance(reference, list):
            return [part.strip() for part in value.split(",") if part.strip()]

        return value


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Deep merges two dictionaries, with override taking precedence.
    """
    result = {}
    for key, value in base.items():
        result[key] = _deep_merge(value, {}) if isinstance(value, dict) else value
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(config_path: Optional[Path] = None) -> FrameworkConfig:
    """Load and validate configuration in one call."""
    return ConfigLoader(config_path).build()


__all__ = [
    "AiConfig",
    "ConfigLoader",
    "ConfigurationError",
    "FrameworkConfig",
    "LoggingConfig",
    "ReportingConfig",
    "SelfHealingConfig",
    "TimeoutConfig",
    "load_config",
]
