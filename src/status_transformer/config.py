"""Configuration management for status-transformer.

Configuration Discovery Precedence (Highest to Lowest Priority):
===============================================================

1. **STATUS_TRANSFORMER_CONFIG_DIR Environment Variable** (Highest Priority)
   - Looks for: `${STATUS_TRANSFORMER_CONFIG_DIR}/status-transformer.yaml`
   - Use case: Development, testing, custom deployments

2. **~/.status-transformer Directory** (Fallback)
   - Looks for: `~/.status-transformer/status-transformer.yaml`
   - Use case: Default user installations

If no `status-transformer.yaml` is found, defaults are applied. Individual
settings can always be overridden with `STATUS_TRANSFORMER_*` environment
variables, e.g. `STATUS_TRANSFORMER_DEBUG=true`.

Example status-transformer.yaml:
--------
status_transformer:
  debug: false
  log_level: INFO
  response_ttl_seconds: 60
"""

import logging
import os
import threading
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from status_transformer.errors import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "status-transformer.yaml"
CONFIG_DIR_ENV = "STATUS_TRANSFORMER_CONFIG_DIR"


class StatusTransformerConfig(BaseSettings):
    """Runtime settings for status-transformer."""

    model_config = SettingsConfigDict(
        env_prefix="STATUS_TRANSFORMER_",
        case_sensitive=False,
        extra="ignore",
    )

    debug: bool = False
    """Enable debug logging for all status_transformer loggers"""

    log_level: str = "INFO"
    """Log level used when debug is off"""

    response_ttl_seconds: int = Field(default=60, ge=0)
    """How long the caller may cache a response"""

    config_path: Path | None = None
    """Path of the loaded status-transformer.yaml, if any"""

    @property
    def effective_log_level(self) -> int:
        """Numeric log level, DEBUG when debug is enabled."""
        if self.debug:
            return logging.DEBUG
        level = logging.getLevelName(self.log_level.upper())
        return level if isinstance(level, int) else logging.INFO

    def configure_logging(self) -> None:
        """Apply the configured level to the status_transformer loggers."""
        package_logger = logging.getLogger("status_transformer")
        package_logger.setLevel(self.effective_log_level)
        # Ensure messages appear even when the host has not configured logging
        if self.debug and not package_logger.handlers and not logging.getLogger().handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter("%(name)s:%(levelname)s: %(message)s"))
            package_logger.addHandler(handler)

    @classmethod
    def from_yaml(cls, yaml_path: Path, **kwargs: Any) -> "StatusTransformerConfig":
        """Load configuration from a status-transformer.yaml file.

        Settings live under a top-level ``status_transformer`` key. Keyword
        arguments take precedence over file values, which take precedence
        over environment variables.

        Args:
            yaml_path: Path to the YAML file
            **kwargs: Explicit setting overrides

        Returns:
            StatusTransformerConfig instance

        Raises:
            ConfigurationError: If the file cannot be parsed or holds invalid values
        """
        file_settings: dict[str, Any] = {}

        if yaml_path.exists():
            try:
                with yaml_path.open() as f:
                    data = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                raise ConfigurationError(f"cannot read {yaml_path}: {e}") from e

            section = data.get("status_transformer", {}) if isinstance(data, dict) else {}
            if isinstance(section, dict):
                file_settings = section
            else:
                logger.warning(f"Invalid status_transformer section in {yaml_path}: {type(section)}")

        try:
            return cls(**{**file_settings, **kwargs, "config_path": yaml_path})
        except ValidationError as e:
            raise ConfigurationError(f"invalid settings in {yaml_path}: {e}") from e


# Global configuration instance
_config_instance: StatusTransformerConfig | None = None
_config_lock = threading.Lock()


def get_config() -> StatusTransformerConfig:
    """Get the configuration instance."""
    global _config_instance

    if _config_instance is None:
        with _config_lock:
            # Double-check locking pattern
            if _config_instance is None:
                _config_instance = _discover_config()

    return _config_instance


def _discover_config() -> StatusTransformerConfig:
    # Priority 1: Environment variable
    env_config_dir = os.environ.get(CONFIG_DIR_ENV)
    if env_config_dir:
        config_path = Path(env_config_dir) / CONFIG_FILE_NAME
        if config_path.exists():
            logger.info(f"Loading config from: {config_path} (source: ENV:{CONFIG_DIR_ENV})")
            return StatusTransformerConfig.from_yaml(config_path)
        logger.info(f"{CONFIG_FILE_NAME} not found at {config_path}, using default config")
        return StatusTransformerConfig()

    # Priority 2: Fallback to ~/.status-transformer directory
    fallback_path = Path.home() / ".status-transformer" / CONFIG_FILE_NAME
    if fallback_path.exists():
        logger.info(f"Using fallback config: {fallback_path}")
        return StatusTransformerConfig.from_yaml(fallback_path)

    logger.debug(f"No {CONFIG_FILE_NAME} found, using defaults")
    return StatusTransformerConfig()


def set_config_instance(config: StatusTransformerConfig) -> None:
    """Set the global configuration instance (for testing)."""
    global _config_instance
    _config_instance = config


def clear_config_instance() -> None:
    """Clear the global configuration instance (for testing)."""
    global _config_instance
    _config_instance = None
