"""Load suite configuration from YAML files."""

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from songlist.quality_suite.models.suite_config import SuiteConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = Path("quality-suite.yaml")


class ConfigError(ValueError):
    """Raised when the suite configuration cannot be loaded."""


def load_suite_config(config_path: Path | None = None) -> SuiteConfig:
    """Load the suite configuration.

    Args:
        config_path: Path to a YAML configuration file. When omitted,
            ``quality-suite.yaml`` in the working directory is used if present,
            otherwise defaults apply.

    Returns:
        Parsed configuration with environment overrides applied

    Raises:
        ConfigError: If an explicit file is missing, the YAML is invalid or
            doesn't match the schema

    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_FILE
        if not config_path.exists():
            logger.info("No configuration file found, using defaults")
            return _apply_environment(SuiteConfig())
    elif not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with config_path.open() as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration in {config_path} must be a mapping")

    try:
        config = SuiteConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration schema in {config_path}: {e}") from e

    logger.info(f"Loaded configuration from {config_path}")
    return _apply_environment(config)


def _apply_environment(config: SuiteConfig) -> SuiteConfig:
    """Apply environment variable overrides."""
    if base_url := os.environ.get("BASE_URL"):
        return config.model_copy(update={"base_url": base_url})
    return config
