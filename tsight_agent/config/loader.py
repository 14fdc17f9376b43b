"""Loading of the agent configuration file.

The agent configuration (server credentials, data sources and SQL filters) is
a YAML file looked up in this order: an explicit path, the
``TSIGHT_CONFIG_PATH`` environment variable, the platform default location,
and finally ``config.yaml`` in the working directory.
"""

import os
import sys
from pathlib import Path
from typing import Optional, Union
import yaml
from pydantic import ValidationError

from ..utils import ConfigurationError, setup_logger
from .models import AgentConfig

logger = setup_logger(__name__)

APP_DIR_NAME = "tsight_agent"
CONFIG_FILE_NAME = "config.yaml"


def get_default_config_path() -> Path:
    """Get the platform-specific default config path."""
    home = Path(os.getenv("HOME") or Path.home())
    if sys.platform.startswith("linux"):
        return home / ".config" / APP_DIR_NAME / CONFIG_FILE_NAME
    if sys.platform == "darwin":
        return home / "Library" / "Application Support" / APP_DIR_NAME / CONFIG_FILE_NAME
    return Path(CONFIG_FILE_NAME)


def ensure_config_dir_exists() -> None:
    """Create the directory of the default config path if it is missing."""
    config_dir = get_default_config_path().parent
    if not config_dir.exists():
        logger.info(f"Creating configuration directory: {config_dir}")
        config_dir.mkdir(parents=True, exist_ok=True)


def load_config_from_path(path: Union[str, Path]) -> AgentConfig:
    """Load and validate configuration from a specific path.

    Args:
        path: Path to a YAML configuration file

    Returns:
        Validated AgentConfig

    Raises:
        ConfigurationError: If the file is missing, unreadable or invalid
    """
    path = Path(path)
    logger.info(f"Loading configuration from {path}...")

    if not path.exists():
        raise ConfigurationError(f"Failed to load config file at '{path}': file not found")

    try:
        with open(path, 'r') as f:
            raw = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to load config file at '{path}': {e}") from e

    if not isinstance(raw, dict):
        raise ConfigurationError(
            f"Failed to parse config file at '{path}': expected a mapping at the top level"
        )

    try:
        config = AgentConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(f"Failed to parse config file at '{path}': {e}") from e

    logger.info(
        f"Configuration loaded successfully from {path} "
        f"({len(config.datasources)} datasources)"
    )
    return config


def load_config(path: Optional[Union[str, Path]] = None) -> AgentConfig:
    """Load configuration from the first location that exists.

    Args:
        path: Explicit configuration path (skips the lookup)

    Returns:
        Validated AgentConfig

    Raises:
        ConfigurationError: If no configuration file is found or it is invalid
    """
    if path is not None:
        return load_config_from_path(path)

    if env_path := os.getenv("TSIGHT_CONFIG_PATH"):
        logger.info(f"Using configuration from TSIGHT_CONFIG_PATH: {env_path}")
        return load_config_from_path(env_path)

    default_path = get_default_config_path()
    if default_path.exists():
        logger.info(f"Using configuration from system path: {default_path}")
        return load_config_from_path(default_path)

    local_path = Path(CONFIG_FILE_NAME)
    if local_path.exists():
        logger.info(f"Using configuration from local path: {local_path}")
        return load_config_from_path(local_path)

    try:
        ensure_config_dir_exists()
    except OSError as e:
        logger.info(f"Note: {e}")

    raise ConfigurationError(f"Configuration file not found. Expected at: {default_path}")
