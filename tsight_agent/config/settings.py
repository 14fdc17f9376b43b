"""Runtime settings for TSight Agent.

This module handles loading agent tunables (logging, discovery concurrency,
polling and retry behaviour) from the packaged YAML file and environment
variables. Environment variables take precedence over YAML configuration.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional
import yaml
from dotenv import load_dotenv


class Settings:
    """Singleton configuration manager for the agent runtime."""

    _instance: Optional['Settings'] = None
    _config: Dict[str, Any] = {}

    def __new__(cls):
        """Ensure only one instance of Settings exists."""
        if cls._instance is None:
            cls._instance = super(Settings, cls).__new__(cls)
            cls._instance._initialize()
        return cls._instance

    def _initialize(self) -> None:
        """Initialize configuration by loading from YAML and environment."""
        load_dotenv()

        config_path = Path(__file__).parent / "config.yaml"
        if config_path.exists():
            with open(config_path, 'r') as f:
                self._config = yaml.safe_load(f) or {}
        else:
            self._config = {}

        self._apply_env_overrides()
        self._validate_config()

    def _apply_env_overrides(self) -> None:
        """Override configuration with environment variables."""
        if level := os.getenv("TSIGHT_LOG_LEVEL"):
            self._config.setdefault("logging", {})["level"] = level
        if log_file := os.getenv("TSIGHT_LOG_FILE"):
            self._config.setdefault("logging", {})["log_file"] = log_file

        if max_concurrency := os.getenv("TSIGHT_DISCOVERY_MAX_CONCURRENCY"):
            self._config.setdefault("discovery", {})["max_concurrency"] = max_concurrency

        if poll_interval := os.getenv("TSIGHT_POLL_INTERVAL"):
            self._config.setdefault("agent", {})["poll_interval"] = poll_interval

    def _validate_config(self) -> None:
        """Validate and normalise numeric tunables."""
        numeric_fields = [
            ("discovery.max_concurrency", int, 1),
            ("agent.poll_interval", float, 0),
            ("server.timeout", float, 0),
        ]

        invalid = []
        for field_path, cast, minimum in numeric_fields:
            value = self.get(field_path)
            if value is None:
                continue
            try:
                value = cast(value)
            except (TypeError, ValueError):
                invalid.append(f"{field_path}={value!r}")
                continue
            if value < minimum:
                invalid.append(f"{field_path}={value!r}")
                continue
            self.set(field_path, value)

        if invalid:
            raise ValueError(
                f"Invalid runtime settings: {', '.join(invalid)}. "
                "Check config.yaml or the TSIGHT_* environment variables."
            )

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'discovery.max_concurrency').

        Args:
            key_path: Dot-separated path to configuration value
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self._config

        for key in keys:
            if isinstance(value, dict):
                value = value.get(key)
                if value is None:
                    return default
            else:
                return default

        return value

    def get_section(self, section: str) -> Dict[str, Any]:
        """Get an entire configuration section.

        Args:
            section: Top-level section name (e.g., 'logging', 'discovery')

        Returns:
            Dictionary containing the section configuration
        """
        return self._config.get(section, {})

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation.

        Args:
            key_path: Dot-separated path to configuration value
            value: Value to set
        """
        keys = key_path.split('.')
        config = self._config

        for key in keys[:-1]:
            config = config.setdefault(key, {})

        config[keys[-1]] = value

    def reload(self) -> None:
        """Reload configuration from file and environment."""
        self._initialize()

    @property
    def logging(self) -> Dict[str, Any]:
        """Get logging configuration."""
        return self.get_section("logging")

    @property
    def discovery(self) -> Dict[str, Any]:
        """Get schema discovery configuration."""
        return self.get_section("discovery")

    @property
    def agent(self) -> Dict[str, Any]:
        """Get agent loop configuration."""
        return self.get_section("agent")

    @property
    def server(self) -> Dict[str, Any]:
        """Get server client configuration."""
        return self.get_section("server")

    @property
    def retry(self) -> Dict[str, Any]:
        """Get retry configuration."""
        return self.get_section("retry")


# Global settings instance
settings = Settings()
