"""Configuration management."""

from .settings import Settings, settings
from .models import (
    AgentConfig,
    DataSource,
    DataSourceType,
    GlobalFilters,
    ServerConfig,
    SqlFilterRules,
)

__all__ = [
    "Settings",
    "settings",
    "AgentConfig",
    "DataSource",
    "DataSourceType",
    "GlobalFilters",
    "ServerConfig",
    "SqlFilterRules",
]
