"""Pydantic models for the agent configuration file."""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator


class DataSourceType(str, Enum):
    """Enumeration of data source backends."""
    CLICKHOUSE = "clickhouse"
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    PROMETHEUS = "prometheus"

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            for member in cls:
                if member.value == value.lower():
                    return member
        return None

    def __str__(self) -> str:
        return self.value


class ServerConfig(BaseModel):
    """Connection settings for the TSight server."""

    api_key: str = Field(default="", description="Bearer token for the server API")
    server_url: str = Field(default="", description="Base URL of the server API")

    @field_validator('server_url')
    @classmethod
    def strip_trailing_slash(cls, v):
        """Normalise the base URL so paths can be appended."""
        return v.rstrip("/")


class DataSource(BaseModel):
    """A data source the agent runs queries against."""

    name: str
    source_type: DataSourceType
    hosts: List[str] = Field(default_factory=list)
    username: str = ""
    password: str = ""
    timeout: int = Field(default=60, ge=1, description="Query timeout in seconds")
    filters: Optional[List[str]] = None

    @field_validator('source_type', mode='before')
    @classmethod
    def normalise_source_type(cls, v):
        """Accept source types in any letter case (e.g. 'Clickhouse')."""
        if isinstance(v, str):
            return v.lower()
        return v


class SqlFilterRules(BaseModel):
    """One block of raw filter patterns, grouped by dimension."""

    database_regexes: Optional[List[str]] = None
    table_regexes: Optional[List[str]] = None
    column_name_regexes: Optional[List[str]] = None
    column_value_regexes: Optional[List[str]] = None


class GlobalFilters(BaseModel):
    """Exclude and allow rule blocks applied to every data source."""

    sql_filters_exclude: Optional[List[SqlFilterRules]] = None
    sql_filters_allow: Optional[List[SqlFilterRules]] = None


class AgentConfig(BaseModel):
    """Top-level agent configuration."""

    server: ServerConfig = Field(default_factory=ServerConfig)
    datasources: List[DataSource] = Field(default_factory=list)
    global_filters: Optional[GlobalFilters] = None
