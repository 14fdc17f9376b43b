"""TSight Agent: runs TSight server queries against local data sources.

This package provides:
- Allow/exclude SQL filter policies over databases, tables, columns and values
- Policy-aware schema discovery with row counts and column cardinality
- Row-level scrubbing of ad-hoc query results
- A ClickHouse executor over the HTTP interface
- Queue agents that poll the TSight server and submit results
"""

__version__ = "0.1.0"

from .config import settings, AgentConfig, DataSource, DataSourceType, GlobalFilters
from .filters import DecisionPolicy, scrub_rows
from .schema import ColumnInfo, SchemaDiscoverer, SimpleType, TableSchema
from .executors import ClickhouseExecutor, QueryExecutor, Record, create_executor
from .client import ServerClient

__all__ = [
    # Version
    "__version__",
    # Config
    "settings",
    "AgentConfig",
    "DataSource",
    "DataSourceType",
    "GlobalFilters",
    # Filters
    "DecisionPolicy",
    "scrub_rows",
    # Schema
    "ColumnInfo",
    "SchemaDiscoverer",
    "SimpleType",
    "TableSchema",
    # Executors
    "ClickhouseExecutor",
    "QueryExecutor",
    "Record",
    "create_executor",
    # Client
    "ServerClient",
]
