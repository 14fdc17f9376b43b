"""Query executors for data source backends."""

from .base import QueryExecutor, Record
from .clickhouse import ClickhouseCatalog, ClickhouseExecutor
from .unsupported import (
    MySQLExecutor,
    PostgreSQLExecutor,
    PrometheusExecutor,
    UnsupportedExecutor,
)
from .factory import ExecutorFactory, create_executor

__all__ = [
    "QueryExecutor",
    "Record",
    "ClickhouseCatalog",
    "ClickhouseExecutor",
    "MySQLExecutor",
    "PostgreSQLExecutor",
    "PrometheusExecutor",
    "UnsupportedExecutor",
    "ExecutorFactory",
    "create_executor",
]
