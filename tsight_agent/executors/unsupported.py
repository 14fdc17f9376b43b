"""Placeholder executors for data source types without an implementation.

Constructing any of them raises ``UnsupportedDataSourceError`` so that a
misconfigured data source fails loudly instead of returning empty results.
"""

from typing import List, NoReturn, Optional

from ..config.models import DataSource, DataSourceType
from ..filters import DecisionPolicy, DynamicRow
from ..schema import TableSchema
from ..utils import UnsupportedDataSourceError
from .base import QueryExecutor, Record


class UnsupportedExecutor(QueryExecutor):
    """Base for backends that are declared but not implemented."""

    display_name = "Unknown"

    def __init__(self, datasource: DataSource, policy: Optional[DecisionPolicy] = None):
        self._unsupported()

    def _unsupported(self) -> NoReturn:
        raise UnsupportedDataSourceError(f"{self.display_name} executor not implemented")

    async def connect(self) -> None:
        self._unsupported()

    async def execute_ts(self, query: str) -> List[Record]:
        self._unsupported()

    async def execute_job(self, query: str) -> List[DynamicRow]:
        self._unsupported()

    async def discover_schemas(self) -> List[TableSchema]:
        self._unsupported()


class PostgreSQLExecutor(UnsupportedExecutor):
    source_type = DataSourceType.POSTGRESQL
    display_name = "PostgreSQL"


class MySQLExecutor(UnsupportedExecutor):
    source_type = DataSourceType.MYSQL
    display_name = "MySQL"


class PrometheusExecutor(UnsupportedExecutor):
    source_type = DataSourceType.PROMETHEUS
    display_name = "Prometheus"
