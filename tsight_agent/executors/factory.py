"""Executor factory.

Maps data source types to executor classes.
"""

from typing import Dict, List, Optional, Type

from ..config.models import DataSource, DataSourceType
from ..filters import DecisionPolicy
from ..utils import UnsupportedDataSourceError
from .base import QueryExecutor
from .clickhouse import ClickhouseExecutor
from .unsupported import MySQLExecutor, PostgreSQLExecutor, PrometheusExecutor


class ExecutorFactory:
    """Registry of executor classes keyed by data source type."""

    _executors: Dict[DataSourceType, Type[QueryExecutor]] = {
        DataSourceType.CLICKHOUSE: ClickhouseExecutor,
        DataSourceType.POSTGRESQL: PostgreSQLExecutor,
        DataSourceType.MYSQL: MySQLExecutor,
        DataSourceType.PROMETHEUS: PrometheusExecutor,
    }

    @classmethod
    def get_executor_class(cls, source_type: DataSourceType) -> Type[QueryExecutor]:
        """Get the executor class for a data source type.

        Raises:
            UnsupportedDataSourceError: If no executor is registered for the type
        """
        executor_class = cls._executors.get(source_type)
        if executor_class is None:
            raise UnsupportedDataSourceError(
                f"Unsupported data source type: {source_type}. "
                f"Supported types: {', '.join(str(t) for t in cls._executors)}"
            )
        return executor_class

    @classmethod
    def register_executor(
        cls,
        source_type: DataSourceType,
        executor_class: Type[QueryExecutor],
    ) -> None:
        """Register an executor class for a data source type."""
        cls._executors[source_type] = executor_class

    @classmethod
    def get_supported_types(cls) -> List[DataSourceType]:
        """Get all registered data source types."""
        return list(cls._executors.keys())


def create_executor(
    datasource: DataSource,
    policy: Optional[DecisionPolicy] = None,
) -> QueryExecutor:
    """Create the executor for a data source.

    Args:
        datasource: Data source configuration
        policy: Decision policy shared by all executors

    Returns:
        Unconnected executor instance

    Raises:
        UnsupportedDataSourceError: If the backend is not implemented
        ConfigurationError: If the data source configuration is incomplete
    """
    executor_class = ExecutorFactory.get_executor_class(datasource.source_type)
    return executor_class(datasource, policy)
