"""Query executor interface shared by all data source backends."""

from abc import ABC, abstractmethod
from typing import List, Optional
from pydantic import BaseModel

from ..config.models import DataSource, DataSourceType
from ..filters import DecisionPolicy, DynamicRow, scrub_rows
from ..schema import TableSchema


class Record(BaseModel):
    """One row of a time-series observation query."""

    t: int
    cnt: float


class QueryExecutor(ABC):
    """Capability every data source backend provides to the agents.

    An executor starts unconnected; ``connect()`` verifies the data source
    with a trivial round trip. Every other call is independent of the
    previous ones.
    """

    source_type: DataSourceType

    def __init__(self, datasource: DataSource, policy: Optional[DecisionPolicy] = None):
        """Initialize executor.

        Args:
            datasource: Data source to run queries against
            policy: Decision policy for discovery and result scrubbing
        """
        self.datasource = datasource
        self.policy = policy or DecisionPolicy()
        self.is_connected = False

    @abstractmethod
    async def connect(self) -> None:
        """Verify connectivity.

        Raises:
            QueryConnectionError: If the data source cannot be reached
            QueryExecutionError: If the probe query fails
        """
        pass

    @abstractmethod
    async def execute_ts(self, query: str) -> List[Record]:
        """Run a time-series query returning (t, cnt) rows."""
        pass

    @abstractmethod
    async def execute_job(self, query: str) -> List[DynamicRow]:
        """Run an arbitrary query; results are scrubbed before they are returned."""
        pass

    @abstractmethod
    async def discover_schemas(self) -> List[TableSchema]:
        """Discover the table schemas the policy permits."""
        pass

    def filter_job_results(self, rows: List[DynamicRow]) -> List[DynamicRow]:
        """Drop result rows that contain excluded columns or values."""
        return scrub_rows(rows, self.policy)

    async def close(self) -> None:
        """Release resources held by the executor."""
        self.is_connected = False

    async def __aenter__(self) -> 'QueryExecutor':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
