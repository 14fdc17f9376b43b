"""Base agent with the poll-process-submit loop."""

import asyncio
from abc import ABC, abstractmethod
from typing import List, Optional

from ..client import AcquireResult, ServerClient
from ..config.models import DataSource
from ..config.settings import settings
from ..executors import Record, create_executor
from ..filters import DecisionPolicy, DynamicRow
from ..utils import (
    ConfigurationError,
    NoTasksAvailableError,
    QueryError,
    setup_logger,
    with_query_context,
)

logger = setup_logger(__name__)


class BaseAgent(ABC):
    """Common functionality of the observation and job agents."""

    def __init__(
        self,
        server_client: ServerClient,
        datasources: List[DataSource],
        policy: Optional[DecisionPolicy] = None,
        poll_interval: Optional[float] = None,
    ):
        """Initialize agent.

        Args:
            server_client: Client for the TSight server
            datasources: Configured data sources
            policy: Decision policy shared by every executor
            poll_interval: Seconds between queue polls (defaults to config)
        """
        self.server_client = server_client
        self.datasources = datasources
        self.policy = policy or DecisionPolicy()
        if poll_interval is None:
            poll_interval = float(settings.get("agent.poll_interval", 1.0))
        self.poll_interval = poll_interval

    def find_datasource(self, name: str) -> Optional[DataSource]:
        """Find a data source by name."""
        for datasource in self.datasources:
            if datasource.name == name:
                return datasource
        return None

    def _require_datasource(self, request: AcquireResult) -> DataSource:
        datasource = self.find_datasource(request.datasource_name)
        if datasource is None:
            raise ConfigurationError(
                f"No matching datasource found for query {request.datasource_name}"
            )
        return datasource

    async def process_query(self, request: AcquireResult) -> List[Record]:
        """Run an observation query and return its records."""
        datasource = self._require_datasource(request)

        async with create_executor(datasource, self.policy) as executor:
            try:
                return await executor.execute_ts(request.query)
            except QueryError as e:
                raise with_query_context(e, f"Query execution error for query {request.id}") from e

    async def process_job(self, request: AcquireResult) -> List[DynamicRow]:
        """Run a job query and return its scrubbed rows."""
        datasource = self._require_datasource(request)

        async with create_executor(datasource, self.policy) as executor:
            try:
                rows = await executor.execute_job(request.query)
            except QueryError as e:
                raise with_query_context(e, f"Query execution error for job {request.id}") from e

        logger.debug(f"Job {request.id} produced {len(rows)} rows")
        return rows

    @abstractmethod
    async def process_next(self) -> None:
        """Acquire, process and answer the next item of the agent's queue."""
        pass

    async def run(self, stop_event: Optional[asyncio.Event] = None) -> None:
        """Process the queue until the stop event is set (forever if None)."""
        while stop_event is None or not stop_event.is_set():
            try:
                await self.process_next()
            except NoTasksAvailableError as e:
                logger.warning(str(e))
            except Exception as e:
                logger.error(f"Failed to process task: {type(e).__name__}: {e}")

            await asyncio.sleep(self.poll_interval)
