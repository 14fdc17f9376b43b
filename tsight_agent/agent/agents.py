"""Observation and job agents."""

from typing import List, Optional

from ..client import ServerClient
from ..config.models import DataSource
from ..filters import DecisionPolicy
from ..utils import setup_logger
from .base import BaseAgent

logger = setup_logger(__name__)


class ObservationAgent(BaseAgent):
    """Processes time-series tasks from the regular or high-priority queue."""

    def __init__(
        self,
        server_client: ServerClient,
        datasources: List[DataSource],
        policy: Optional[DecisionPolicy] = None,
        is_high_priority_queue: bool = False,
        poll_interval: Optional[float] = None,
    ):
        super().__init__(server_client, datasources, policy, poll_interval)
        self.is_high_priority_queue = is_high_priority_queue

    async def process_next(self) -> None:
        """Acquire the next task, run it and submit the records or the error."""
        request = await self.server_client.acquire_next_query(self.is_high_priority_queue)

        try:
            records = await self.process_query(request)
        except Exception as e:
            try:
                await self.server_client.submit_error(
                    request.id, str(e), self.is_high_priority_queue
                )
            except Exception as submit_err:
                logger.warning(f"Failed to submit error: {submit_err}")
            raise

        await self.server_client.submit_results(
            request.id, records, self.is_high_priority_queue
        )
        logger.info(f"Successfully submitted results for query {request.id}")


class JobAgent(BaseAgent):
    """Processes ad-hoc job queries; results are scrubbed before submission."""

    async def process_next(self) -> None:
        """Acquire the next job, run it and submit the rows or the error."""
        request = await self.server_client.acquire_next_job()

        try:
            rows = await self.process_job(request)
        except Exception as e:
            try:
                await self.server_client.submit_job_error(request.id, str(e))
            except Exception as submit_err:
                logger.warning(f"Failed to submit error: {submit_err}")
            raise

        await self.server_client.submit_job_results(request.id, rows)
        logger.info(f"Successfully submitted results for job {request.id}")
