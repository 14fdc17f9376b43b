"""Client for the TSight server API.

Handles the task queue (observation queries), the job queue (ad-hoc
queries), schema submission and data source registration.
"""

from typing import Any, Dict, List, Optional
import httpx
from pydantic import BaseModel, ValidationError

from ..config.settings import settings
from ..executors import Record
from ..filters import DynamicRow
from ..schema import TableSchema, schemas_to_payload
from ..utils import (
    NoTasksAvailableError,
    RecoverableError,
    RetryConfig,
    ServerError,
    retry_with_backoff,
    setup_logger,
)

logger = setup_logger(__name__)


class AcquireResult(BaseModel):
    """A task or job handed out by the server."""

    id: str
    datasource_name: str
    query: str


class ServerClient:
    """Async client for the TSight server API."""

    def __init__(
        self,
        api_key: str,
        server_url: str,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
        retry_config: Optional[RetryConfig] = None,
    ):
        """Initialize server client.

        Args:
            api_key: Bearer token for the server API
            server_url: Base URL of the server API
            timeout: Timeout in seconds for acquire requests (defaults to config)
            client: Optional HTTP client to use instead of an owned one
            retry_config: Retry policy for transport failures (defaults to config)
        """
        self.api_key = api_key
        self.server_url = server_url.rstrip("/")
        self.timeout = float(timeout if timeout is not None else settings.get("server.timeout", 60))
        self.retry_config = retry_config or RetryConfig.from_settings()
        self._http_client = client
        self._owns_client = client is None

    @property
    def _client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=httpx.Timeout(30.0))
        return self._http_client

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    def _auth_header(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    async def _post(
        self,
        path: str,
        payload: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> httpx.Response:
        async def send() -> httpx.Response:
            try:
                return await self._client.post(
                    f"{self.server_url}{path}",
                    headers=self._auth_header(),
                    json=payload,
                    timeout=timeout if timeout is not None else httpx.USE_CLIENT_DEFAULT,
                )
            except httpx.TransportError as e:
                logger.warning(f"Request to {path} failed: {e}")
                raise RecoverableError(f"Request to {path} failed: {e}") from e

        return await retry_with_backoff(self.retry_config)(send)()

    async def _acquire(
        self,
        path: str,
        payload: Optional[Dict[str, Any]],
        not_found_msg: str,
        error_context: str,
    ) -> AcquireResult:
        response = await self._post(path, payload, timeout=self.timeout)

        if response.status_code == 404:
            raise NoTasksAvailableError(not_found_msg, status_code=404)
        if response.is_error:
            raise ServerError(f"{error_context}: {response.status_code}", response.status_code)

        try:
            return AcquireResult.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise ServerError(f"{error_context}: invalid response body: {e}") from e

    async def _submit(self, path: str, payload: Dict[str, Any], error_context: str) -> None:
        response = await self._post(path, payload)
        if response.is_error:
            raise ServerError(f"{error_context}: {response.status_code}", response.status_code)

    # Task-related methods

    async def acquire_next_query(self, is_high_priority_queue: bool) -> AcquireResult:
        """Acquire the next observation task from the queue.

        Raises:
            NoTasksAvailableError: If the queue is empty
            ServerError: If the server returns an error
        """
        return await self._acquire(
            "/tasks/acquire",
            {"is_high_priority_queue": is_high_priority_queue},
            "No tasks available",
            "Failed to acquire task",
        )

    async def submit_results(
        self,
        task_id: str,
        records: List[Record],
        is_high_priority_queue: bool,
    ) -> None:
        """Submit task results to the server."""
        await self._submit(
            f"/tasks/{task_id}/submit",
            {
                "records": [record.model_dump() for record in records],
                "is_high_priority_queue": is_high_priority_queue,
            },
            "Failed to submit results",
        )

    async def submit_error(self, task_id: str, error: str, is_high_priority_queue: bool) -> None:
        """Submit an error for a task."""
        await self._submit(
            f"/tasks/{task_id}/submit",
            {"error": error, "is_high_priority_queue": is_high_priority_queue},
            "Failed to submit error",
        )

    # Job-related methods

    async def acquire_next_job(self) -> AcquireResult:
        """Acquire the next job from the queue.

        Raises:
            NoTasksAvailableError: If the queue is empty
            ServerError: If the server returns an error
        """
        return await self._acquire(
            "/jobs/acquire",
            None,
            "No jobs available",
            "Failed to acquire job",
        )

    async def submit_job_results(self, job_id: str, rows: List[DynamicRow]) -> None:
        """Submit job results to the server."""
        await self._submit(
            f"/jobs/{job_id}/submit",
            {"records": rows},
            "Failed to submit job results",
        )

    async def submit_job_error(self, job_id: str, error: str) -> None:
        """Submit an error for a job."""
        await self._submit(
            f"/jobs/{job_id}/submit",
            {"error": error, "is_high_priority_queue": False},
            "Failed to submit error",
        )

    # Schema and datasource management methods

    async def submit_schemas(self, datasource_name: str, schemas: List[TableSchema]) -> None:
        """Submit discovered schemas for a data source."""
        logger.debug(f"Submitting {len(schemas)} schemas for datasource: {datasource_name}")
        await self._submit(
            f"/datasource/{datasource_name}/discovery",
            {"schemas": schemas_to_payload(schemas)},
            "Failed to submit schemas",
        )

    async def add_datasource(self, datasource_name: str, datasource_type: str) -> None:
        """Create or update a data source on the server."""
        logger.info(f"Add datasource: {datasource_name}")
        await self._submit(
            f"/datasource/{datasource_name}/add",
            {"datasource_type": datasource_type},
            "Failed to update existed or create a new datasource",
        )
