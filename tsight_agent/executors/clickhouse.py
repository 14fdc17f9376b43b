"""ClickHouse executor over the HTTP interface."""

import json
from typing import Any, Dict, List, Optional, Tuple
import httpx
from pydantic import ValidationError

from ..config.models import DataSource, DataSourceType
from ..filters import DecisionPolicy, DynamicRow
from ..schema import CatalogSource, SchemaDiscoverer, TableSchema
from ..utils import (
    ConfigurationError,
    QueryConnectionError,
    QueryExecutionError,
    setup_logger,
    truncate_query,
)
from .base import QueryExecutor, Record

logger = setup_logger(__name__)

# HTTP statuses ClickHouse uses for authentication failures
AUTH_FAILURE_STATUSES = (401, 403, 516)


def quote_identifier(name: str) -> str:
    """Quote a database, table or column name for ClickHouse."""
    escaped = name.replace("\\", "\\\\").replace("`", "\\`")
    return f"`{escaped}`"


def quote_literal(value: str) -> str:
    """Quote a string literal for ClickHouse."""
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def parse_json_each_row(text: str) -> List[Dict[str, Any]]:
    """Parse a JSONEachRow response body into row dictionaries.

    Raises:
        QueryExecutionError: If a line is not a JSON object
    """
    rows = []
    for line in text.splitlines():
        if not line.strip():
            continue
        try:
            row = json.loads(line)
        except json.JSONDecodeError as e:
            logger.error(f"JSON parsing error for line: {truncate_query(line, 200)}")
            raise QueryExecutionError(f"Invalid JSON in response: {e}") from e
        if not isinstance(row, dict):
            raise QueryExecutionError(f"Expected a JSON object per row, got: {type(row).__name__}")
        rows.append(row)
    return rows


class ClickhouseExecutor(QueryExecutor):
    """Executor for ClickHouse data sources."""

    source_type = DataSourceType.CLICKHOUSE

    def __init__(
        self,
        datasource: DataSource,
        policy: Optional[DecisionPolicy] = None,
        client: Optional[httpx.AsyncClient] = None,
        max_concurrency: Optional[int] = None,
    ):
        """Initialize ClickHouse executor.

        Args:
            datasource: ClickHouse data source; the first host is used
            policy: Decision policy for discovery and result scrubbing
            client: Optional HTTP client to use instead of an owned one
            max_concurrency: Table discovery concurrency (defaults to config)

        Raises:
            ConfigurationError: If the data source has no hosts
        """
        super().__init__(datasource, policy)

        if not datasource.hosts:
            raise ConfigurationError(
                f"No host specified for Clickhouse datasource: {datasource.name}"
            )

        self.url = datasource.hosts[0]
        self.max_concurrency = max_concurrency
        self._http_client = client
        self._owns_client = client is None

    @property
    def _client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                auth=httpx.BasicAuth(self.datasource.username, self.datasource.password),
                timeout=httpx.Timeout(float(self.datasource.timeout), connect=10.0),
            )
        return self._http_client

    async def close(self) -> None:
        """Close the HTTP client if this executor created it."""
        if self._owns_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
        await super().close()

    async def _post(self, body: str) -> str:
        try:
            response = await self._client.post(self.url, content=body.encode("utf-8"))
        except (httpx.ConnectError, httpx.ConnectTimeout) as e:
            logger.error(f"HTTP connection error: {e}")
            raise QueryConnectionError(f"Failed to connect to {self.url}: {e}") from e
        except httpx.TimeoutException as e:
            logger.error(f"HTTP timeout: {e}")
            raise QueryExecutionError(
                f"Query timed out after {self.datasource.timeout}s: {e}"
            ) from e
        except httpx.TransportError as e:
            logger.error(f"HTTP request error: {e}")
            raise QueryConnectionError(str(e)) from e

        if response.status_code in AUTH_FAILURE_STATUSES:
            logger.error(f"Authentication failed for {self.url}: {response.status_code}")
            raise QueryConnectionError(response.text.strip())

        if response.is_error:
            logger.error(f"HTTP response error: {response.status_code}")
            raise QueryExecutionError(response.text.strip())

        return response.text

    async def fetch_rows(self, query: str) -> List[Dict[str, Any]]:
        """Run a query and return its rows as dictionaries.

        Args:
            query: SQL query without a FORMAT clause

        Returns:
            List of row dictionaries

        Raises:
            QueryConnectionError: If ClickHouse cannot be reached
            QueryExecutionError: If ClickHouse rejects the query or the body is malformed
        """
        statement = query.strip().rstrip(";")
        text = await self._post(f"{statement} FORMAT JSONEachRow")
        return parse_json_each_row(text)

    async def fetch_value(self, query: str) -> Any:
        """Run a query returning one row with one column and return that value."""
        rows = await self.fetch_rows(query)
        if not rows or not rows[0]:
            raise QueryExecutionError(f"Query returned no rows: {truncate_query(query)}")
        return next(iter(rows[0].values()))

    async def connect(self) -> None:
        """Verify connectivity with a trivial query."""
        logger.debug(f"Testing connection to ClickHouse server at {self.url}")

        try:
            await self.fetch_rows("SELECT 1")
        except (QueryConnectionError, QueryExecutionError) as e:
            logger.error(f"Failed to connect to ClickHouse server: {e}")
            raise

        self.is_connected = True
        logger.info("Successfully connected to ClickHouse server")

    async def execute_ts(self, query: str) -> List[Record]:
        """Run a time-series query returning (t, cnt) rows."""
        logger.debug(f"Executing time series query: {truncate_query(query)}")

        rows = await self.fetch_rows(query)
        try:
            records = [Record.model_validate(row) for row in rows]
        except ValidationError as e:
            raise QueryExecutionError(
                f"Time series query must return columns t and cnt: {e}"
            ) from e

        logger.debug(f"Query executed successfully, returned {len(records)} rows")
        return records

    async def execute_job(self, query: str) -> List[DynamicRow]:
        """Run an arbitrary query and scrub its results."""
        logger.debug(f"Executing job query: {truncate_query(query)}")

        rows = self.filter_job_results(await self.fetch_rows(query))

        logger.debug(f"Job query executed successfully, returned {len(rows)} rows")
        return rows

    async def discover_schemas(self) -> List[TableSchema]:
        """Discover the table schemas the policy permits."""
        logger.debug("Discovering clickhouse schemas")
        discoverer = SchemaDiscoverer(
            ClickhouseCatalog(self),
            self.policy,
            max_concurrency=self.max_concurrency,
        )
        return await discoverer.discover()


class ClickhouseCatalog(CatalogSource):
    """Catalog queries against ClickHouse system tables."""

    def __init__(self, executor: ClickhouseExecutor):
        self.executor = executor

    async def list_databases(self) -> List[str]:
        rows = await self.executor.fetch_rows("SELECT name FROM system.databases")
        return [row["name"] for row in rows]

    async def list_tables(self, database: str) -> List[str]:
        rows = await self.executor.fetch_rows(f"SHOW TABLES FROM {quote_identifier(database)}")
        return [row["name"] for row in rows]

    async def list_columns(self, database: str, table: str) -> List[Tuple[str, str]]:
        rows = await self.executor.fetch_rows(
            "SELECT name, type FROM system.columns "
            f"WHERE database = {quote_literal(database)} AND table = {quote_literal(table)} "
            "ORDER BY position"
        )
        return [(row["name"], row["type"]) for row in rows]

    async def count_rows(self, database: str, table: str) -> int:
        value = await self.executor.fetch_value(
            f"SELECT count() FROM {quote_identifier(database)}.{quote_identifier(table)}"
        )
        return self._to_int(value)

    async def count_unique(self, database: str, table: str, column: str) -> int:
        value = await self.executor.fetch_value(
            f"SELECT uniq({quote_identifier(column)}) "
            f"FROM {quote_identifier(database)}.{quote_identifier(table)}"
        )
        return self._to_int(value)

    @staticmethod
    def _to_int(value: Any) -> int:
        # 64-bit integers arrive quoted in JSON output
        try:
            return int(value)
        except (TypeError, ValueError) as e:
            raise QueryExecutionError(f"Expected an integer, got {value!r}") from e
