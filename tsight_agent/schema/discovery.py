"""Policy-aware schema discovery.

Walks a store's catalog (databases -> tables -> columns), dropping everything
the decision policy excludes, and gathers per-table row counts and per-column
cardinality. Tables are discovered concurrently, bounded by a semaphore; a
table that fails with ``TableDiscoveryError`` is logged and left out of the
result instead of failing the whole run; any other error propagates.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple

from ..config.settings import settings
from ..filters import DecisionPolicy
from ..utils import (
    QueryError,
    TableDiscoveryError,
    setup_logger,
    with_query_context,
)
from .models import ColumnInfo, TableSchema, simplify_type

logger = setup_logger(__name__)

DEFAULT_MAX_CONCURRENCY = 16


class CatalogSource(ABC):
    """Read access to a store's catalog and statistics.

    All methods raise ``QueryError`` subclasses on failure.
    """

    @abstractmethod
    async def list_databases(self) -> List[str]:
        """List database names in store order."""
        pass

    @abstractmethod
    async def list_tables(self, database: str) -> List[str]:
        """List table names of a database in store order."""
        pass

    @abstractmethod
    async def list_columns(self, database: str, table: str) -> List[Tuple[str, str]]:
        """List (column name, native type) pairs of a table."""
        pass

    @abstractmethod
    async def count_rows(self, database: str, table: str) -> int:
        """Count the rows of a table."""
        pass

    @abstractmethod
    async def count_unique(self, database: str, table: str, column: str) -> int:
        """Approximate the number of distinct values of a column."""
        pass


class SchemaDiscoverer:
    """Discovers the table schemas a policy permits."""

    def __init__(
        self,
        catalog: CatalogSource,
        policy: DecisionPolicy,
        max_concurrency: Optional[int] = None,
    ):
        """Initialize schema discoverer.

        Args:
            catalog: Catalog of the store to discover
            policy: Decision policy applied at every level
            max_concurrency: Maximum number of tables discovered at once
                (defaults to config)

        Raises:
            ValueError: If max_concurrency is less than 1
        """
        if max_concurrency is None:
            max_concurrency = int(
                settings.get("discovery.max_concurrency", DEFAULT_MAX_CONCURRENCY)
            )
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be at least 1, got {max_concurrency}")

        self.catalog = catalog
        self.policy = policy
        self.max_concurrency = max_concurrency

    async def get_databases(self) -> List[str]:
        """List databases permitted by the policy."""
        try:
            databases = await self.catalog.list_databases()
        except QueryError as e:
            raise with_query_context(e, "Failed to get databases list") from e

        permitted = [db for db in databases if not self.policy.should_exclude_database(db)]
        logger.debug(f"Databases permitted: {len(permitted)} of {len(databases)}")
        return permitted

    async def get_tables(self, database: str) -> List[str]:
        """List tables of a database permitted by the policy."""
        try:
            tables = await self.catalog.list_tables(database)
        except QueryError as e:
            raise with_query_context(e, f"Failed to get tables for database {database}") from e

        return [table for table in tables if not self.policy.should_exclude_table(table)]

    async def discover(self) -> List[TableSchema]:
        """Discover schemas for all permitted databases and tables.

        Returns:
            Schemas of every table that could be discovered, ordered by
            database then table in store order

        Raises:
            QueryError: If the database or table listing fails
            Exception: Any failure other than TableDiscoveryError raised
                while discovering a table
        """
        logger.info("Discovering schemas")

        targets: List[Tuple[str, str]] = []
        for database in await self.get_databases():
            logger.debug(f"Discovering database: {database}")
            for table in await self.get_tables(database):
                targets.append((database, table))

        semaphore = asyncio.Semaphore(self.max_concurrency)
        results = await asyncio.gather(
            *(self._discover_bounded(semaphore, database, table) for database, table in targets),
            return_exceptions=True,
        )

        schemas: List[TableSchema] = []
        for (database, table), result in zip(targets, results):
            if isinstance(result, TableSchema):
                schemas.append(result)
            elif isinstance(result, TableDiscoveryError):
                logger.error(f"Table discovery error: {result}")
            else:
                logger.error(
                    f"Unexpected error discovering {database}.{table}: "
                    f"{type(result).__name__}: {result}"
                )
                raise result

        logger.info(
            f"Discovered {len(schemas)} of {len(targets)} tables "
            f"(max_concurrency={self.max_concurrency})"
        )
        return schemas

    async def _discover_bounded(
        self,
        semaphore: asyncio.Semaphore,
        database: str,
        table: str,
    ) -> TableSchema:
        async with semaphore:
            return await self.discover_table(database, table)

    async def discover_table(self, database: str, table: str) -> TableSchema:
        """Discover schema for a single table.

        Excluded columns are omitted before any cardinality probe is issued.
        A failing probe leaves that column's cardinality empty.

        Args:
            database: Database name
            table: Table name

        Returns:
            TableSchema with permitted columns only

        Raises:
            TableDiscoveryError: If the column list or row count cannot be fetched
        """
        logger.debug(f"Discovering table: {database}.{table}")

        try:
            columns = await self.catalog.list_columns(database, table)
        except QueryError as e:
            raise TableDiscoveryError(database, table, f"failed to list columns: {e}") from e

        try:
            row_count = await self.catalog.count_rows(database, table)
        except QueryError as e:
            raise TableDiscoveryError(database, table, f"failed to get row count: {e}") from e

        schema = TableSchema(database=database, table=table, row_count=row_count)

        for name, native_type in columns:
            if self.policy.should_exclude_column(name):
                logger.debug(f"Skipping excluded column: {database}.{table}.{name}")
                continue

            schema.add_column(
                name,
                ColumnInfo(
                    type_name=simplify_type(native_type),
                    cardinality=await self._probe_cardinality(database, table, name),
                ),
            )

        return schema

    async def _probe_cardinality(self, database: str, table: str, column: str) -> Optional[int]:
        try:
            return await self.catalog.count_unique(database, table, column)
        except QueryError as e:
            logger.warning(f"Failed to get cardinality for {database}.{table}.{column}: {e}")
            return None
