"""Shared fixtures for TSight Agent tests."""

import asyncio
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

import pytest

from tsight_agent.config.models import DataSource, GlobalFilters
from tsight_agent.filters import DecisionPolicy
from tsight_agent.schema import CatalogSource
from tsight_agent.utils import QueryConnectionError, QueryExecutionError

CONFIG_DIR = Path(__file__).parent / "test_configs"


class FakeCatalog(CatalogSource):
    """In-memory catalog with injectable failures and concurrency tracking."""

    def __init__(
        self,
        tables: Dict[str, Dict[str, List[Tuple[str, str]]]],
        row_counts: Optional[Dict[Tuple[str, str], int]] = None,
        delay: float = 0.0,
    ):
        self.tables = tables
        self.row_counts = row_counts or {}
        self.delay = delay
        self.failing_databases: Optional[Exception] = None
        self.failing_list_tables: Dict[str, Exception] = {}
        self.failing_tables: Set[Tuple[str, str]] = set()
        self.malformed_tables: Set[Tuple[str, str]] = set()
        self.failing_row_counts: Set[Tuple[str, str]] = set()
        self.failing_columns: Set[Tuple[str, str, str]] = set()
        self.probed_columns: List[Tuple[str, str, str]] = []
        self.active = 0
        self.max_active = 0

    async def list_databases(self) -> List[str]:
        if self.failing_databases is not None:
            raise self.failing_databases
        return list(self.tables)

    async def list_tables(self, database: str) -> List[str]:
        if database in self.failing_list_tables:
            raise self.failing_list_tables[database]
        return list(self.tables[database])

    async def list_columns(self, database: str, table: str) -> List[Tuple[str, str]]:
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(self.delay)
            if (database, table) in self.failing_tables:
                raise QueryExecutionError(f"Table {database}.{table} doesn't exist")
            if (database, table) in self.malformed_tables:
                raise KeyError("name")
            return list(self.tables[database][table])
        finally:
            self.active -= 1

    async def count_rows(self, database: str, table: str) -> int:
        if (database, table) in self.failing_row_counts:
            raise QueryConnectionError("Connection reset by peer")
        return self.row_counts.get((database, table), 0)

    async def count_unique(self, database: str, table: str, column: str) -> int:
        self.probed_columns.append((database, table, column))
        if (database, table, column) in self.failing_columns:
            raise QueryExecutionError("Illegal type for uniq")
        return 42


@pytest.fixture
def config_dir() -> Path:
    """Directory with sample agent configuration files."""
    return CONFIG_DIR


@pytest.fixture
def empty_policy() -> DecisionPolicy:
    """Policy with no configured patterns."""
    return DecisionPolicy()


@pytest.fixture
def card_policy() -> DecisionPolicy:
    """Policy excluding card-number values and the 'secret' column."""
    return DecisionPolicy.from_global_filters(GlobalFilters.model_validate({
        "sql_filters_exclude": [
            {"column_name_regexes": ["^secret$"]},
            {"column_value_regexes": ["^4[0-9]{12}(?:[0-9]{3})?$"]},
        ],
    }))


@pytest.fixture
def clickhouse_datasource() -> DataSource:
    """ClickHouse data source pointing at a local server."""
    return DataSource(
        name="test_clickhouse",
        source_type="clickhouse",
        hosts=["http://localhost:8123"],
        username="test_user",
        password="test_password",
        timeout=30,
    )
