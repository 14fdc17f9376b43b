"""Unit tests for the ClickHouse executor."""

import json

import httpx
import pytest
import respx

from tsight_agent.config.models import DataSource, GlobalFilters
from tsight_agent.executors import ClickhouseExecutor, Record
from tsight_agent.filters import DecisionPolicy
from tsight_agent.executors.clickhouse import parse_json_each_row, quote_identifier, quote_literal
from tsight_agent.schema import SimpleType
from tsight_agent.utils import ConfigurationError, QueryConnectionError, QueryExecutionError

CLICKHOUSE_URL = "http://localhost:8123/"


def json_each_row(*rows) -> str:
    return "".join(json.dumps(row) + "\n" for row in rows)


def catalog_responder(request: httpx.Request) -> httpx.Response:
    """Answer catalog queries for a store with one database and one table."""
    query = request.content.decode()

    if query.startswith("SELECT name FROM system.databases"):
        body = json_each_row({"name": "system"}, {"name": "shop"})
    elif query.startswith("SHOW TABLES FROM `shop`"):
        body = json_each_row({"name": "orders"}, {"name": "tmp_orders"})
    elif query.startswith("SELECT name, type FROM system.columns"):
        body = json_each_row(
            {"name": "id", "type": "UInt64"},
            {"name": "email", "type": "String"},
            {"name": "created_at", "type": "DateTime64(3)"},
        )
    elif query.startswith("SELECT count()"):
        body = json_each_row({"count()": "1000"})
    elif query.startswith("SELECT uniq(`id`)"):
        body = json_each_row({"uniq(id)": "998"})
    elif query.startswith("SELECT uniq(`created_at`)"):
        return httpx.Response(500, text="Code: 43. DB::Exception: Illegal type")
    else:
        return httpx.Response(400, text=f"Unexpected query: {query}")

    return httpx.Response(200, text=body)


class TestClickhouseHelpers:
    """Test cases for quoting and response parsing."""

    def test_quote_identifier(self):
        """Test identifiers are backtick quoted with escaping."""
        assert quote_identifier("orders") == "`orders`"
        assert quote_identifier("we`ird") == "`we\\`ird`"

    def test_quote_literal(self):
        """Test literals are single quoted with escaping."""
        assert quote_literal("shop") == "'shop'"
        assert quote_literal("o'brien") == "'o\\'brien'"

    def test_parse_json_each_row(self):
        """Test one object per line, blank lines ignored."""
        text = '{"t": 1, "cnt": 2}\n\n{"t": 2, "cnt": 3}\n'

        assert parse_json_each_row(text) == [{"t": 1, "cnt": 2}, {"t": 2, "cnt": 3}]

    def test_parse_invalid_json(self):
        """Test malformed lines raise an execution error."""
        with pytest.raises(QueryExecutionError, match="Invalid JSON"):
            parse_json_each_row("{not json}\n")

        with pytest.raises(QueryExecutionError, match="JSON object"):
            parse_json_each_row("[1, 2]\n")


class TestClickhouseExecutor:
    """Test cases for ClickhouseExecutor over a mocked HTTP interface."""

    def test_requires_host(self):
        """Test a data source without hosts is rejected."""
        datasource = DataSource(name="empty", source_type="clickhouse")

        with pytest.raises(ConfigurationError, match="No host specified"):
            ClickhouseExecutor(datasource)

    @pytest.mark.asyncio()
    @respx.mock
    async def test_connect(self, clickhouse_datasource):
        """Test connect runs a probe query with basic auth."""
        route = respx.post(CLICKHOUSE_URL).mock(
            return_value=httpx.Response(200, text='{"1":1}\n')
        )

        async with ClickhouseExecutor(clickhouse_datasource) as executor:
            assert not executor.is_connected
            await executor.connect()
            assert executor.is_connected

        request = route.calls.last.request
        assert request.content == b"SELECT 1 FORMAT JSONEachRow"
        assert request.headers["Authorization"].startswith("Basic ")
        assert not executor.is_connected

    @pytest.mark.asyncio()
    @respx.mock
    async def test_connect_refused(self, clickhouse_datasource):
        """Test an unreachable server raises a connection error."""
        respx.post(CLICKHOUSE_URL).mock(side_effect=httpx.ConnectError("Connection refused"))

        async with ClickhouseExecutor(clickhouse_datasource) as executor:
            with pytest.raises(QueryConnectionError):
                await executor.connect()
            assert not executor.is_connected

    @pytest.mark.asyncio()
    @respx.mock
    async def test_authentication_failure(self, clickhouse_datasource):
        """Test credential rejections raise a connection error."""
        respx.post(CLICKHOUSE_URL).mock(
            return_value=httpx.Response(516, text="Code: 516. Authentication failed")
        )

        async with ClickhouseExecutor(clickhouse_datasource) as executor:
            with pytest.raises(QueryConnectionError, match="Authentication failed"):
                await executor.connect()

    @pytest.mark.asyncio()
    @respx.mock
    async def test_query_error(self, clickhouse_datasource):
        """Test a rejected query raises an execution error with the server message."""
        respx.post(CLICKHOUSE_URL).mock(
            return_value=httpx.Response(404, text="Code: 60. Table shop.nope doesn't exist\n")
        )

        async with ClickhouseExecutor(clickhouse_datasource) as executor:
            with pytest.raises(QueryExecutionError, match="doesn't exist"):
                await executor.execute_job("SELECT * FROM shop.nope")

    @pytest.mark.asyncio()
    @respx.mock
    async def test_timeout(self, clickhouse_datasource):
        """Test a read timeout raises an execution error."""
        respx.post(CLICKHOUSE_URL).mock(side_effect=httpx.ReadTimeout("timed out"))

        async with ClickhouseExecutor(clickhouse_datasource) as executor:
            with pytest.raises(QueryExecutionError, match="timed out"):
                await executor.execute_job("SELECT sleep(100)")

    @pytest.mark.asyncio()
    @respx.mock
    async def test_execute_ts(self, clickhouse_datasource):
        """Test time-series rows are parsed into records."""
        route = respx.post(CLICKHOUSE_URL).mock(return_value=httpx.Response(
            200,
            text=json_each_row({"t": 1700000000, "cnt": 5}, {"t": 1700000060, "cnt": 7.5}),
        ))

        async with ClickhouseExecutor(clickhouse_datasource) as executor:
            records = await executor.execute_ts("SELECT t, cnt FROM shop.events;")

        assert records == [Record(t=1700000000, cnt=5.0), Record(t=1700000060, cnt=7.5)]
        assert route.calls.last.request.content == (
            b"SELECT t, cnt FROM shop.events FORMAT JSONEachRow"
        )

    @pytest.mark.asyncio()
    @respx.mock
    async def test_execute_ts_wrong_columns(self, clickhouse_datasource):
        """Test rows without t and cnt raise an execution error."""
        respx.post(CLICKHOUSE_URL).mock(
            return_value=httpx.Response(200, text=json_each_row({"x": 1}))
        )

        async with ClickhouseExecutor(clickhouse_datasource) as executor:
            with pytest.raises(QueryExecutionError, match="t and cnt"):
                await executor.execute_ts("SELECT 1 AS x")

    @pytest.mark.asyncio()
    @respx.mock
    async def test_execute_job_scrubs_rows(self, clickhouse_datasource, card_policy):
        """Test job results are scrubbed before they are returned."""
        respx.post(CLICKHOUSE_URL).mock(return_value=httpx.Response(200, text=json_each_row(
            {"id": 1, "card": "4111 1111 1111 1111"},
            {"id": 2, "card": "none"},
        )))

        async with ClickhouseExecutor(clickhouse_datasource, card_policy) as executor:
            rows = await executor.execute_job("SELECT id, card FROM shop.payments")

        assert rows == [{"id": 2, "card": "none"}]

    @pytest.mark.asyncio()
    @respx.mock
    async def test_discover_schemas(self, clickhouse_datasource):
        """Test discovery through the system tables honours the policy."""
        respx.post(CLICKHOUSE_URL).mock(side_effect=catalog_responder)

        policy = DecisionPolicy.from_global_filters(GlobalFilters.model_validate({
            "sql_filters_exclude": [
                {"table_regexes": ["^tmp_"]},
                {"column_name_regexes": ["email"]},
            ],
        }))

        async with ClickhouseExecutor(clickhouse_datasource, policy, max_concurrency=2) as executor:
            schemas = await executor.discover_schemas()

        assert len(schemas) == 1
        schema = schemas[0]
        assert schema.full_name == "shop.orders"
        assert schema.row_count == 1000
        assert list(schema.columns) == ["id", "created_at"]
        assert schema.columns["id"].type_name == SimpleType.INT
        assert schema.columns["id"].cardinality == 998
        assert schema.columns["created_at"].type_name == SimpleType.DATETIME
        assert schema.columns["created_at"].cardinality is None

    @pytest.mark.asyncio()
    @respx.mock
    async def test_shared_client_not_closed(self, clickhouse_datasource):
        """Test an injected HTTP client is left open on close."""
        respx.post(CLICKHOUSE_URL).mock(return_value=httpx.Response(200, text='{"1":1}\n'))

        async with httpx.AsyncClient() as client:
            async with ClickhouseExecutor(clickhouse_datasource, client=client) as executor:
                await executor.connect()
            assert not client.is_closed
