"""Schema discovery for configured data sources."""

from typing import List, Optional

from ..client import ServerClient
from ..config.models import DataSource
from ..executors import create_executor
from ..filters import DecisionPolicy
from ..utils import setup_logger

logger = setup_logger(__name__)


async def discover_datasource(
    datasource: DataSource,
    server_client: ServerClient,
    policy: Optional[DecisionPolicy] = None,
) -> None:
    """Discover schemas for a single data source and submit them to the server."""
    logger.info(f"Discovering schemas for datasource: {datasource.name}")
    await server_client.add_datasource(datasource.name, str(datasource.source_type))

    async with create_executor(datasource, policy) as executor:
        await executor.connect()
        schemas = await executor.discover_schemas()

    await server_client.submit_schemas(datasource.name, schemas)
    logger.info(f"Successfully submitted schemas for datasource: {datasource.name}")


async def discover_and_submit_schemas(
    datasources: List[DataSource],
    server_client: ServerClient,
    policy: Optional[DecisionPolicy] = None,
) -> List[str]:
    """Discover and submit schemas for all data sources.

    A failing data source is logged and does not stop the others.

    Returns:
        Names of the data sources that failed
    """
    failed = []
    for datasource in datasources:
        try:
            await discover_datasource(datasource, server_client, policy)
        except Exception as e:
            logger.error(
                f"Failed to discover schemas for datasource {datasource.name}: "
                f"{type(e).__name__}: {e}"
            )
            failed.append(datasource.name)
    return failed
