"""Command line entry point for TSight Agent."""

import argparse
import asyncio
import sys
from typing import List, Optional

from .agent import discover_and_submit_schemas, initialize_agents
from .client import ServerClient
from .config.loader import load_config
from .config.models import AgentConfig
from .filters import DecisionPolicy
from .utils import ConfigurationError, InvalidPatternError, setup_logger

logger = setup_logger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="tsight-agent",
        description="Run queries for the TSight server against local data sources.",
    )
    parser.add_argument(
        "--config",
        help="Path to the agent configuration file (default: platform config location)",
    )
    parser.add_argument(
        "--discover-only",
        action="store_true",
        help="Run schema discovery once and exit",
    )
    return parser.parse_args(argv)


async def run_agent(
    config: AgentConfig,
    policy: DecisionPolicy,
    discover_only: bool = False,
) -> None:
    """Start schema discovery and the queue agents.

    Args:
        config: Agent configuration
        policy: Compiled decision policy
        discover_only: Stop after schema discovery instead of polling queues
    """
    server_client = ServerClient(config.server.api_key, config.server.server_url)

    try:
        if discover_only:
            await discover_and_submit_schemas(config.datasources, server_client, policy)
            return

        hp_agent, job_agent, main_agent = initialize_agents(config, policy, server_client)

        tasks = [
            asyncio.create_task(hp_agent.run(), name="high-priority-agent"),
            asyncio.create_task(job_agent.run(), name="job-agent"),
            asyncio.create_task(
                discover_and_submit_schemas(config.datasources, server_client, policy),
                name="schema-discovery",
            ),
        ]

        logger.info("Starting main processing loop")
        try:
            await main_agent.run()
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
    finally:
        await server_client.close()


def main(argv: Optional[List[str]] = None) -> int:
    """Run the agent.

    Returns:
        Process exit code
    """
    args = parse_args(argv)
    logger.info("Starting TSight Agent")

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        logger.error(str(e))
        return 1

    try:
        policy = DecisionPolicy.from_global_filters(config.global_filters)
    except InvalidPatternError as e:
        logger.error(f"Failed to create SQL filters: {e}")
        return 1

    try:
        asyncio.run(run_agent(config, policy, discover_only=args.discover_only))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")

    return 0


if __name__ == "__main__":
    sys.exit(main())
