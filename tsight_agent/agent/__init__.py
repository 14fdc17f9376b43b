"""Queue agents and schema discovery trigger."""

from typing import Optional, Tuple

from ..client import ServerClient
from ..config.models import AgentConfig
from ..filters import DecisionPolicy
from ..utils import setup_logger
from .base import BaseAgent
from .agents import JobAgent, ObservationAgent
from .datasource import discover_and_submit_schemas, discover_datasource

logger = setup_logger(__name__)


def initialize_agents(
    config: AgentConfig,
    policy: DecisionPolicy,
    server_client: Optional[ServerClient] = None,
) -> Tuple[ObservationAgent, JobAgent, ObservationAgent]:
    """Create the agents described by the configuration.

    Args:
        config: Agent configuration
        policy: Decision policy shared by every agent
        server_client: Client to share between agents (created from config if None)

    Returns:
        (high priority observation agent, job agent, main observation agent)
    """
    if server_client is None:
        server_client = ServerClient(config.server.api_key, config.server.server_url)

    hp_agent = ObservationAgent(
        server_client, config.datasources, policy, is_high_priority_queue=True
    )
    logger.info("Initialized high priority agent")

    job_agent = JobAgent(server_client, config.datasources, policy)
    logger.info("Initialized job agent")

    main_agent = ObservationAgent(
        server_client, config.datasources, policy, is_high_priority_queue=False
    )
    logger.info("Initialized observations agent")

    return hp_agent, job_agent, main_agent


__all__ = [
    "BaseAgent",
    "JobAgent",
    "ObservationAgent",
    "discover_and_submit_schemas",
    "discover_datasource",
    "initialize_agents",
]
