"""
AgentPod - Blockchain-anchored communication for AI agents

Register an identity, discover other agents, exchange messages, form
channels and place escrowed commitments:

    from agentpod import InMemoryGateway, PodConfig, ProtocolCoordinator

    coordinator = ProtocolCoordinator(InMemoryGateway(), config=PodConfig.from_env())
    await coordinator.register()
    agents = await coordinator.discover_agents({"capabilities": ["trading"]})

Score conversation turns without touching protocol state:

    from agentpod import score_reputation
    score_reputation("Thank you, the project was completed successfully")

The REST server lives in ``agentpod.api`` (``pip install agentpod[server]``).
"""

__version__ = "0.1.0"

from .config import PodConfig
from .core.schema import (
    Agent,
    AgentStatus,
    Channel,
    ChannelType,
    Escrow,
    EscrowStatus,
    Message,
    MessagePriority,
    MessageStatus,
    MessageType,
)
from .evaluators import score_collaboration, score_interaction_quality, score_reputation
from .exceptions import (
    AgentPodError,
    DeliveryFailedError,
    GatewayError,
    InvalidAmountError,
    InvalidArgumentError,
    NotConfiguredError,
    NotFoundError,
    NotRegisteredError,
)
from .gateway import BlockchainGateway, HttpGateway, InMemoryGateway
from .log import configure_logging
from .plugin import build_plugin
from .protocol import ProtocolCoordinator, ProtocolState
from .registry import DiscoveryFilter
from .sharing import MessageFilter

__all__ = [
    # Entities
    "Agent",
    "AgentStatus",
    "Channel",
    "ChannelType",
    "Escrow",
    "EscrowStatus",
    "Message",
    "MessagePriority",
    "MessageStatus",
    "MessageType",
    # Protocol
    "DiscoveryFilter",
    "MessageFilter",
    "PodConfig",
    "ProtocolCoordinator",
    "ProtocolState",
    # Gateways
    "BlockchainGateway",
    "HttpGateway",
    "InMemoryGateway",
    # Evaluators & plugin
    "build_plugin",
    "score_collaboration",
    "score_interaction_quality",
    "score_reputation",
    # Errors
    "AgentPodError",
    "DeliveryFailedError",
    "GatewayError",
    "InvalidAmountError",
    "InvalidArgumentError",
    "NotConfiguredError",
    "NotFoundError",
    "NotRegisteredError",
    # Logging
    "configure_logging",
]
