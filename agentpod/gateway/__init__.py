"""
AgentPod Gateway Module

The call contract to the blockchain and its adapters.
"""

from .base import (
    AgentIdentity,
    BlockchainGateway,
    ChannelReceipt,
    EscrowReceipt,
    MessageReceipt,
    NetworkStats,
    RegistrationReceipt,
)
from .http import HttpGateway
from .memory import InMemoryGateway, reference_agents

__all__ = [
    "AgentIdentity",
    "BlockchainGateway",
    "ChannelReceipt",
    "EscrowReceipt",
    "HttpGateway",
    "InMemoryGateway",
    "MessageReceipt",
    "NetworkStats",
    "RegistrationReceipt",
    "reference_agents",
]
