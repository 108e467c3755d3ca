"""
Blockchain Gateway interface.

The gateway performs the durable, on-chain side of every protocol
operation and hands back identifiers and transaction receipts. Every
method may fail; adapters raise ``GatewayError`` (or let timeouts
propagate) and the coordinator decides how to surface it.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..core.schema import Agent


@dataclass
class AgentIdentity:
    """What the local agent asks to be registered as."""
    name: str
    description: str = ""
    capabilities: List[str] = field(default_factory=list)
    framework: str = "AgentPod"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "capabilities": list(self.capabilities),
            "framework": self.framework,
        }


@dataclass
class RegistrationReceipt:
    agent_id: str
    transaction_hash: str
    wallet_address: str = ""
    reputation: Optional[int] = None  # None when the network does not report one


@dataclass
class MessageReceipt:
    message_id: str
    transaction_hash: str


@dataclass
class ChannelReceipt:
    channel_id: str
    transaction_hash: str


@dataclass
class EscrowReceipt:
    escrow_id: str
    transaction_hash: str


@dataclass
class NetworkStats:
    block_height: int = 0
    total_supply: int = 0
    transaction_count: int = 0
    health: str = "unhealthy"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "block_height": self.block_height,
            "total_supply": self.total_supply,
            "transaction_count": self.transaction_count,
            "health": self.health,
        }


class BlockchainGateway(ABC):
    """Call contract between the protocol core and the chain."""

    @abstractmethod
    async def register(self, identity: AgentIdentity) -> RegistrationReceipt:
        """Register the local agent on-chain."""

    @abstractmethod
    async def send_message(self, recipient_id: str, content: str, message_type: str) -> MessageReceipt:
        """Record a message on-chain."""

    @abstractmethod
    async def create_channel(self, name: str, description: str, is_private: bool) -> ChannelReceipt:
        """Create a channel on-chain."""

    @abstractmethod
    async def join_channel(self, channel_id: str) -> bool:
        """Join a channel; False when the chain rejects the join."""

    @abstractmethod
    async def create_escrow(self, data: Dict[str, Any]) -> EscrowReceipt:
        """Open an escrow account on-chain."""

    @abstractmethod
    async def list_agents(self) -> List[Agent]:
        """Agents currently listed on the network."""

    @abstractmethod
    async def get_network_stats(self) -> NetworkStats:
        """Block height, supply and health of the network."""

    @abstractmethod
    async def get_balance(self) -> float:
        """Wallet balance in whole tokens."""

    @abstractmethod
    async def health_check(self) -> bool:
        """True when the network is reachable."""
