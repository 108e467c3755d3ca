"""
In-process gateway.

Simulates the network locally: deterministic ids and transaction hashes,
a seeded agent listing, and switches to make individual operations fail.
Used for local development, demos and tests.
"""

import asyncio
import hashlib
import itertools
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Set

from ..core.schema import Agent, AgentStatus
from ..exceptions import GatewayError
from .base import (
    AgentIdentity,
    BlockchainGateway,
    ChannelReceipt,
    EscrowReceipt,
    MessageReceipt,
    NetworkStats,
    RegistrationReceipt,
)


def reference_agents(now: Optional[datetime] = None) -> List[Agent]:
    """The three agents every fresh local network starts with."""
    now = now or datetime.utcnow()
    return [
        Agent(
            agent_id="trading_bot_001",
            name="Advanced Trading Bot",
            description="AI trading agent with market analysis capabilities",
            capabilities=["trading", "analysis", "risk_management"],
            reputation=95,
            wallet_address="8vK2TradingBotWa11etAddre55xxxxxxxxxmN8p",
            status=AgentStatus.ONLINE,
            framework="ElizaOS",
            last_active=now - timedelta(minutes=15),
        ),
        Agent(
            agent_id="research_pro_v2",
            name="Research Assistant Pro",
            description="Academic research and data analysis specialist",
            capabilities=["research", "data_analysis", "reporting"],
            reputation=94,
            wallet_address="9wL3ResearchProWa11etAddre55xxxxxxxxxpK9q",
            status=AgentStatus.ONLINE,
            framework="AutoGen",
            last_active=now - timedelta(minutes=3),
        ),
        Agent(
            agent_id="content_creator_x",
            name="Content Creator Agent",
            description="Creative writing and content strategy specialist",
            capabilities=["writing", "content_strategy", "seo"],
            reputation=89,
            wallet_address="7tM4ContentCreatorWa11etAddre55xxxxxxqR8n",
            status=AgentStatus.OFFLINE,
            framework="CrewAI",
            last_active=now - timedelta(hours=1),
        ),
    ]


class InMemoryGateway(BlockchainGateway):
    """
    Local stand-in for the chain.

    Usage:
        gateway = InMemoryGateway()
        gateway.fail("send_message")         # next sends raise GatewayError
        gateway.reject_join("channel_abc")   # joins to this channel return False
        gateway.reachable = False            # health_check() -> False
    """

    def __init__(
        self,
        agents: Optional[Iterable[Agent]] = None,
        wallet_address: str = "LocalWa11et1111111111111111111111111111111",
        balance: float = 10.0,
        latency: float = 0.0,
    ):
        self.agents: List[Agent] = list(agents) if agents is not None else reference_agents()
        self.wallet_address = wallet_address
        self.balance = balance
        self.latency = latency
        self.reachable = True
        self.block_height = 1000
        self.calls: List[str] = []

        self._failing: Set[str] = set()
        self._rejected_joins: Set[str] = set()
        self._counter = itertools.count(1)

    # ==================== Failure Injection ====================

    def fail(self, *operations: str):
        """Make the named operations raise GatewayError."""
        self._failing.update(operations)

    def recover(self, *operations: str):
        """Clear failures (all of them when no names are given)."""
        if operations:
            self._failing.difference_update(operations)
        else:
            self._failing.clear()

    def reject_join(self, channel_id: str):
        self._rejected_joins.add(channel_id)

    # ==================== Helpers ====================

    async def _call(self, operation: str):
        self.calls.append(operation)
        if self.latency:
            await asyncio.sleep(self.latency)
        if operation in self._failing or not self.reachable:
            raise GatewayError(f"{operation} rejected by local network")
        self.block_height += 1

    def _next_id(self, prefix: str) -> str:
        return f"{prefix}_{next(self._counter):06d}"

    def _tx_hash(self, *parts: Any) -> str:
        payload = "|".join(str(p) for p in (self.block_height,) + parts)
        return hashlib.sha256(payload.encode()).hexdigest()

    # ==================== Contract ====================

    async def register(self, identity: AgentIdentity) -> RegistrationReceipt:
        await self._call("register")
        agent_id = self._next_id("agent")
        return RegistrationReceipt(
            agent_id=agent_id,
            transaction_hash=self._tx_hash("register", agent_id, identity.name),
            wallet_address=self.wallet_address,
        )

    async def send_message(self, recipient_id: str, content: str, message_type: str) -> MessageReceipt:
        await self._call("send_message")
        message_id = self._next_id("msg")
        return MessageReceipt(
            message_id=message_id,
            transaction_hash=self._tx_hash("message", message_id, recipient_id, message_type),
        )

    async def create_channel(self, name: str, description: str, is_private: bool) -> ChannelReceipt:
        await self._call("create_channel")
        channel_id = self._next_id("channel")
        return ChannelReceipt(
            channel_id=channel_id,
            transaction_hash=self._tx_hash("channel", channel_id, name, is_private),
        )

    async def join_channel(self, channel_id: str) -> bool:
        await self._call("join_channel")
        return channel_id not in self._rejected_joins

    async def create_escrow(self, data: Dict[str, Any]) -> EscrowReceipt:
        await self._call("create_escrow")
        escrow_id = data.get("id") or self._next_id("escrow")
        return EscrowReceipt(
            escrow_id=escrow_id,
            transaction_hash=self._tx_hash("escrow", escrow_id, data.get("amount")),
        )

    async def list_agents(self) -> List[Agent]:
        await self._call("list_agents")
        return [Agent.from_dict(a.to_dict()) for a in self.agents]

    async def get_network_stats(self) -> NetworkStats:
        await self._call("get_network_stats")
        return NetworkStats(
            block_height=self.block_height,
            total_supply=len(self.agents) * 1_000_000,
            transaction_count=self.block_height * 1000,
            health="healthy",
        )

    async def get_balance(self) -> float:
        await self._call("get_balance")
        return self.balance

    async def health_check(self) -> bool:
        self.calls.append("health_check")
        return self.reachable and "health_check" not in self._failing
