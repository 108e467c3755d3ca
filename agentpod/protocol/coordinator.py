"""
Protocol Coordinator - the single entry point to protocol state.

Every operation validates its preconditions first, then delegates the
durable write to the blockchain gateway, then updates the local stores.
Mutating operations hold one lock per coordinator so concurrent callers
never see a store mid-update.
"""

import asyncio
import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Union

from ..config import PodConfig
from ..core.schema import (
    DEFAULT_REPUTATION,
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
from ..escrow.ledger import validate_amount
from ..exceptions import (
    AgentPodError,
    DeliveryFailedError,
    InvalidArgumentError,
    NotConfiguredError,
    NotFoundError,
    NotRegisteredError,
)
from ..gateway.base import AgentIdentity, BlockchainGateway, NetworkStats
from ..registry.discovery import DiscoveryFilter, filter_agents
from ..sharing.channels import Admission
from ..sharing.messages import MessageFilter
from .state import ProtocolState, ProtocolStats

logger = logging.getLogger(__name__)


@dataclass
class MessageOptions:
    type: MessageType = MessageType.TEXT
    priority: MessagePriority = MessagePriority.NORMAL
    encrypted: bool = True

    def __post_init__(self):
        self.type = MessageType(self.type)
        self.priority = MessagePriority(self.priority)


@dataclass
class ChannelOptions:
    type: ChannelType = ChannelType.PUBLIC
    max_participants: int = 50

    def __post_init__(self):
        self.type = ChannelType(self.type)


def _coerce(value, cls):
    """Accept an options/filter object, a plain dict, or None."""
    if value is None:
        return cls()
    if isinstance(value, cls):
        return value
    if isinstance(value, dict):
        if hasattr(cls, "from_dict"):
            return cls.from_dict(value)
        return cls(**value)
    raise InvalidArgumentError(f"Expected {cls.__name__} or dict, got {type(value).__name__}")


class ProtocolCoordinator:
    """
    Facade owning the protocol state.

    Usage:
        coordinator = ProtocolCoordinator(InMemoryGateway(), config=PodConfig.from_env())
        await coordinator.register()
        agents = await coordinator.discover_agents({"capabilities": ["trading"]})
        await coordinator.send_message(agents[0].agent_id, "Hello")
    """

    def __init__(
        self,
        gateway: BlockchainGateway,
        config: Optional[PodConfig] = None,
        state: Optional[ProtocolState] = None,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        """
        Initialize the coordinator.

        Args:
            gateway: Adapter performing the on-chain side of each operation
            config: Protocol settings; required before registering
            state: State handle to own. A fresh in-memory state by default.
            clock: Source of the current time
        """
        self._gateway = gateway
        self._config = config
        self._state = state if state is not None else ProtocolState()
        self._clock = clock
        self._lock = asyncio.Lock()

    # ==================== Read-only Accessors ====================

    @property
    def config(self) -> Optional[PodConfig]:
        return self._config

    @property
    def is_registered(self) -> bool:
        return self._state.is_registered

    @property
    def current_agent(self) -> Optional[Agent]:
        """Snapshot of the local agent; changes to it are not stored."""
        return self._state.agent

    def get_agent(self, agent_id: str) -> Optional[Agent]:
        if self._is_self(agent_id):
            return self._state.agent
        return self._state.directory.get(agent_id)

    def list_known_agents(self) -> List[Agent]:
        return self._state.directory.list_all()

    def get_channel(self, channel_id: str) -> Optional[Channel]:
        return self._state.channels.get(channel_id)

    def list_channels(self) -> List[Channel]:
        return self._state.channels.list_all()

    def get_escrow(self, escrow_id: str) -> Optional[Escrow]:
        return self._state.escrows.get(escrow_id)

    def list_escrows(self, status: Optional[Union[EscrowStatus, str]] = None) -> List[Escrow]:
        if status is not None:
            status = EscrowStatus(status)
        return self._state.escrows.list_all(status)

    # ==================== Helpers ====================

    def _is_self(self, agent_id: Optional[str]) -> bool:
        agent = self._state.agent
        return agent is not None and agent_id == agent.agent_id

    def _require_agent(self, operation: str) -> Agent:
        agent = self._state.agent
        if agent is None:
            raise NotRegisteredError(operation)
        return agent

    async def _gateway_call(self, operation: str, func: Callable, *args):
        try:
            return await func(*args)
        except Exception as e:
            logger.error("Gateway call %s failed: %s", operation, e)
            raise DeliveryFailedError(operation, e) from e

    # ==================== Lifecycle ====================

    async def initialize(self) -> "ProtocolCoordinator":
        """Register automatically when the config asks for it."""
        if self._config is not None and self._config.auto_register and not self.is_registered:
            try:
                await self.register()
            except AgentPodError as e:
                logger.warning("Auto-registration failed: %s", e.message)
        return self

    async def register(
        self,
        identity: Optional[Union[AgentIdentity, str]] = None,
        capabilities: Optional[List[str]] = None,
    ) -> Agent:
        """
        Register the local agent on the network.

        Args:
            identity: Identity or display name. Defaults to the configured name.
            capabilities: Capability tags. Defaults to the configured list.

        Returns:
            The registered agent (the cached one if already registered)

        Raises:
            NotConfiguredError: settings missing or malformed
            DeliveryFailedError: the gateway rejected the registration
        """
        existing = self._state.agent
        if existing is not None:
            return existing

        if self._config is None:
            raise NotConfiguredError("No protocol configuration provided")
        self._config.require_valid()

        if identity is None or isinstance(identity, str):
            identity = AgentIdentity(
                name=identity or self._config.agent_name,
                description="AI agent with blockchain communication capabilities",
                capabilities=list(capabilities or self._config.capabilities),
            )
        elif capabilities:
            identity = replace(identity, capabilities=list(capabilities))

        async with self._lock:
            if self._state.agent is not None:
                return self._state.agent

            receipt = await self._gateway_call("register", self._gateway.register, identity)
            now = self._clock()
            agent = Agent(
                agent_id=receipt.agent_id,
                name=identity.name,
                description=identity.description,
                capabilities=identity.capabilities,
                reputation=receipt.reputation if receipt.reputation is not None else DEFAULT_REPUTATION,
                wallet_address=receipt.wallet_address,
                status=AgentStatus.ONLINE,
                framework=identity.framework,
                last_active=now,
            )
            self._state.set_agent(agent)
            self._state.last_sync = now

        logger.info("Registered agent %s (tx %s)", agent.agent_id, receipt.transaction_hash)
        return agent

    # ==================== Discovery ====================

    async def discover_agents(self, criteria: Optional[Union[DiscoveryFilter, dict]] = None) -> List[Agent]:
        """
        Find agents on the network.

        Every result is upserted into the local directory.
        """
        me = self._require_agent("discover_agents")
        criteria = _coerce(criteria, DiscoveryFilter)

        async with self._lock:
            listing = await self._gateway_call("list_agents", self._gateway.list_agents)
            listing = [a for a in listing if a.agent_id != me.agent_id]
            results = filter_agents(listing, criteria)
            for agent in results:
                self._state.directory.upsert(agent)
            self._state.last_sync = self._clock()

        logger.debug("Discovery returned %d of %d listed agents", len(results), len(listing))
        return results

    # ==================== Messaging ====================

    async def send_message(
        self,
        recipient_id: str,
        content: str,
        options: Optional[Union[MessageOptions, dict]] = None,
    ) -> Message:
        """
        Send a message to another agent.

        Raises:
            NotRegisteredError: caller has not registered
            InvalidArgumentError: empty recipient or content
            DeliveryFailedError: the gateway rejected the send
        """
        me = self._require_agent("send_message")
        if not recipient_id or not str(recipient_id).strip():
            raise InvalidArgumentError("Recipient id must not be empty")
        if not isinstance(content, str) or not content:
            raise InvalidArgumentError("Message content must be a non-empty string")
        options = _coerce(options, MessageOptions)

        async with self._lock:
            receipt = await self._gateway_call(
                "send_message", self._gateway.send_message, recipient_id, content, options.type.value
            )
            now = self._clock()
            message = Message(
                id=receipt.message_id,
                sender_id=me.agent_id,
                recipient_id=recipient_id,
                content=content,
                type=options.type,
                priority=options.priority,
                encrypted=options.encrypted,
                status=MessageStatus.DELIVERED,
                timestamp=now,
                transaction_hash=receipt.transaction_hash,
            )
            self._state.messages.append(message)
            current = self._state.agent
            current.touch(now)
            self._state.set_agent(current)

        logger.info("Sent message %s to %s", message.id, recipient_id)
        return message

    async def get_messages(self, criteria: Optional[Union[MessageFilter, dict]] = None) -> List[Message]:
        """Read the message log, most recent first."""
        return self._state.messages.query(_coerce(criteria, MessageFilter))

    async def mark_message_read(self, message_id: str) -> Message:
        async with self._lock:
            return self._state.messages.update_status(message_id, MessageStatus.READ)

    # ==================== Channels ====================

    async def create_channel(
        self,
        name: str,
        description: str = "",
        options: Optional[Union[ChannelOptions, dict]] = None,
    ) -> Channel:
        """
        Create a channel with the caller as its only participant.

        Raises:
            NotRegisteredError: caller has not registered
            InvalidArgumentError: empty name or max_participants < 1
            DeliveryFailedError: the gateway rejected the creation
        """
        me = self._require_agent("create_channel")
        if not name or not name.strip():
            raise InvalidArgumentError("Channel name must not be empty")
        options = _coerce(options, ChannelOptions)
        if options.max_participants < 1:
            raise InvalidArgumentError("max_participants must be at least 1")

        async with self._lock:
            receipt = await self._gateway_call(
                "create_channel",
                self._gateway.create_channel,
                name,
                description,
                options.type == ChannelType.PRIVATE,
            )
            channel = Channel(
                id=receipt.channel_id,
                name=name,
                description=description,
                type=options.type,
                max_participants=options.max_participants,
                participants=[me.agent_id],
                creator_id=me.agent_id,
                last_activity=self._clock(),
                transaction_hash=receipt.transaction_hash,
            )
            self._state.channels.add(channel)

        logger.info("Created %s channel %s (%s)", channel.type.value, channel.id, name)
        return channel

    async def join_channel(self, channel_id: str) -> bool:
        """
        Join a channel.

        Returns:
            True if the caller is a participant afterwards. False for an
            unknown channel, a full public channel, a private channel without
            an invitation, or a gateway rejection.
        """
        me = self._require_agent("join_channel")

        async with self._lock:
            admission = self._state.channels.check_admission(channel_id, me.agent_id)
            if admission == Admission.ALREADY_MEMBER:
                return True
            if admission != Admission.ALLOWED:
                logger.warning("Cannot join channel %s: %s", channel_id, admission.value)
                return False

            try:
                accepted = await self._gateway.join_channel(channel_id)
            except Exception as e:
                logger.warning("Gateway failed joining channel %s: %s", channel_id, e)
                return False
            if not accepted:
                logger.warning("Gateway rejected join for channel %s", channel_id)
                return False

            self._state.channels.add_participant(channel_id, me.agent_id, self._clock())

        logger.info("Joined channel %s", channel_id)
        return True

    async def leave_channel(self, channel_id: str) -> bool:
        """Leave a channel. Leaving a channel you are not in is not an error."""
        me = self._require_agent("leave_channel")
        async with self._lock:
            self._state.channels.remove_participant(channel_id, me.agent_id, self._clock())
        return True

    async def invite_to_channel(self, channel_id: str, agent_id: str) -> Channel:
        """
        Allow an agent to join a channel the caller created.

        Raises:
            NotFoundError: unknown channel
            InvalidArgumentError: caller is not the channel creator
        """
        me = self._require_agent("invite_to_channel")
        if not agent_id:
            raise InvalidArgumentError("Agent id must not be empty")
        async with self._lock:
            channel = self._state.channels.require(channel_id)
            if channel.creator_id != me.agent_id:
                raise InvalidArgumentError("Only the channel creator can invite agents")
            return self._state.channels.invite(channel_id, agent_id)

    async def get_channel_participants(self, channel_id: str) -> List[Agent]:
        """Participants resolved to agents; ids not yet discovered are left out."""
        channel = self._state.channels.get(channel_id)
        if channel is None:
            return []
        agents = []
        for participant_id in channel.participants:
            agent = self.get_agent(participant_id)
            if agent is not None:
                agents.append(agent)
        return agents

    # ==================== Escrow ====================

    async def create_escrow(
        self,
        counterparty_id: str,
        amount: float,
        service: str = "",
        deliverables: Optional[List[str]] = None,
    ) -> Escrow:
        """
        Record a new escrow with a 24 hour deadline.

        The escrow is only recorded locally; funds move when it is funded.

        Raises:
            NotRegisteredError: caller has not registered
            InvalidAmountError: amount is not strictly positive
            InvalidArgumentError: missing counterparty or escrow with self
        """
        me = self._require_agent("create_escrow")
        validate_amount(amount)
        if not counterparty_id:
            raise InvalidArgumentError("Escrow requires a counterparty")
        if counterparty_id == me.agent_id:
            raise InvalidArgumentError("Cannot open an escrow with yourself")

        async with self._lock:
            escrow = Escrow(
                counterparty_id=counterparty_id,
                amount=amount,
                service=service,
                deliverables=list(deliverables or []),
                creator_id=me.agent_id,
                created_at=self._clock(),
            )
            self._state.escrows.add(escrow)

        logger.info("Created escrow %s for %s with %s", escrow.id, amount, counterparty_id)
        return escrow

    async def fund_escrow(self, escrow_id: str) -> Escrow:
        """Open the escrow on-chain and mark it funded."""
        self._require_agent("fund_escrow")
        async with self._lock:
            escrow = self._state.escrows.require(escrow_id)
            now = self._clock()
            self._state.escrows.check_transition(escrow, EscrowStatus.FUNDED, now)
            receipt = await self._gateway_call("create_escrow", self._gateway.create_escrow, escrow.to_dict())
            escrow = self._state.escrows.transition(
                escrow_id, EscrowStatus.FUNDED, now, receipt.transaction_hash
            )
        logger.info("Funded escrow %s (tx %s)", escrow_id, receipt.transaction_hash)
        return escrow

    async def complete_escrow(self, escrow_id: str) -> Escrow:
        return await self._move_escrow(escrow_id, EscrowStatus.COMPLETED, "complete_escrow")

    async def dispute_escrow(self, escrow_id: str) -> Escrow:
        return await self._move_escrow(escrow_id, EscrowStatus.DISPUTED, "dispute_escrow")

    async def refund_escrow(self, escrow_id: str) -> Escrow:
        return await self._move_escrow(escrow_id, EscrowStatus.REFUNDED, "refund_escrow")

    async def _move_escrow(self, escrow_id: str, target: EscrowStatus, operation: str) -> Escrow:
        self._require_agent(operation)
        async with self._lock:
            escrow = self._state.escrows.transition(escrow_id, target, self._clock())
        logger.info("Escrow %s is now %s", escrow_id, target.value)
        return escrow

    # ==================== Reputation ====================

    async def get_agent_reputation(self, agent_id: Optional[str] = None) -> int:
        """Reputation of an agent (self by default); 50 when unknown."""
        me = self._state.agent
        if agent_id is None or self._is_self(agent_id):
            return me.reputation if me is not None else DEFAULT_REPUTATION
        agent = self._state.directory.get(agent_id)
        return agent.reputation if agent is not None else DEFAULT_REPUTATION

    async def update_agent_reputation(self, agent_id: str, delta: int) -> int:
        """
        Apply a reputation delta, clamped to 0..100.

        Raises:
            NotFoundError: agent is neither self nor in the directory
        """
        async with self._lock:
            if self._is_self(agent_id):
                me = self._state.agent
                score = me.adjust_reputation(delta)
                self._state.set_agent(me)
            else:
                score = self._state.directory.adjust_reputation(agent_id, delta)
                if score is None:
                    raise NotFoundError("Agent", agent_id)
        logger.debug("Reputation of %s adjusted by %+d to %d", agent_id, delta, score)
        return score

    async def record_activity(self, agent_id: str) -> bool:
        """Activity ping for a known agent."""
        async with self._lock:
            if self._is_self(agent_id):
                me = self._state.agent
                me.touch(self._clock())
                self._state.set_agent(me)
                return True
            return self._state.directory.touch(agent_id, self._clock())

    async def mark_agent_offline(self, agent_id: str) -> bool:
        async with self._lock:
            return self._state.directory.mark_offline(agent_id)

    # ==================== Stats & Health ====================

    async def get_protocol_stats(self) -> ProtocolStats:
        return self._stats()

    def _stats(self) -> ProtocolStats:
        state = self._state
        return ProtocolStats(
            total_agents=len(state.directory) + 1,
            total_channels=len(state.channels),
            total_messages=len(state.messages),
            active_escrows=state.escrows.active_count(),
            last_sync=state.last_sync,
            is_registered=state.is_registered,
            current_agent=state.agent,
            online_agents=state.directory.count(online_only=True),
        )

    async def get_network_stats(self) -> NetworkStats:
        """Network stats from the gateway; reported unhealthy when unreachable."""
        try:
            return await self._gateway.get_network_stats()
        except Exception as e:
            logger.warning("Network stats unavailable: %s", e)
            return NetworkStats(health="unhealthy")

    async def get_balance(self) -> float:
        return await self._gateway_call("get_balance", self._gateway.get_balance)

    async def health_check(self) -> bool:
        try:
            return bool(await self._gateway.health_check())
        except Exception as e:
            logger.warning("Health check failed: %s", e)
            return False

    def describe(self) -> Dict[str, Any]:
        """Status summary for providers and the REST surface."""
        agent = self._state.agent
        return {
            "is_registered": agent is not None,
            "agent": agent.to_dict() if agent else None,
            "config": self._config.masked() if self._config else None,
            "stats": self._stats().to_dict(),
        }
