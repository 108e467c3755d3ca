"""
AgentPod Core Schema

Defines the protocol entities: agents, messages, channels and escrows.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import uuid4

# Reputation bounds and the score given to agents we know nothing about
MIN_REPUTATION = 0
MAX_REPUTATION = 100
DEFAULT_REPUTATION = 50

# Escrow deadline window, fixed at creation
ESCROW_WINDOW = timedelta(hours=24)


def new_id(prefix: str) -> str:
    """Generate a prefixed unique identifier (e.g. ``channel_3f2a...``)."""
    return f"{prefix}_{uuid4().hex[:16]}"


def _parse_dt(value: Optional[str]) -> datetime:
    return datetime.fromisoformat(value) if value else datetime.utcnow()


def clamp_reputation(value: int) -> int:
    return max(MIN_REPUTATION, min(MAX_REPUTATION, int(value)))


class AgentStatus(str, Enum):
    """Agent availability status."""
    ONLINE = "online"
    OFFLINE = "offline"


class MessageType(str, Enum):
    TEXT = "text"
    DATA = "data"
    COMMAND = "command"
    RESPONSE = "response"


class MessagePriority(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class MessageStatus(str, Enum):
    PENDING = "pending"
    DELIVERED = "delivered"
    READ = "read"
    FAILED = "failed"


class ChannelType(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"


class EscrowStatus(str, Enum):
    CREATED = "created"
    FUNDED = "funded"
    COMPLETED = "completed"
    DISPUTED = "disputed"
    REFUNDED = "refunded"


# Allowed forward moves; anything else is rejected
MESSAGE_TRANSITIONS = {
    MessageStatus.PENDING: {MessageStatus.DELIVERED, MessageStatus.FAILED},
    MessageStatus.DELIVERED: {MessageStatus.READ, MessageStatus.FAILED},
    MessageStatus.READ: set(),
    MessageStatus.FAILED: set(),
}

ESCROW_TRANSITIONS = {
    EscrowStatus.CREATED: {EscrowStatus.FUNDED, EscrowStatus.DISPUTED},
    EscrowStatus.FUNDED: {EscrowStatus.COMPLETED, EscrowStatus.DISPUTED},
    EscrowStatus.DISPUTED: {EscrowStatus.REFUNDED},
    EscrowStatus.COMPLETED: set(),
    EscrowStatus.REFUNDED: set(),
}

ACTIVE_ESCROW_STATUSES = (EscrowStatus.CREATED, EscrowStatus.FUNDED)


@dataclass
class Agent:
    """
    A participant on the network.

    The local agent is created on registration; remote agents are created
    when discovered. Agents are never deleted, only marked offline.
    """
    agent_id: str
    name: str
    description: str = ""
    capabilities: List[str] = field(default_factory=list)
    reputation: int = DEFAULT_REPUTATION
    wallet_address: str = ""
    status: AgentStatus = AgentStatus.ONLINE
    framework: str = ""
    last_active: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self):
        # Capabilities are an ordered set of tags
        seen: List[str] = []
        for cap in self.capabilities:
            if cap not in seen:
                seen.append(cap)
        self.capabilities = seen
        self.reputation = clamp_reputation(self.reputation)
        if isinstance(self.status, str):
            self.status = AgentStatus(self.status)

    def has_capability(self, name: str) -> bool:
        return name in self.capabilities

    def is_online(self) -> bool:
        return self.status == AgentStatus.ONLINE

    def touch(self, now: Optional[datetime] = None):
        """Activity ping: refresh last_active and mark online."""
        self.last_active = now or datetime.utcnow()
        self.status = AgentStatus.ONLINE

    def mark_offline(self):
        self.status = AgentStatus.OFFLINE

    def adjust_reputation(self, delta: int) -> int:
        self.reputation = clamp_reputation(self.reputation + delta)
        return self.reputation

    def to_dict(self) -> Dict[str, Any]:
        return {
            "agent_id": self.agent_id,
            "name": self.name,
            "description": self.description,
            "capabilities": list(self.capabilities),
            "reputation": self.reputation,
            "wallet_address": self.wallet_address,
            "status": self.status.value,
            "framework": self.framework,
            "last_active": self.last_active.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Agent":
        return cls(
            agent_id=data["agent_id"],
            name=data.get("name", data["agent_id"]),
            description=data.get("description", ""),
            capabilities=list(data.get("capabilities", [])),
            reputation=data.get("reputation", DEFAULT_REPUTATION),
            wallet_address=data.get("wallet_address", ""),
            status=AgentStatus(data.get("status", "online")),
            framework=data.get("framework", ""),
            last_active=_parse_dt(data.get("last_active")),
        )


@dataclass
class Message:
    """
    A message sent between agents.

    Immutable after creation except for forward status transitions.
    """
    sender_id: str
    recipient_id: str
    content: str
    id: str = field(default_factory=lambda: new_id("msg"))
    type: MessageType = MessageType.TEXT
    priority: MessagePriority = MessagePriority.NORMAL
    encrypted: bool = True
    status: MessageStatus = MessageStatus.PENDING
    timestamp: datetime = field(default_factory=datetime.utcnow)
    transaction_hash: str = ""

    def can_transition(self, target: MessageStatus) -> bool:
        return target in MESSAGE_TRANSITIONS[self.status]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "sender_id": self.sender_id,
            "recipient_id": self.recipient_id,
            "content": self.content,
            "type": self.type.value,
            "priority": self.priority.value,
            "encrypted": self.encrypted,
            "status": self.status.value,
            "timestamp": self.timestamp.isoformat(),
            "transaction_hash": self.transaction_hash,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Message":
        return cls(
            id=data["id"],
            sender_id=data["sender_id"],
            recipient_id=data["recipient_id"],
            content=data.get("content", ""),
            type=MessageType(data.get("type", "text")),
            priority=MessagePriority(data.get("priority", "normal")),
            encrypted=data.get("encrypted", True),
            status=MessageStatus(data.get("status", "pending")),
            timestamp=_parse_dt(data.get("timestamp")),
            transaction_hash=data.get("transaction_hash", ""),
        )


@dataclass
class Channel:
    """
    A named collaboration space.

    The creator is always the first participant. Public channels are bounded
    by ``max_participants``; private channels admit invited agents only.
    """
    name: str
    description: str = ""
    id: str = field(default_factory=lambda: new_id("channel"))
    type: ChannelType = ChannelType.PUBLIC
    max_participants: int = 50
    participants: List[str] = field(default_factory=list)
    invited: List[str] = field(default_factory=list)
    creator_id: str = ""
    last_activity: datetime = field(default_factory=datetime.utcnow)
    transaction_hash: str = ""

    def is_private(self) -> bool:
        return self.type == ChannelType.PRIVATE

    def is_full(self) -> bool:
        return len(self.participants) >= self.max_participants

    def has_participant(self, agent_id: str) -> bool:
        return agent_id in self.participants

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "type": self.type.value,
            "max_participants": self.max_participants,
            "participants": list(self.participants),
            "invited": list(self.invited),
            "creator_id": self.creator_id,
            "last_activity": self.last_activity.isoformat(),
            "transaction_hash": self.transaction_hash,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Channel":
        return cls(
            id=data["id"],
            name=data["name"],
            description=data.get("description", ""),
            type=ChannelType(data.get("type", "public")),
            max_participants=data.get("max_participants", 50),
            participants=list(data.get("participants", [])),
            invited=list(data.get("invited", [])),
            creator_id=data.get("creator_id", ""),
            last_activity=_parse_dt(data.get("last_activity")),
            transaction_hash=data.get("transaction_hash", ""),
        )


@dataclass
class Escrow:
    """
    An amount-bearing agreement with a counterparty.

    ``amount`` is denominated in the smallest unit. Amount and counterparty
    never change after creation.
    """
    counterparty_id: str
    amount: float
    service: str = ""
    deliverables: List[str] = field(default_factory=list)
    creator_id: str = ""
    id: str = field(default_factory=lambda: new_id("escrow"))
    created_at: datetime = field(default_factory=datetime.utcnow)
    deadline: Optional[datetime] = None
    status: EscrowStatus = EscrowStatus.CREATED
    transaction_hash: str = ""

    def __post_init__(self):
        if self.deadline is None:
            self.deadline = self.created_at + ESCROW_WINDOW

    def is_active(self) -> bool:
        return self.status in ACTIVE_ESCROW_STATUSES

    def is_terminal(self) -> bool:
        return not ESCROW_TRANSITIONS[self.status]

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or datetime.utcnow()) > self.deadline

    def can_transition(self, target: EscrowStatus) -> bool:
        return target in ESCROW_TRANSITIONS[self.status]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "amount": self.amount,
            "counterparty_id": self.counterparty_id,
            "creator_id": self.creator_id,
            "service": self.service,
            "deliverables": list(self.deliverables),
            "created_at": self.created_at.isoformat(),
            "deadline": self.deadline.isoformat(),
            "status": self.status.value,
            "transaction_hash": self.transaction_hash,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Escrow":
        created_at = _parse_dt(data.get("created_at"))
        return cls(
            id=data["id"],
            amount=data["amount"],
            counterparty_id=data["counterparty_id"],
            creator_id=data.get("creator_id", ""),
            service=data.get("service", ""),
            deliverables=list(data.get("deliverables", [])),
            created_at=created_at,
            deadline=datetime.fromisoformat(data["deadline"]) if data.get("deadline") else None,
            status=EscrowStatus(data.get("status", "created")),
            transaction_hash=data.get("transaction_hash", ""),
        )
