"""
AgentPod Core

Protocol entity models shared by every store and the coordinator.
"""

from .schema import (
    ACTIVE_ESCROW_STATUSES,
    DEFAULT_REPUTATION,
    ESCROW_TRANSITIONS,
    ESCROW_WINDOW,
    MESSAGE_TRANSITIONS,
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
    clamp_reputation,
    new_id,
)

__all__ = [
    "ACTIVE_ESCROW_STATUSES",
    "DEFAULT_REPUTATION",
    "ESCROW_TRANSITIONS",
    "ESCROW_WINDOW",
    "MESSAGE_TRANSITIONS",
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
    "clamp_reputation",
    "new_id",
]
