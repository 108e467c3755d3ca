"""
REST API routes for the AgentPod protocol.
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import PodConfig
from ..core.schema import ChannelType, MessagePriority, MessageStatus, MessageType
from ..evaluators import score_collaboration, score_interaction_quality, score_reputation
from ..exceptions import (
    AgentPodError,
    DeliveryFailedError,
    GatewayError,
    InvalidArgumentError,
    NotConfiguredError,
    NotFoundError,
    NotRegisteredError,
)
from ..gateway.memory import InMemoryGateway
from ..protocol import ProtocolCoordinator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/protocol", tags=["protocol"])

# Shared coordinator instance (will be set by main app)
_coordinator: Optional[ProtocolCoordinator] = None


def set_coordinator(coordinator: ProtocolCoordinator):
    """Set the coordinator instance to use."""
    global _coordinator
    _coordinator = coordinator


def get_coordinator() -> ProtocolCoordinator:
    """Get the coordinator instance."""
    global _coordinator
    if _coordinator is None:
        _coordinator = ProtocolCoordinator(InMemoryGateway(), config=PodConfig.from_env())
    return _coordinator


# === Error Mapping ===

STATUS_CODES = [
    (NotRegisteredError, 409),
    (NotFoundError, 404),
    (InvalidArgumentError, 400),
    (NotConfiguredError, 503),
    (DeliveryFailedError, 502),
    (GatewayError, 502),
]


def status_for(error: AgentPodError) -> int:
    for error_type, status in STATUS_CODES:
        if isinstance(error, error_type):
            return status
    return 500


async def agentpod_error_handler(request: Request, exc: AgentPodError) -> JSONResponse:
    """Render protocol errors as ``{"error": code, "message": ...}``."""
    status = status_for(exc)
    if status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=status, content=exc.to_dict())


# === Request Models ===

class RegisterRequest(BaseModel):
    name: Optional[str] = None
    capabilities: list[str] = []


class DiscoverRequest(BaseModel):
    capabilities: list[str] = []
    framework: Optional[str] = None
    search_term: Optional[str] = None
    min_reputation: Optional[int] = None
    status: Optional[str] = None
    limit: Optional[int] = None
    offset: int = 0


class SendMessageRequest(BaseModel):
    recipient_id: str
    content: str
    type: MessageType = MessageType.TEXT
    priority: MessagePriority = MessagePriority.NORMAL
    encrypted: bool = True


class CreateChannelRequest(BaseModel):
    name: str
    description: str = ""
    type: ChannelType = ChannelType.PUBLIC
    max_participants: int = 50


class InviteRequest(BaseModel):
    agent_id: str


class CreateEscrowRequest(BaseModel):
    counterparty_id: str
    amount: float
    service: str = ""
    deliverables: list[str] = []


class ReputationUpdateRequest(BaseModel):
    delta: int


class EvaluateRequest(BaseModel):
    text: str


# === Agent Routes ===

@router.post("/register")
async def register(request: RegisterRequest):
    """Register the local agent (no-op if already registered)."""
    coordinator = get_coordinator()
    agent = await coordinator.register(request.name, request.capabilities or None)
    return agent.to_dict()


@router.get("/agent")
async def get_status():
    """Registration status, agent snapshot and masked config."""
    return get_coordinator().describe()


@router.post("/discover")
async def discover(request: DiscoverRequest):
    """Discover agents on the network."""
    agents = await get_coordinator().discover_agents(request.model_dump())
    return [a.to_dict() for a in agents]


@router.get("/agents/{agent_id}")
async def get_agent(agent_id: str):
    agent = get_coordinator().get_agent(agent_id)
    if not agent:
        raise HTTPException(status_code=404, detail="Agent not found")
    return agent.to_dict()


# === Message Routes ===

@router.post("/messages")
async def send_message(request: SendMessageRequest):
    message = await get_coordinator().send_message(
        request.recipient_id,
        request.content,
        {"type": request.type, "priority": request.priority, "encrypted": request.encrypted},
    )
    return message.to_dict()


@router.get("/messages")
async def list_messages(
    sender_id: Optional[str] = None,
    recipient_id: Optional[str] = None,
    type: Optional[MessageType] = None,
    status: Optional[MessageStatus] = None,
    since: Optional[datetime] = None,
    unread_only: bool = False,
    limit: Optional[int] = None,
):
    """Messages, most recent first."""
    messages = await get_coordinator().get_messages({
        "sender_id": sender_id,
        "recipient_id": recipient_id,
        "type": type,
        "status": status,
        "since": since,
        "unread_only": unread_only,
        "limit": limit,
    })
    return [m.to_dict() for m in messages]


@router.post("/messages/{message_id}/read")
async def mark_read(message_id: str):
    message = await get_coordinator().mark_message_read(message_id)
    return message.to_dict()


# === Channel Routes ===

@router.post("/channels")
async def create_channel(request: CreateChannelRequest):
    channel = await get_coordinator().create_channel(
        request.name,
        request.description,
        {"type": request.type, "max_participants": request.max_participants},
    )
    return channel.to_dict()


@router.get("/channels")
async def list_channels():
    return [c.to_dict() for c in get_coordinator().list_channels()]


@router.get("/channels/{channel_id}")
async def get_channel(channel_id: str):
    channel = get_coordinator().get_channel(channel_id)
    if not channel:
        raise HTTPException(status_code=404, detail="Channel not found")
    return channel.to_dict()


@router.post("/channels/{channel_id}/join")
async def join_channel(channel_id: str):
    joined = await get_coordinator().join_channel(channel_id)
    return {"channel_id": channel_id, "joined": joined}


@router.post("/channels/{channel_id}/leave")
async def leave_channel(channel_id: str):
    left = await get_coordinator().leave_channel(channel_id)
    return {"channel_id": channel_id, "left": left}


@router.post("/channels/{channel_id}/invite")
async def invite(channel_id: str, request: InviteRequest):
    channel = await get_coordinator().invite_to_channel(channel_id, request.agent_id)
    return channel.to_dict()


@router.get("/channels/{channel_id}/participants")
async def participants(channel_id: str):
    agents = await get_coordinator().get_channel_participants(channel_id)
    return [a.to_dict() for a in agents]


# === Escrow Routes ===

@router.post("/escrows")
async def create_escrow(request: CreateEscrowRequest):
    escrow = await get_coordinator().create_escrow(
        request.counterparty_id, request.amount, request.service, request.deliverables
    )
    return escrow.to_dict()


@router.get("/escrows")
async def list_escrows(status: Optional[str] = None):
    try:
        escrows = get_coordinator().list_escrows(status)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Unknown escrow status: {status}")
    return [e.to_dict() for e in escrows]


@router.get("/escrows/{escrow_id}")
async def get_escrow(escrow_id: str):
    escrow = get_coordinator().get_escrow(escrow_id)
    if not escrow:
        raise HTTPException(status_code=404, detail="Escrow not found")
    return escrow.to_dict()


_ESCROW_TRANSITIONS = {
    "fund": "fund_escrow",
    "complete": "complete_escrow",
    "dispute": "dispute_escrow",
    "refund": "refund_escrow",
}


@router.post("/escrows/{escrow_id}/{transition}")
async def move_escrow(escrow_id: str, transition: str):
    """Advance an escrow: fund, complete, dispute or refund."""
    method = _ESCROW_TRANSITIONS.get(transition)
    if method is None:
        raise HTTPException(status_code=404, detail=f"Unknown escrow transition: {transition}")
    escrow = await getattr(get_coordinator(), method)(escrow_id)
    return escrow.to_dict()


# === Reputation, Stats & Health ===

@router.get("/reputation")
async def get_reputation(agent_id: Optional[str] = None):
    coordinator = get_coordinator()
    reputation = await coordinator.get_agent_reputation(agent_id)
    return {"agent_id": agent_id, "reputation": reputation}


@router.post("/reputation/{agent_id}")
async def update_reputation(agent_id: str, request: ReputationUpdateRequest):
    reputation = await get_coordinator().update_agent_reputation(agent_id, request.delta)
    return {"agent_id": agent_id, "reputation": reputation}


@router.get("/stats")
async def protocol_stats():
    stats = await get_coordinator().get_protocol_stats()
    return stats.to_dict()


@router.get("/network")
async def network_stats():
    stats = await get_coordinator().get_network_stats()
    return stats.to_dict()


@router.get("/balance")
async def balance():
    return {"balance": await get_coordinator().get_balance()}


@router.get("/health")
async def health():
    healthy = await get_coordinator().health_check()
    return {"status": "healthy" if healthy else "unhealthy", "healthy": healthy}


@router.post("/evaluate")
async def evaluate(request: EvaluateRequest):
    """Run the three text scorers over one message."""
    return {
        "collaboration": score_collaboration(request.text).to_dict(),
        "reputation": score_reputation(request.text).to_dict(),
        "interaction_quality": score_interaction_quality(request.text).to_dict(),
    }
