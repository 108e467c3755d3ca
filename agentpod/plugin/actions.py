"""
Protocol actions.

Each action pairs a cheap ``validate`` (keyword and configuration checks
on the turn's text) with a ``handler`` that pulls parameters out of the
text and calls the coordinator.
"""

import re
from typing import List, Optional, Tuple

from ..core.schema import MessagePriority, MessageType
from ..exceptions import NotRegisteredError
from .contracts import Action, ActionResult, Context

DISCOVERY_DISPLAY_LIMIT = 10

_RECIPIENT_RE = re.compile(r"\b(?:send to|to|message|contact)\s+(?=([a-zA-Z0-9_-]+))", re.IGNORECASE)
_QUOTED_RE = re.compile(r"[\"'](.*?)[\"']")
_CHANNEL_ID_RE = re.compile(r"channel_[a-zA-Z0-9_]+", re.IGNORECASE)
_AFTER_JOIN_RE = re.compile(r"(?:join|enter|connect to)\s+(?:the\s+)?([^,.!?\n]+)", re.IGNORECASE)
_COUNTERPARTY_RE = re.compile(r"\b(?:with|to|for)\s+([a-zA-Z0-9_]+)", re.IGNORECASE)
_SOL_AMOUNT_RE = re.compile(r"(\d+(?:\.\d+)?)\s*sol", re.IGNORECASE)
_ANY_AMOUNT_RE = re.compile(r"(\d+(?:\.\d+)?)")
_REPUTATION_TARGET_RE = re.compile(r"\b(?:for|of|agent)\s+([a-zA-Z0-9_]+)", re.IGNORECASE)

MIN_MESSAGE_LENGTH = 10
_RECIPIENT_STOPWORDS = {"to", "about", "with", "the", "a", "an", "saying", "that"}


def _has_any(text: str, keywords) -> bool:
    return any(keyword in text for keyword in keywords)


def _config_ok(context: Context) -> bool:
    return not context.config_errors()


def _require_registered(context: Context, operation: str):
    if not context.coordinator.is_registered:
        raise NotRegisteredError(operation)


# ==================== Intent Extraction ====================

def extract_capability(text: str) -> Optional[str]:
    lowered = text.lower()
    for capability in ("trading", "research", "content"):
        if capability in lowered:
            return capability
    return None


def extract_recipient(text: str) -> Optional[str]:
    for match in _RECIPIENT_RE.finditer(text):
        if match.group(1).lower() not in _RECIPIENT_STOPWORDS:
            return match.group(1)
    return None


def extract_message_content(text: str, recipient_id: str) -> str:
    """Strip the command phrasing, leaving what should be sent."""
    content = text
    escaped = re.escape(recipient_id)
    for pattern in (
        f"send message to {escaped}",
        f"message {escaped}",
        f"contact {escaped}",
        "send message",
        "message",
    ):
        content = re.sub(pattern, "", content, flags=re.IGNORECASE).strip()
    return re.sub(r"^(about|saying|that|with)", "", content, flags=re.IGNORECASE).strip()


def classify_message(content: str) -> Tuple[MessageType, MessagePriority]:
    lowered = content.lower()
    priority = MessagePriority.NORMAL
    if _has_any(lowered, ("urgent", "asap")):
        priority = MessagePriority.URGENT
    elif _has_any(lowered, ("important", "priority")):
        priority = MessagePriority.HIGH

    message_type = MessageType.TEXT
    if _has_any(lowered, ("data", "report")):
        message_type = MessageType.DATA
    elif _has_any(lowered, ("command", "execute")):
        message_type = MessageType.COMMAND
    return message_type, priority


def extract_channel_name(text: str) -> str:
    quoted = _QUOTED_RE.search(text)
    if quoted and quoted.group(1):
        return quoted.group(1)
    lowered = text.lower()
    if "trading" in lowered:
        return "Trading Collaboration Hub"
    if "research" in lowered:
        return "Research Network"
    return "New Collaboration Channel"


def _slug(name: str) -> str:
    return re.sub(r"\s+", "_", name.strip().lower())


_WELL_KNOWN_CHANNELS = (
    ("trading", "trading_signals_main"),
    ("research", "research_collaboration"),
    ("defi", "defi_strategies"),
    ("content", "content_creators"),
)


def extract_channel_ref(text: str) -> Tuple[Optional[str], Optional[str]]:
    """
    Work out which channel a join request names.

    Returns:
        (channel id, channel name); either may be None
    """
    match = _CHANNEL_ID_RE.search(text)
    if match:
        return match.group(0), None
    quoted = _QUOTED_RE.search(text)
    if quoted and quoted.group(1):
        return None, quoted.group(1)
    lowered = text.lower()
    for keyword, channel_id in _WELL_KNOWN_CHANNELS:
        if keyword in lowered:
            return channel_id, None
    after = _AFTER_JOIN_RE.search(text)
    if after:
        name = after.group(1).strip()
        return _slug(name), name
    return None, None


ESCROW_SERVICES = (
    "trading", "research", "analysis", "content", "model training",
    "development", "consulting", "data analysis", "ai services",
)


def extract_escrow_terms(text: str) -> Tuple[Optional[str], float, str, List[str]]:
    """Counterparty, amount, service label and deliverables from a request."""
    counterparty = _COUNTERPARTY_RE.search(text)
    amount_match = _SOL_AMOUNT_RE.search(text) or _ANY_AMOUNT_RE.search(text)
    amount = float(amount_match.group(1)) if amount_match else 0.0

    lowered = text.lower()
    service = next((s for s in ESCROW_SERVICES if s in lowered), None)
    service = f"{service[0].upper()}{service[1:]} Services" if service else "AI Collaboration Services"

    if "trading" in lowered:
        deliverables = ["Trading strategies", "Market analysis", "Performance metrics"]
    elif "research" in lowered:
        deliverables = ["Research report", "Data analysis", "Findings summary"]
    elif "model" in lowered or "training" in lowered:
        deliverables = ["Trained model weights", "Performance metrics", "Documentation"]
    elif "content" in lowered:
        deliverables = ["Content deliverables", "Quality review", "Final approval"]
    else:
        deliverables = ["Project deliverables", "Quality assurance", "Final completion"]

    return (counterparty.group(1) if counterparty else None), amount, service, deliverables


def trust_level(reputation: int) -> str:
    for floor, label in ((90, "Exceptional"), (80, "High"), (70, "Good"), (60, "Moderate"), (50, "Neutral")):
        if reputation >= floor:
            return label
    return "Building"


def experience_level(reputation: int) -> str:
    if reputation >= 80:
        return "Expert"
    if reputation >= 60:
        return "Intermediate"
    return "Beginner"


# ==================== Register ====================

REGISTER_KEYWORDS = ("register", "join", "create", "setup", "initialize", "enroll", "sign up", "onboard")
POD_KEYWORDS = ("agentpod", "pod network", "blockchain", "protocol", "network", "identity", "agent", "profile")


def validate_register(context: Context) -> bool:
    text = context.lowered
    return _has_any(text, REGISTER_KEYWORDS) and _has_any(text, POD_KEYWORDS)


async def handle_register(context: Context) -> ActionResult:
    coordinator = context.coordinator
    if coordinator.is_registered:
        agent = coordinator.current_agent
        return ActionResult(
            True,
            f"Already registered as {agent.name} ({agent.agent_id}).",
            {"agent": agent.to_dict(), "already_registered": True},
        )
    agent = await coordinator.register()
    return ActionResult(
        True,
        f"Registered {agent.name} on the network as {agent.agent_id}. "
        f"Capabilities: {', '.join(agent.capabilities)}. Reputation: {agent.reputation}/100.",
        {"agent": agent.to_dict(), "already_registered": False},
    )


# ==================== Discover ====================

DISCOVER_KEYWORDS = ("discover", "find", "search", "look for", "list", "show")
DISCOVER_TARGETS = ("agent", "bot", "assistant", "trading", "research", "content")


def validate_discover(context: Context) -> bool:
    text = context.lowered
    return _config_ok(context) and _has_any(text, DISCOVER_KEYWORDS) and _has_any(text, DISCOVER_TARGETS)


async def handle_discover(context: Context) -> ActionResult:
    _require_registered(context, "discover_agents")
    capability = extract_capability(context.text)
    criteria = {"capabilities": [capability]} if capability else {}
    agents = await context.coordinator.discover_agents(criteria)
    if not agents:
        return ActionResult(True, "No agents matching your criteria were found on the network.", {"agents": []})

    lines = [
        f"{i}. {a.name} ({a.agent_id}) - {a.framework}, reputation {a.reputation}/100, {a.status.value}"
        for i, a in enumerate(agents[:DISCOVERY_DISPLAY_LIMIT], 1)
    ]
    noun = "agent" if len(agents) == 1 else "agents"
    return ActionResult(
        True,
        f"Discovered {len(agents)} {noun}:\n" + "\n".join(lines),
        {"agents": [a.to_dict() for a in agents], "capability": capability},
    )


# ==================== Send Message ====================

def validate_send_message(context: Context) -> bool:
    if not _has_any(context.lowered, ("message", "send", "contact")):
        return False
    return _config_ok(context) and extract_recipient(context.text) is not None


async def handle_send_message(context: Context) -> ActionResult:
    _require_registered(context, "send_message")
    recipient_id = extract_recipient(context.text)
    if not recipient_id:
        return ActionResult(False, "Please say which agent to message.", {"error": "MISSING_RECIPIENT"})

    content = extract_message_content(context.text, recipient_id)
    if len(content) < MIN_MESSAGE_LENGTH:
        return ActionResult(False, "Message content too short.", {"error": "CONTENT_TOO_SHORT"})

    message_type, priority = classify_message(content)
    message = await context.coordinator.send_message(
        recipient_id, content, {"type": message_type, "priority": priority, "encrypted": True}
    )
    return ActionResult(
        True,
        f"Message {message.id} sent to {recipient_id} ({priority.value} priority).",
        {"message": message.to_dict()},
    )


# ==================== Channels ====================

def validate_create_channel(context: Context) -> bool:
    text = context.lowered
    return "create" in text and ("channel" in text or "group" in text)


async def handle_create_channel(context: Context) -> ActionResult:
    _require_registered(context, "create_channel")
    name = extract_channel_name(context.text)
    channel = await context.coordinator.create_channel(
        name,
        f"Collaborative workspace for {name.lower()}",
        {"type": "public", "max_participants": 25},
    )
    return ActionResult(
        True,
        f"Channel '{channel.name}' created with id {channel.id}.",
        {"channel": channel.to_dict()},
    )


JOIN_KEYWORDS = ("join", "enter", "connect to", "subscribe to", "participate in", "access", "become member")
CHANNEL_KEYWORDS = ("channel", "group", "room", "space", "collaboration", "chat", "community", "network")


def validate_join_channel(context: Context) -> bool:
    text = context.lowered
    if _CHANNEL_ID_RE.search(text):
        return True
    return _has_any(text, JOIN_KEYWORDS) and _has_any(text, CHANNEL_KEYWORDS)


async def handle_join_channel(context: Context) -> ActionResult:
    _require_registered(context, "join_channel")
    coordinator = context.coordinator
    channel_id, name = extract_channel_ref(context.text)
    if name:
        known = next((c for c in coordinator.list_channels() if c.name.lower() == name.lower()), None)
        if known is not None:
            channel_id = known.id
        elif channel_id is None:
            channel_id = _slug(name)
    if not channel_id:
        return ActionResult(False, "Please say which channel to join.", {"error": "MISSING_CHANNEL"})

    if not await coordinator.join_channel(channel_id):
        return ActionResult(
            False,
            f"Could not join channel {channel_id}. It may not exist, be full, or require an invitation.",
            {"error": "JOIN_FAILED", "channel_id": channel_id},
        )
    channel = coordinator.get_channel(channel_id)
    return ActionResult(
        True,
        f"Joined channel {channel.name} ({channel_id}).",
        {"channel": channel.to_dict()},
    )


# ==================== Escrow ====================

ESCROW_KEYWORDS = (
    "escrow", "secure payment", "contract", "collaboration agreement",
    "secure transaction", "payment protection", "funds protection",
)
ESCROW_ACTION_KEYWORDS = ("create", "start", "setup", "establish", "make", "begin", "initiate")
VALUE_KEYWORDS = ("sol", "amount", "payment", "price", "cost", "fee")


def validate_create_escrow(context: Context) -> bool:
    text = context.lowered
    if _has_any(text, ESCROW_KEYWORDS):
        return True
    return _has_any(text, ESCROW_ACTION_KEYWORDS) and _has_any(text, VALUE_KEYWORDS)


async def handle_create_escrow(context: Context) -> ActionResult:
    _require_registered(context, "create_escrow")
    counterparty, amount, service, deliverables = extract_escrow_terms(context.text)
    if not counterparty:
        return ActionResult(False, "Please say which agent the escrow is with.", {"error": "MISSING_COUNTERPARTY"})

    escrow = await context.coordinator.create_escrow(counterparty, amount, service, deliverables)
    return ActionResult(
        True,
        f"Escrow {escrow.id} created: {escrow.amount} SOL with {counterparty} for {service}, "
        f"due {escrow.deadline.isoformat()}.",
        {"escrow": escrow.to_dict()},
    )


# ==================== Stats ====================

STATS_KEYWORDS = (
    "statistics", "stats", "analytics", "metrics", "status", "health",
    "overview", "dashboard", "report", "numbers", "data",
)
PROTOCOL_KEYWORDS = ("protocol", "network", "system", "pod", "platform", "blockchain", "ecosystem")
VIEW_KEYWORDS = ("show", "get", "display", "check", "view", "see", "tell me", "what's", "how many")


def validate_protocol_stats(context: Context) -> bool:
    text = context.lowered
    hits = [_has_any(text, STATS_KEYWORDS), _has_any(text, PROTOCOL_KEYWORDS), _has_any(text, VIEW_KEYWORDS)]
    return sum(hits) >= 2


async def handle_protocol_stats(context: Context) -> ActionResult:
    coordinator = context.coordinator
    stats = await coordinator.get_protocol_stats()
    network = await coordinator.get_network_stats()
    return ActionResult(
        True,
        f"Network {network.health}: block {network.block_height}. "
        f"Known agents: {stats.total_agents}, channels: {stats.total_channels}, "
        f"messages: {stats.total_messages}, active escrows: {stats.active_escrows}.",
        {"protocol": stats.to_dict(), "network": network.to_dict()},
    )


# ==================== Reputation ====================

REPUTATION_KEYWORDS = (
    "reputation", "trust", "score", "rating", "credibility", "trustworthiness", "standing", "rank",
)
REPUTATION_ACTIONS = ("get", "check", "show", "display", "tell me", "what's", "what is", "how is", "view")
REFERENCE_KEYWORDS = ("my", "your", "their", "his", "her", "for", "of", "agent")


def validate_reputation(context: Context) -> bool:
    text = context.lowered
    return _has_any(text, REPUTATION_KEYWORDS) and (
        _has_any(text, REPUTATION_ACTIONS) or _has_any(text, REFERENCE_KEYWORDS)
    )


async def handle_reputation(context: Context) -> ActionResult:
    coordinator = context.coordinator
    match = _REPUTATION_TARGET_RE.search(context.text)
    target = match.group(1) if match else None
    target_known = target is None or coordinator.get_agent(target) is not None

    reputation = await coordinator.get_agent_reputation(target)
    subject = target or (coordinator.current_agent.agent_id if coordinator.is_registered else "you")
    return ActionResult(
        True,
        f"Reputation of {subject}: {reputation}/100 ({trust_level(reputation)} trust, "
        f"{experience_level(reputation)}).",
        {
            "agent_id": subject,
            "reputation": reputation,
            "trust_level": trust_level(reputation),
            "experience_level": experience_level(reputation),
            "known": target_known,
        },
    )


ACTIONS = [
    Action(
        name="REGISTER_AGENT",
        description="Register this agent on the AgentPod network",
        validate=validate_register,
        handler=handle_register,
        similes=("REGISTER", "JOIN_NETWORK", "CREATE_IDENTITY"),
        examples=("Register me on the AgentPod network",),
    ),
    Action(
        name="DISCOVER_AGENTS",
        description="Discover other agents on the network",
        validate=validate_discover,
        handler=handle_discover,
        similes=("FIND_AGENTS", "SEARCH_AGENTS", "LIST_AGENTS"),
        examples=("Find trading agents",),
    ),
    Action(
        name="SEND_MESSAGE",
        description="Send a message to another agent",
        validate=validate_send_message,
        handler=handle_send_message,
        similes=("MESSAGE_AGENT", "CONTACT_AGENT"),
        examples=("Send message to trading_bot_001 asking for market analysis",),
    ),
    Action(
        name="CREATE_CHANNEL",
        description="Create a collaboration channel",
        validate=validate_create_channel,
        handler=handle_create_channel,
        similes=("CREATE_GROUP", "NEW_CHANNEL"),
        examples=("Create a channel called 'Alpha Desk'",),
    ),
    Action(
        name="JOIN_CHANNEL",
        description="Join an existing channel",
        validate=validate_join_channel,
        handler=handle_join_channel,
        similes=("ENTER_CHANNEL", "SUBSCRIBE_CHANNEL"),
        examples=("Join the trading signals channel",),
    ),
    Action(
        name="CREATE_ESCROW",
        description="Create an escrow agreement with another agent",
        validate=validate_create_escrow,
        handler=handle_create_escrow,
        similes=("SECURE_PAYMENT", "START_CONTRACT"),
        examples=("Create escrow with research_pro_v2 for 5 SOL research work",),
    ),
    Action(
        name="GET_PROTOCOL_STATS",
        description="Show network and protocol statistics",
        validate=validate_protocol_stats,
        handler=handle_protocol_stats,
        similes=("NETWORK_STATS", "PROTOCOL_STATUS"),
        examples=("Show network stats",),
    ),
    Action(
        name="GET_REPUTATION",
        description="Check the reputation of this or another agent",
        validate=validate_reputation,
        handler=handle_reputation,
        similes=("CHECK_REPUTATION", "TRUST_SCORE"),
        examples=("What's the reputation of trading_bot_001?",),
    ),
]
