"""
Protocol state aggregate.

The single mutable root owned by a ``ProtocolCoordinator``: the local
agent, the agent directory, channels, messages, escrows and the last
sync time.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from ..core.schema import Agent
from ..escrow.ledger import EscrowLedger
from ..registry.directory import AgentDirectory
from ..sharing.channels import ChannelRegistry
from ..sharing.messages import MessageLog
from ..storage.kv import KeyValueStore, MemoryStore, SQLiteStore

_SELF_KEY = "self"


class ProtocolState:
    """
    Everything the coordinator knows.

    ``is_registered`` is derived from the local agent slot, so the two can
    never disagree.
    """

    def __init__(
        self,
        directory: Optional[AgentDirectory] = None,
        channels: Optional[ChannelRegistry] = None,
        messages: Optional[MessageLog] = None,
        escrows: Optional[EscrowLedger] = None,
        identity: Optional[KeyValueStore] = None,
        last_sync: Optional[datetime] = None,
    ):
        self.directory = directory if directory is not None else AgentDirectory()
        self.channels = channels if channels is not None else ChannelRegistry()
        self.messages = messages if messages is not None else MessageLog()
        self.escrows = escrows if escrows is not None else EscrowLedger()
        self._identity = identity if identity is not None else MemoryStore()
        self.last_sync = last_sync or datetime.utcnow()

    @classmethod
    def persistent(cls, db_path: str) -> "ProtocolState":
        """Build a state whose stores all live in one SQLite file."""
        return cls(
            directory=AgentDirectory(SQLiteStore(db_path, "agents")),
            channels=ChannelRegistry(SQLiteStore(db_path, "channels")),
            messages=MessageLog(SQLiteStore(db_path, "messages")),
            escrows=EscrowLedger(SQLiteStore(db_path, "escrows")),
            identity=SQLiteStore(db_path, "identity"),
        )

    @property
    def agent(self) -> Optional[Agent]:
        data = self._identity.get(_SELF_KEY)
        if data:
            return Agent.from_dict(data)
        return None

    @property
    def is_registered(self) -> bool:
        return self.agent is not None

    def set_agent(self, agent: Agent):
        self._identity.put(_SELF_KEY, agent.to_dict())


@dataclass
class ProtocolStats:
    """Aggregate counts over the protocol state."""
    total_agents: int
    total_channels: int
    total_messages: int
    active_escrows: int
    last_sync: datetime
    is_registered: bool
    current_agent: Optional[Agent] = None
    online_agents: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_agents": self.total_agents,
            "total_channels": self.total_channels,
            "total_messages": self.total_messages,
            "active_escrows": self.active_escrows,
            "online_agents": self.online_agents,
            "last_sync": self.last_sync.isoformat(),
            "is_registered": self.is_registered,
            "current_agent": self.current_agent.to_dict() if self.current_agent else None,
        }
