"""
AgentDirectory - cache of remote agents discovered on the network.
"""

from datetime import datetime
from typing import Iterator, List, Optional

from ..core.schema import Agent, AgentStatus
from ..storage.kv import KeyValueStore, MemoryStore
from .discovery import DiscoveryFilter, filter_agents


class AgentDirectory:
    """
    Directory of known remote agents, keyed by agent id.

    Features:
    - Upsert discovered agents (overwrite by id, original position kept)
    - Look up agents by id
    - Filtered listing in insertion order
    - Activity pings and offline marking (agents are never removed)
    """

    def __init__(self, store: Optional[KeyValueStore] = None):
        """
        Initialize the directory.

        Args:
            store: Backing store. Defaults to an in-memory store.
        """
        self._store = store if store is not None else MemoryStore()

    def upsert(self, agent: Agent) -> Agent:
        """
        Insert an agent or overwrite the existing record with the same id.

        Args:
            agent: Agent to store

        Returns:
            The stored agent
        """
        self._store.put(agent.agent_id, agent.to_dict())
        return agent

    def get(self, agent_id: str) -> Optional[Agent]:
        """
        Get an agent by ID.

        Returns:
            Agent if found, None otherwise
        """
        data = self._store.get(agent_id)
        if data:
            return Agent.from_dict(data)
        return None

    def __contains__(self, agent_id: str) -> bool:
        return agent_id in self._store

    def __len__(self) -> int:
        return len(self._store)

    def __iter__(self) -> Iterator[Agent]:
        for _, data in self._store.iterate():
            yield Agent.from_dict(data)

    def list_all(self) -> List[Agent]:
        """List all known agents in insertion order."""
        return list(self)

    def discover(self, criteria: Optional[DiscoveryFilter] = None) -> List[Agent]:
        """Filter the cached agents without contacting the network."""
        return filter_agents(self, criteria)

    def touch(self, agent_id: str, now: Optional[datetime] = None) -> bool:
        """
        Record activity for an agent.

        Returns:
            True if agent exists and was updated
        """
        agent = self.get(agent_id)
        if agent is None:
            return False
        agent.touch(now)
        self.upsert(agent)
        return True

    def mark_offline(self, agent_id: str) -> bool:
        """
        Mark an agent offline.

        Returns:
            True if agent exists and was updated
        """
        agent = self.get(agent_id)
        if agent is None:
            return False
        agent.mark_offline()
        self.upsert(agent)
        return True

    def adjust_reputation(self, agent_id: str, delta: int) -> Optional[int]:
        """Apply a reputation delta; returns the new score or None if unknown."""
        agent = self.get(agent_id)
        if agent is None:
            return None
        score = agent.adjust_reputation(delta)
        self.upsert(agent)
        return score

    def count(self, online_only: bool = False) -> int:
        """Count known agents."""
        if online_only:
            return sum(1 for a in self if a.status == AgentStatus.ONLINE)
        return len(self)
