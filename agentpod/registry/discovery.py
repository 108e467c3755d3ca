"""
Agent discovery filtering.

``filter_agents`` is a pure function: it never touches a store and keeps
the input order, so pagination is stable across calls over the same
directory. Callers wanting reputation order sort the result themselves.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from ..core.schema import Agent, AgentStatus
from ..exceptions import InvalidArgumentError

STATUS_ANY = "any"
_VALID_STATUSES = {s.value for s in AgentStatus} | {STATUS_ANY}


@dataclass
class DiscoveryFilter:
    """
    Criteria for agent discovery.

    All fields are optional and combined with AND, except ``capabilities``
    which matches if the agent has any of them. ``offset``/``limit`` apply
    last, to the filtered sequence.
    """
    capabilities: List[str] = field(default_factory=list)
    framework: Optional[str] = None
    search_term: Optional[str] = None
    min_reputation: Optional[int] = None
    status: Optional[str] = None
    limit: Optional[int] = None
    offset: int = 0

    def __post_init__(self):
        if isinstance(self.status, AgentStatus):
            self.status = self.status.value
        if self.status is not None and self.status not in _VALID_STATUSES:
            raise InvalidArgumentError(f"Unknown status filter: {self.status!r}")
        if self.limit is not None and self.limit < 0:
            raise InvalidArgumentError("limit must be >= 0")
        if self.offset < 0:
            raise InvalidArgumentError("offset must be >= 0")

    def matches(self, agent: Agent) -> bool:
        """Check every non-pagination predicate against one agent."""
        if self.capabilities and not any(cap in agent.capabilities for cap in self.capabilities):
            return False

        if self.framework and agent.framework != self.framework:
            return False

        if self.search_term:
            term = self.search_term.lower()
            haystack = [agent.name.lower(), agent.description.lower()]
            haystack.extend(cap.lower() for cap in agent.capabilities)
            if not any(term in text for text in haystack):
                return False

        if self.min_reputation is not None and agent.reputation < self.min_reputation:
            return False

        if self.status and self.status != STATUS_ANY and agent.status.value != self.status:
            return False

        return True

    def to_dict(self) -> dict:
        return {
            "capabilities": list(self.capabilities),
            "framework": self.framework,
            "search_term": self.search_term,
            "min_reputation": self.min_reputation,
            "status": self.status,
            "limit": self.limit,
            "offset": self.offset,
        }

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "DiscoveryFilter":
        data = data or {}
        return cls(
            capabilities=list(data.get("capabilities") or []),
            framework=data.get("framework"),
            search_term=data.get("search_term"),
            min_reputation=data.get("min_reputation"),
            status=data.get("status"),
            limit=data.get("limit"),
            offset=data.get("offset") or 0,
        )


def filter_agents(agents: Iterable[Agent], criteria: Optional[DiscoveryFilter] = None) -> List[Agent]:
    """
    Apply a discovery filter to a collection of agents.

    Args:
        agents: Agents in directory (insertion) order
        criteria: Filter to apply; None returns every agent

    Returns:
        Matching agents, paginated, in input order
    """
    agents = list(agents)
    if criteria is None:
        return agents

    matched = [a for a in agents if criteria.matches(a)]

    start = criteria.offset
    if criteria.limit is None:
        return matched[start:]
    return matched[start:start + criteria.limit]
