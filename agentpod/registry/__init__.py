"""
Agent Registry - Discovery for the agent network.

Enables the coordinator to:
- Cache agents discovered on the network
- Filter agents by capability, framework, text, reputation and status
- Track activity and offline status
"""

from .directory import AgentDirectory
from .discovery import STATUS_ANY, DiscoveryFilter, filter_agents

__all__ = [
    "AgentDirectory",
    "DiscoveryFilter",
    "STATUS_ANY",
    "filter_agents",
]
