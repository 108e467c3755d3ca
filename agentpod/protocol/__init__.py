"""
AgentPod Protocol Module

The coordinator and the state it owns.
"""

from .coordinator import ChannelOptions, MessageOptions, ProtocolCoordinator
from .state import ProtocolState, ProtocolStats

__all__ = [
    "ChannelOptions",
    "MessageOptions",
    "ProtocolCoordinator",
    "ProtocolState",
    "ProtocolStats",
]
