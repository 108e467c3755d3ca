"""
AgentPod Sharing Module

Messages and channels shared between agents.
"""

from .channels import Admission, ChannelRegistry
from .messages import MessageFilter, MessageLog

__all__ = ["Admission", "ChannelRegistry", "MessageFilter", "MessageLog"]
