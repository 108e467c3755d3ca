"""
Channel Registry

Named collaboration spaces and their participant membership.
"""

from datetime import datetime
from enum import Enum
from typing import Iterator, List, Optional

from ..core.schema import Channel
from ..exceptions import InvalidArgumentError, NotFoundError
from ..storage.kv import KeyValueStore, MemoryStore


class Admission(str, Enum):
    """Outcome of checking whether an agent may join a channel."""
    ALLOWED = "allowed"
    ALREADY_MEMBER = "already_member"
    NOT_FOUND = "not_found"
    FULL = "full"
    NOT_INVITED = "not_invited"


class ChannelRegistry:
    """
    Registry of channels, keyed by channel id.

    Channels are never deleted. Membership changes go through
    ``add_participant``/``remove_participant`` so ``last_activity`` stays
    current.
    """

    def __init__(self, store: Optional[KeyValueStore] = None):
        self._store = store if store is not None else MemoryStore()

    def add(self, channel: Channel) -> Channel:
        """
        Store a newly created channel.

        Raises:
            InvalidArgumentError: if the channel id is taken or the bound is < 1
        """
        if channel.max_participants < 1:
            raise InvalidArgumentError("max_participants must be at least 1")
        if channel.id in self._store:
            raise InvalidArgumentError(f"Duplicate channel id: {channel.id}")
        self._store.put(channel.id, channel.to_dict())
        return channel

    def get(self, channel_id: str) -> Optional[Channel]:
        data = self._store.get(channel_id)
        if data:
            return Channel.from_dict(data)
        return None

    def require(self, channel_id: str) -> Channel:
        channel = self.get(channel_id)
        if channel is None:
            raise NotFoundError("Channel", channel_id)
        return channel

    def __contains__(self, channel_id: str) -> bool:
        return channel_id in self._store

    def __len__(self) -> int:
        return len(self._store)

    def __iter__(self) -> Iterator[Channel]:
        for _, data in self._store.iterate():
            yield Channel.from_dict(data)

    def list_all(self) -> List[Channel]:
        return list(self)

    def check_admission(self, channel_id: str, agent_id: str) -> Admission:
        """
        Decide whether ``agent_id`` may join without changing anything.

        Capacity only bounds public channels; private channels admit the
        creator and invited agents.
        """
        channel = self.get(channel_id)
        if channel is None:
            return Admission.NOT_FOUND
        if channel.has_participant(agent_id):
            return Admission.ALREADY_MEMBER
        if channel.is_private():
            if agent_id != channel.creator_id and agent_id not in channel.invited:
                return Admission.NOT_INVITED
        elif channel.is_full():
            return Admission.FULL
        return Admission.ALLOWED

    def add_participant(self, channel_id: str, agent_id: str, now: Optional[datetime] = None) -> Channel:
        """Add a participant once and refresh last_activity."""
        channel = self.require(channel_id)
        if not channel.has_participant(agent_id):
            channel.participants.append(agent_id)
            channel.last_activity = now or datetime.utcnow()
            self._store.put(channel.id, channel.to_dict())
        return channel

    def remove_participant(self, channel_id: str, agent_id: str, now: Optional[datetime] = None) -> Optional[Channel]:
        """
        Remove a participant if present.

        Returns:
            The channel, or None if it does not exist
        """
        channel = self.get(channel_id)
        if channel is None:
            return None
        if channel.has_participant(agent_id):
            channel.participants = [p for p in channel.participants if p != agent_id]
            channel.last_activity = now or datetime.utcnow()
            self._store.put(channel.id, channel.to_dict())
        return channel

    def invite(self, channel_id: str, agent_id: str) -> Channel:
        """Allow ``agent_id`` to join a private channel."""
        channel = self.require(channel_id)
        if agent_id not in channel.invited:
            channel.invited.append(agent_id)
            self._store.put(channel.id, channel.to_dict())
        return channel
