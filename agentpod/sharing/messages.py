"""
Message Log

Append-only record of messages the local agent has sent or received.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterator, List, Optional

from ..core.schema import Message, MessageStatus, MessageType
from ..exceptions import InvalidArgumentError, NotFoundError
from ..storage.kv import KeyValueStore, MemoryStore


@dataclass
class MessageFilter:
    """
    Criteria for reading the message log.

    ``since`` is an inclusive lower bound. ``unread_only`` keeps every
    message whose status is not ``read``. ``limit`` is applied after
    sorting, newest first.
    """
    sender_id: Optional[str] = None
    recipient_id: Optional[str] = None
    type: Optional[MessageType] = None
    status: Optional[MessageStatus] = None
    since: Optional[datetime] = None
    unread_only: bool = False
    limit: Optional[int] = None

    def __post_init__(self):
        if isinstance(self.type, str):
            self.type = MessageType(self.type)
        if isinstance(self.status, str):
            self.status = MessageStatus(self.status)
        if self.since is not None and self.since.tzinfo is not None:
            # log timestamps are naive UTC
            self.since = self.since.astimezone(timezone.utc).replace(tzinfo=None)
        if self.limit is not None and self.limit < 0:
            raise InvalidArgumentError("limit must be >= 0")

    def matches(self, message: Message) -> bool:
        if self.sender_id and message.sender_id != self.sender_id:
            return False
        if self.recipient_id and message.recipient_id != self.recipient_id:
            return False
        if self.type and message.type != self.type:
            return False
        if self.status and message.status != self.status:
            return False
        if self.since and message.timestamp < self.since:
            return False
        if self.unread_only and message.status == MessageStatus.READ:
            return False
        return True


class MessageLog:
    """
    Append-only message log.

    Messages never change after being appended, except for forward status
    transitions (pending -> delivered -> read, or -> failed).
    """

    def __init__(self, store: Optional[KeyValueStore] = None):
        self._store = store if store is not None else MemoryStore()

    def append(self, message: Message) -> Message:
        """
        Append a message.

        Raises:
            InvalidArgumentError: if a message with the same id exists
        """
        if message.id in self._store:
            raise InvalidArgumentError(f"Duplicate message id: {message.id}")
        self._store.put(message.id, message.to_dict())
        return message

    def get(self, message_id: str) -> Optional[Message]:
        data = self._store.get(message_id)
        if data:
            return Message.from_dict(data)
        return None

    def __len__(self) -> int:
        return len(self._store)

    def __iter__(self) -> Iterator[Message]:
        for _, data in self._store.iterate():
            yield Message.from_dict(data)

    def query(self, criteria: Optional[MessageFilter] = None) -> List[Message]:
        """
        Read messages, most recent first.

        Ties on timestamp put the later-appended message first.
        """
        indexed = list(enumerate(self))
        if criteria is not None:
            indexed = [(i, m) for i, m in indexed if criteria.matches(m)]

        indexed.sort(key=lambda pair: (pair[1].timestamp, pair[0]), reverse=True)
        messages = [m for _, m in indexed]

        if criteria is not None and criteria.limit is not None:
            messages = messages[:criteria.limit]
        return messages

    def update_status(self, message_id: str, status: MessageStatus) -> Message:
        """
        Move a message to a new status.

        Raises:
            NotFoundError: unknown message id
            InvalidArgumentError: the transition is not allowed
        """
        message = self.get(message_id)
        if message is None:
            raise NotFoundError("Message", message_id)
        if message.status == status:
            return message
        if not message.can_transition(status):
            raise InvalidArgumentError(
                f"Cannot move message {message_id} from {message.status.value} to {status.value}"
            )
        message.status = status
        self._store.put(message.id, message.to_dict())
        return message
