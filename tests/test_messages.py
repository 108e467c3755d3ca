"""
Tests for the message log.
"""

from datetime import datetime, timedelta, timezone

import pytest

from agentpod.core.schema import Message, MessageStatus, MessageType
from agentpod.exceptions import InvalidArgumentError, NotFoundError
from agentpod.sharing import MessageFilter, MessageLog

T0 = datetime(2025, 1, 1, 12, 0)


def make_message(log, minutes=0, **kwargs):
    kwargs.setdefault("sender_id", "me")
    kwargs.setdefault("recipient_id", "trading_bot_001")
    kwargs.setdefault("content", f"message at +{minutes}m")
    return log.append(Message(timestamp=T0 + timedelta(minutes=minutes), **kwargs))


@pytest.fixture
def log():
    return MessageLog()


class TestMessageLog:
    """Test MessageLog queries."""

    def test_newest_first(self, log):
        first = make_message(log, 0)
        second = make_message(log, 5)
        third = make_message(log, 2)

        assert [m.id for m in log.query()] == [second.id, third.id, first.id]

    def test_equal_timestamps_prefer_later_append(self, log):
        a = make_message(log, 0)
        b = make_message(log, 0)
        assert [m.id for m in log.query()] == [b.id, a.id]

    def test_limit_after_sorting(self, log):
        make_message(log, 0)
        latest = make_message(log, 10)
        make_message(log, 5)

        assert [m.id for m in log.query(MessageFilter(limit=1))] == [latest.id]
        assert log.query(MessageFilter(limit=0)) == []

    def test_since_is_inclusive(self, log):
        make_message(log, 0)
        boundary = make_message(log, 5)
        after = make_message(log, 6)

        result = log.query(MessageFilter(since=T0 + timedelta(minutes=5)))
        assert [m.id for m in result] == [after.id, boundary.id]

    def test_since_with_timezone(self, log):
        make_message(log, 0)
        later = make_message(log, 10)

        since = datetime(2025, 1, 1, 14, 5, tzinfo=timezone(timedelta(hours=2)))
        criteria = MessageFilter(since=since)
        assert criteria.since == T0 + timedelta(minutes=5)
        assert [m.id for m in log.query(criteria)] == [later.id]

    def test_sender_recipient_and_type(self, log):
        make_message(log, 0, recipient_id="research_pro_v2")
        data = make_message(log, 1, type=MessageType.DATA)
        incoming = make_message(log, 2, sender_id="research_pro_v2", recipient_id="me")

        assert [m.id for m in log.query(MessageFilter(type="data"))] == [data.id]
        assert [m.id for m in log.query(MessageFilter(sender_id="research_pro_v2"))] == [incoming.id]
        assert len(log.query(MessageFilter(recipient_id="research_pro_v2"))) == 1

    def test_unread_only(self, log):
        read = make_message(log, 0, status=MessageStatus.DELIVERED)
        unread = make_message(log, 1, status=MessageStatus.DELIVERED)
        log.update_status(read.id, MessageStatus.READ)

        assert [m.id for m in log.query(MessageFilter(unread_only=True))] == [unread.id]

    def test_duplicate_id_rejected(self, log):
        message = make_message(log, 0)
        with pytest.raises(InvalidArgumentError):
            log.append(Message(id=message.id, sender_id="x", recipient_id="y", content="dup"))

    def test_invalid_limit(self):
        with pytest.raises(InvalidArgumentError):
            MessageFilter(limit=-1)


class TestStatusTransitions:
    """Test forward-only message status changes."""

    def test_delivered_to_read(self, log):
        message = make_message(log, 0, status=MessageStatus.DELIVERED)
        updated = log.update_status(message.id, MessageStatus.READ)
        assert updated.status == MessageStatus.READ
        assert log.get(message.id).status == MessageStatus.READ

    def test_same_status_is_noop(self, log):
        message = make_message(log, 0, status=MessageStatus.READ)
        assert log.update_status(message.id, MessageStatus.READ).status == MessageStatus.READ

    def test_backwards_rejected(self, log):
        message = make_message(log, 0, status=MessageStatus.READ)
        with pytest.raises(InvalidArgumentError):
            log.update_status(message.id, MessageStatus.DELIVERED)
        assert log.get(message.id).status == MessageStatus.READ

    def test_unknown_message(self, log):
        with pytest.raises(NotFoundError):
            log.update_status("msg_missing", MessageStatus.READ)
