"""
Tests for the protocol entity models.
"""

from datetime import datetime, timedelta

from agentpod.core.schema import (
    Agent,
    AgentStatus,
    Channel,
    ChannelType,
    Escrow,
    EscrowStatus,
    Message,
    MessageStatus,
    MessageType,
    new_id,
)


class TestAgent:
    """Test Agent model."""

    def test_defaults(self):
        agent = Agent(agent_id="a1", name="Bot")
        assert agent.reputation == 50
        assert agent.status == AgentStatus.ONLINE
        assert agent.capabilities == []

    def test_capabilities_are_deduplicated_in_order(self):
        agent = Agent(agent_id="a1", name="Bot", capabilities=["trading", "analysis", "trading"])
        assert agent.capabilities == ["trading", "analysis"]

    def test_reputation_is_clamped(self):
        assert Agent(agent_id="a1", name="Bot", reputation=150).reputation == 100
        assert Agent(agent_id="a2", name="Bot", reputation=-4).reputation == 0

    def test_adjust_reputation_clamps(self):
        agent = Agent(agent_id="a1", name="Bot", reputation=98)
        assert agent.adjust_reputation(5) == 100
        assert agent.adjust_reputation(-200) == 0

    def test_touch_marks_online(self):
        agent = Agent(agent_id="a1", name="Bot", status="offline")
        assert agent.status == AgentStatus.OFFLINE
        when = datetime(2025, 3, 1)
        agent.touch(when)
        assert agent.is_online()
        assert agent.last_active == when

    def test_serialization(self):
        agent = Agent(
            agent_id="a1",
            name="Bot",
            description="Trades",
            capabilities=["trading"],
            reputation=77,
            framework="ElizaOS",
        )
        restored = Agent.from_dict(agent.to_dict())
        assert restored == agent


class TestMessage:
    """Test Message model."""

    def test_defaults(self):
        message = Message(sender_id="a", recipient_id="b", content="hi")
        assert message.id.startswith("msg_")
        assert message.type == MessageType.TEXT
        assert message.encrypted is True
        assert message.status == MessageStatus.PENDING
        assert message.transaction_hash == ""

    def test_forward_transitions_only(self):
        message = Message(sender_id="a", recipient_id="b", content="hi")
        assert message.can_transition(MessageStatus.DELIVERED)
        assert not message.can_transition(MessageStatus.READ)

        message.status = MessageStatus.READ
        assert not message.can_transition(MessageStatus.DELIVERED)
        assert not message.can_transition(MessageStatus.PENDING)


class TestChannel:
    """Test Channel model."""

    def test_full_and_private(self):
        channel = Channel(name="Room", max_participants=1, participants=["a"])
        assert channel.is_full()
        assert not channel.is_private()
        assert Channel(name="Secret", type=ChannelType.PRIVATE).is_private()

    def test_serialization(self):
        channel = Channel(name="Room", participants=["a"], invited=["b"], creator_id="a")
        restored = Channel.from_dict(channel.to_dict())
        assert restored == channel


class TestEscrow:
    """Test Escrow model."""

    def test_deadline_is_24_hours_after_creation(self):
        created = datetime(2025, 1, 1, 12, 0)
        escrow = Escrow(counterparty_id="b", amount=50, created_at=created)
        assert escrow.deadline == created + timedelta(hours=24)
        assert escrow.status == EscrowStatus.CREATED

    def test_lifecycle_table(self):
        escrow = Escrow(counterparty_id="b", amount=50)
        assert escrow.can_transition(EscrowStatus.FUNDED)
        assert escrow.can_transition(EscrowStatus.DISPUTED)
        assert not escrow.can_transition(EscrowStatus.COMPLETED)
        assert not escrow.can_transition(EscrowStatus.REFUNDED)

    def test_terminal_states(self):
        for status in (EscrowStatus.COMPLETED, EscrowStatus.REFUNDED):
            escrow = Escrow(counterparty_id="b", amount=1, status=status)
            assert escrow.is_terminal()
            assert not escrow.is_active()

    def test_expiry(self):
        created = datetime(2025, 1, 1)
        escrow = Escrow(counterparty_id="b", amount=1, created_at=created)
        assert not escrow.is_expired(created + timedelta(hours=24))
        assert escrow.is_expired(created + timedelta(hours=24, seconds=1))

    def test_serialization(self):
        escrow = Escrow(counterparty_id="b", amount=2.5, deliverables=["report"], creator_id="a")
        restored = Escrow.from_dict(escrow.to_dict())
        assert restored == escrow


def test_new_id_prefix_and_uniqueness():
    ids = {new_id("channel") for _ in range(100)}
    assert len(ids) == 100
    assert all(i.startswith("channel_") for i in ids)
