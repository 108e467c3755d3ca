"""
Tests for the plugin surface: registry, actions, providers and evaluators.
"""

import pytest

from agentpod.core.schema import Channel, MessagePriority, MessageType
from agentpod.exceptions import InvalidArgumentError
from agentpod.plugin import Context, PluginRegistry, RecordKind, build_plugin
from agentpod.plugin.actions import (
    classify_message,
    experience_level,
    extract_channel_ref,
    extract_escrow_terms,
    extract_recipient,
    trust_level,
    validate_create_escrow,
    validate_discover,
    validate_protocol_stats,
    validate_register,
    validate_send_message,
)
from agentpod.protocol import ProtocolCoordinator, ProtocolState


@pytest.fixture
def plugin():
    return build_plugin()


async def run(plugin, name, text, coordinator):
    action = plugin.get(name, RecordKind.ACTION)
    return await action.run(Context(text=text, coordinator=coordinator))


class TestPluginRegistry:
    """Test build_plugin and the registry."""

    def test_contents(self, plugin):
        assert len(plugin) == 13
        assert len(plugin.actions()) == 8
        assert [p.name for p in plugin.providers()] == ["agentStatus", "networkStats"]
        assert [e.name for e in plugin.evaluators()] == ["collaboration", "reputation", "interactionQuality"]

    def test_lookup(self, plugin):
        assert plugin.get("agentStatus").kind == RecordKind.PROVIDER
        assert plugin.get("reputation", RecordKind.EVALUATOR).name == "reputation"
        assert plugin.get("reputation", RecordKind.ACTION) is None
        assert plugin.get("MISSING") is None

    def test_rejects_duplicates_and_foreign_objects(self, plugin):
        with pytest.raises(InvalidArgumentError):
            plugin.register(plugin.get("SEND_MESSAGE"))
        with pytest.raises(InvalidArgumentError):
            PluginRegistry().register("not a record")

    def test_matching_actions(self, plugin, coordinator):
        context = Context(text="Find trading agents", coordinator=coordinator)
        assert "DISCOVER_AGENTS" in [a.name for a in plugin.matching_actions(context)]

    def test_run_evaluators(self, plugin, coordinator):
        results = plugin.run_evaluators(Context(text="Thanks, great job!", coordinator=coordinator))
        assert set(results) == {"collaboration", "reputation", "interactionQuality"}
        assert results["reputation"].evaluation["interaction_type"] == "positive"

        assert plugin.run_evaluators(Context(text="Thanks!")) == {}
        assert plugin.run_evaluators(Context(text="", coordinator=coordinator)) == {}

    @pytest.mark.asyncio
    async def test_collect_providers(self, plugin, coordinator):
        results = await plugin.collect_providers(Context(coordinator=coordinator))
        assert set(results) == {"agentStatus", "networkStats"}


class TestValidation:
    """Test action validate functions."""

    def test_register(self):
        assert validate_register(Context(text="Register me on the AgentPod network"))
        assert not validate_register(Context(text="Hello there"))

    def test_discover_needs_valid_config(self, config):
        assert validate_discover(Context(text="Find trading agents", config=config))
        assert not validate_discover(Context(text="Find trading agents"))
        assert not validate_discover(Context(text="What time is it?", config=config))

    def test_send_message_needs_recipient(self, config):
        text = "Send message to trading_bot_001 asking for market analysis"
        assert validate_send_message(Context(text=text, config=config))
        assert not validate_send_message(Context(text="Can you send something?", config=config))

    def test_escrow(self):
        assert validate_create_escrow(Context(text="Create escrow with research_pro_v2 for 5 SOL"))
        assert validate_create_escrow(Context(text="Make a payment of 3 sol"))
        assert not validate_create_escrow(Context(text="Tell me a joke"))

    def test_protocol_stats_needs_two_groups(self):
        assert validate_protocol_stats(Context(text="Show network stats"))
        assert not validate_protocol_stats(Context(text="Show me"))


class TestExtraction:
    """Test parameter extraction from text."""

    def test_recipient(self):
        assert extract_recipient("Send message to trading_bot_001 asking for market analysis") == "trading_bot_001"
        assert extract_recipient("Please contact research_pro_v2 about the data") == "research_pro_v2"
        assert extract_recipient("Hello there") is None

    def test_classify_message(self):
        assert classify_message("Urgent: the data report") == (MessageType.DATA, MessagePriority.URGENT)
        assert classify_message("Important command to run") == (MessageType.COMMAND, MessagePriority.HIGH)
        assert classify_message("Just saying hi") == (MessageType.TEXT, MessagePriority.NORMAL)

    def test_channel_ref(self):
        assert extract_channel_ref("please join channel_abc123") == ("channel_abc123", None)
        assert extract_channel_ref("Join 'Alpha Desk'") == (None, "Alpha Desk")
        assert extract_channel_ref("Join the defi room") == ("defi_strategies", None)
        assert extract_channel_ref("Join the Moon Club, please") == ("moon_club", "Moon Club")

    def test_escrow_terms(self):
        counterparty, amount, service, deliverables = extract_escrow_terms(
            "Create escrow with research_pro_v2 for 5 SOL research work"
        )
        assert counterparty == "research_pro_v2"
        assert amount == 5.0
        assert service == "Research Services"
        assert deliverables[0] == "Research report"

    def test_levels(self):
        assert trust_level(95) == "Exceptional"
        assert trust_level(65) == "Moderate"
        assert trust_level(10) == "Building"
        assert experience_level(85) == "Expert"
        assert experience_level(50) == "Beginner"


class TestActions:
    """Test action handlers end to end against the local gateway."""

    @pytest.mark.asyncio
    async def test_without_coordinator(self, plugin):
        result = await plugin.get("REGISTER_AGENT").run(Context(text="Register me"))
        assert not result.success
        assert result.content["error"] == "NO_COORDINATOR"

    @pytest.mark.asyncio
    async def test_register(self, plugin, coordinator):
        first = await run(plugin, "REGISTER_AGENT", "Register me on the AgentPod network", coordinator)
        second = await run(plugin, "REGISTER_AGENT", "Register me on the AgentPod network", coordinator)

        assert first.success and not first.content["already_registered"]
        assert second.success and second.content["already_registered"]
        assert coordinator.is_registered

    @pytest.mark.asyncio
    async def test_unregistered_errors_are_rendered(self, plugin, coordinator):
        result = await run(plugin, "SEND_MESSAGE", "Send message to trading_bot_001 asking for data", coordinator)
        assert not result.success
        assert result.content["error"] == "NOT_REGISTERED"

    @pytest.mark.asyncio
    async def test_discover(self, plugin, registered):
        result = await run(plugin, "DISCOVER_AGENTS", "Find trading agents", registered)
        assert result.success
        assert result.text.startswith("Discovered 1 agent:")
        assert [a["agent_id"] for a in result.content["agents"]] == ["trading_bot_001"]

    @pytest.mark.asyncio
    async def test_send_message(self, plugin, registered):
        result = await run(
            plugin, "SEND_MESSAGE", "Send message to trading_bot_001 asking for market analysis", registered
        )
        assert result.success
        assert result.content["message"]["content"] == "asking for market analysis"
        assert len(await registered.get_messages()) == 1

    @pytest.mark.asyncio
    async def test_send_message_too_short(self, plugin, registered):
        result = await run(plugin, "SEND_MESSAGE", "Message trading_bot_001 hi", registered)
        assert not result.success
        assert result.content["error"] == "CONTENT_TOO_SHORT"

    @pytest.mark.asyncio
    async def test_create_channel(self, plugin, registered):
        result = await run(plugin, "CREATE_CHANNEL", "Create a channel called 'Alpha Desk'", registered)
        channel = result.content["channel"]
        assert channel["name"] == "Alpha Desk"
        assert channel["max_participants"] == 25
        assert channel["description"] == "Collaborative workspace for alpha desk"

    @pytest.mark.asyncio
    async def test_join_channel_by_name(self, plugin, gateway, config, clock):
        state = ProtocolState()
        state.channels.add(Channel(id="channel_alpha", name="Alpha Desk"))
        coordinator = ProtocolCoordinator(gateway, config=config, state=state, clock=clock)
        await coordinator.register()

        result = await run(plugin, "JOIN_CHANNEL", "Join 'alpha desk'", coordinator)
        assert result.success
        assert coordinator.current_agent.agent_id in coordinator.get_channel("channel_alpha").participants

    @pytest.mark.asyncio
    async def test_join_unknown_channel(self, plugin, registered):
        result = await run(plugin, "JOIN_CHANNEL", "Join the trading signals channel", registered)
        assert not result.success
        assert result.content == {"error": "JOIN_FAILED", "channel_id": "trading_signals_main"}

    @pytest.mark.asyncio
    async def test_create_escrow(self, plugin, registered):
        result = await run(
            plugin, "CREATE_ESCROW", "Create escrow with research_pro_v2 for 5 SOL research work", registered
        )
        escrow = result.content["escrow"]
        assert result.success
        assert escrow["amount"] == 5.0
        assert escrow["counterparty_id"] == "research_pro_v2"
        assert escrow["service"] == "Research Services"

    @pytest.mark.asyncio
    async def test_create_escrow_without_amount(self, plugin, registered):
        result = await run(plugin, "CREATE_ESCROW", "Set up escrow with trading_bot", registered)
        assert not result.success
        assert result.content["error"] == "INVALID_AMOUNT"
        assert registered.list_escrows() == []

    @pytest.mark.asyncio
    async def test_protocol_stats(self, plugin, registered):
        result = await run(plugin, "GET_PROTOCOL_STATS", "Show network stats", registered)
        assert result.success
        assert "Known agents: 1" in result.text
        assert result.content["network"]["health"] == "healthy"

    @pytest.mark.asyncio
    async def test_reputation(self, plugin, registered):
        await registered.discover_agents()

        known = await run(plugin, "GET_REPUTATION", "What's the reputation of trading_bot_001?", registered)
        assert known.content["reputation"] == 95
        assert known.content["trust_level"] == "Exceptional"
        assert known.content["known"] is True

        unknown = await run(plugin, "GET_REPUTATION", "What's the reputation of stranger_x?", registered)
        assert unknown.content["reputation"] == 50
        assert unknown.content["known"] is False

        own = await run(plugin, "GET_REPUTATION", "Check my reputation", registered)
        assert own.content["agent_id"] == registered.current_agent.agent_id


class TestProviders:
    """Test read-only providers."""

    @pytest.mark.asyncio
    async def test_agent_status_unregistered(self, plugin, coordinator, config):
        result = await plugin.get("agentStatus").get(Context(coordinator=coordinator))
        assert result.text.startswith("AgentPod: not registered")
        assert result.values["is_registered"] is False
        assert config.wallet_private_key not in str(result.to_dict())

    @pytest.mark.asyncio
    async def test_agent_status_registered(self, plugin, registered):
        result = await plugin.get("agentStatus").get(Context(coordinator=registered))
        assert "TestPod" in result.text
        assert result.values["agent"]["name"] == "TestPod"

    @pytest.mark.asyncio
    async def test_without_coordinator(self, plugin):
        status = await plugin.get("agentStatus").get(Context())
        network = await plugin.get("networkStats").get(Context())
        assert status.values == {"is_initialized": False}
        assert network.values == {"connected": False}

    @pytest.mark.asyncio
    async def test_network_stats(self, plugin, coordinator, gateway):
        healthy = await plugin.get("networkStats").get(Context(coordinator=coordinator))
        assert healthy.values["connected"] is True
        assert healthy.values["status"] == "healthy"

        gateway.reachable = False
        down = await plugin.get("networkStats").get(Context(coordinator=coordinator))
        assert down.values["connected"] is False
        assert down.values["status"] == "unhealthy"
