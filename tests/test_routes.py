"""
Tests for the AgentPod REST API
"""

import pytest
from fastapi.testclient import TestClient

from agentpod.api import create_app
from agentpod.config import PodConfig
from agentpod.gateway import InMemoryGateway
from agentpod.protocol import ProtocolCoordinator


@pytest.fixture
def client(coordinator):
    """Test client serving the shared test coordinator."""
    return TestClient(create_app(coordinator))


@pytest.fixture
def registered_client(client):
    response = client.post("/protocol/register", json={})
    assert response.status_code == 200
    return client


class TestRoot:
    """Tests for the root and health endpoints."""

    def test_root(self, client):
        data = client.get("/").json()
        assert data["message"] == "AgentPod API"
        assert data["docs"] == "/docs"

    def test_health(self, client):
        response = client.get("/protocol/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "healthy": True}

    def test_health_unreachable(self, client, gateway):
        gateway.reachable = False
        assert client.get("/protocol/health").json()["healthy"] is False

    def test_lifespan_auto_registers(self, gateway, config):
        config.auto_register = True
        coordinator = ProtocolCoordinator(gateway, config=config)
        with TestClient(create_app(coordinator)):
            assert coordinator.is_registered


class TestAgentEndpoints:
    """Tests for registration and discovery."""

    def test_register(self, client):
        response = client.post("/protocol/register", json={"name": "Scout", "capabilities": ["research"]})
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Scout"
        assert data["capabilities"] == ["research"]

        status = client.get("/protocol/agent").json()
        assert status["is_registered"] is True
        assert status["config"]["wallet_private_key"].endswith("[REDACTED]")

    def test_register_not_configured(self, gateway):
        client = TestClient(create_app(ProtocolCoordinator(gateway, config=PodConfig())))
        response = client.post("/protocol/register", json={})
        assert response.status_code == 503
        assert response.json()["error"] == "NOT_CONFIGURED"

    def test_register_gateway_failure(self, client, gateway):
        gateway.fail("register")
        response = client.post("/protocol/register", json={})
        assert response.status_code == 502
        assert response.json()["error"] == "DELIVERY_FAILED"

    def test_discover_requires_registration(self, client):
        response = client.post("/protocol/discover", json={})
        assert response.status_code == 409
        assert response.json()["error"] == "NOT_REGISTERED"

    def test_discover(self, registered_client):
        response = registered_client.post("/protocol/discover", json={"min_reputation": 80, "status": "online"})
        assert response.status_code == 200
        assert [a["agent_id"] for a in response.json()] == ["trading_bot_001", "research_pro_v2"]

        agent = registered_client.get("/protocol/agents/trading_bot_001").json()
        assert agent["framework"] == "ElizaOS"

    def test_discover_invalid_status(self, registered_client):
        response = registered_client.post("/protocol/discover", json={"status": "sleeping"})
        assert response.status_code == 400

    def test_unknown_agent(self, client):
        assert client.get("/protocol/agents/nobody").status_code == 404


class TestMessageEndpoints:
    """Tests for messaging."""

    def test_send_and_list(self, registered_client):
        response = registered_client.post("/protocol/messages", json={
            "recipient_id": "trading_bot_001",
            "content": "Interested in a joint strategy?",
            "priority": "high",
        })
        assert response.status_code == 200
        message = response.json()
        assert message["status"] == "delivered"
        assert message["priority"] == "high"

        listed = registered_client.get("/protocol/messages", params={"recipient_id": "trading_bot_001"}).json()
        assert [m["id"] for m in listed] == [message["id"]]

        read = registered_client.post(f"/protocol/messages/{message['id']}/read").json()
        assert read["status"] == "read"
        assert registered_client.get("/protocol/messages", params={"unread_only": True}).json() == []

    def test_since_with_utc_suffix(self, registered_client):
        registered_client.post("/protocol/messages", json={"recipient_id": "trading_bot_001", "content": "hello"})

        response = registered_client.get("/protocol/messages", params={"since": "2020-01-01T00:00:00Z"})
        assert response.status_code == 200
        assert len(response.json()) == 1

        future = registered_client.get("/protocol/messages", params={"since": "2030-01-01T00:00:00+02:00"})
        assert future.json() == []

    def test_empty_recipient(self, registered_client):
        response = registered_client.post("/protocol/messages", json={"recipient_id": "", "content": "hello"})
        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_ARGUMENT"

    def test_invalid_type(self, registered_client):
        response = registered_client.post("/protocol/messages", json={
            "recipient_id": "trading_bot_001",
            "content": "hello",
            "type": "telegram",
        })
        assert response.status_code == 422

    def test_mark_unknown_message(self, registered_client):
        assert registered_client.post("/protocol/messages/msg_missing/read").status_code == 404


class TestChannelEndpoints:
    """Tests for channels."""

    def test_channel_lifecycle(self, registered_client):
        channel = registered_client.post("/protocol/channels", json={"name": "Alpha Desk"}).json()
        channel_id = channel["id"]
        assert len(channel["participants"]) == 1

        joined = registered_client.post(f"/protocol/channels/{channel_id}/join").json()
        assert joined == {"channel_id": channel_id, "joined": True}

        participants = registered_client.get(f"/protocol/channels/{channel_id}/participants").json()
        assert [p["name"] for p in participants] == ["TestPod"]

        left = registered_client.post(f"/protocol/channels/{channel_id}/leave").json()
        assert left["left"] is True
        assert registered_client.get(f"/protocol/channels/{channel_id}").json()["participants"] == []

        assert [c["id"] for c in registered_client.get("/protocol/channels").json()] == [channel_id]

    def test_join_unknown_channel(self, registered_client):
        response = registered_client.post("/protocol/channels/channel_missing/join")
        assert response.status_code == 200
        assert response.json()["joined"] is False

    def test_invite(self, registered_client):
        channel = registered_client.post(
            "/protocol/channels", json={"name": "Inner Circle", "type": "private"}
        ).json()
        response = registered_client.post(
            f"/protocol/channels/{channel['id']}/invite", json={"agent_id": "research_pro_v2"}
        )
        assert response.json()["invited"] == ["research_pro_v2"]

        missing = registered_client.post("/protocol/channels/channel_missing/invite", json={"agent_id": "x"})
        assert missing.status_code == 404

    def test_invalid_capacity(self, registered_client):
        response = registered_client.post("/protocol/channels", json={"name": "Tiny", "max_participants": 0})
        assert response.status_code == 400


class TestEscrowEndpoints:
    """Tests for escrow."""

    def test_escrow_lifecycle(self, registered_client):
        escrow = registered_client.post("/protocol/escrows", json={
            "counterparty_id": "research_pro_v2",
            "amount": 50,
            "service": "Research",
        }).json()
        assert escrow["status"] == "created"

        funded = registered_client.post(f"/protocol/escrows/{escrow['id']}/fund").json()
        assert funded["status"] == "funded"
        completed = registered_client.post(f"/protocol/escrows/{escrow['id']}/complete").json()
        assert completed["status"] == "completed"

        listed = registered_client.get("/protocol/escrows", params={"status": "completed"}).json()
        assert [e["id"] for e in listed] == [escrow["id"]]

    def test_invalid_amount(self, registered_client):
        response = registered_client.post("/protocol/escrows", json={"counterparty_id": "x", "amount": 0})
        assert response.status_code == 400
        assert response.json()["error"] == "INVALID_AMOUNT"

    def test_illegal_transition(self, registered_client):
        escrow = registered_client.post(
            "/protocol/escrows", json={"counterparty_id": "x", "amount": 1}
        ).json()
        response = registered_client.post(f"/protocol/escrows/{escrow['id']}/complete")
        assert response.status_code == 400

    def test_unknown_transition_and_escrow(self, registered_client):
        assert registered_client.post("/protocol/escrows/escrow_missing/explode").status_code == 404
        assert registered_client.post("/protocol/escrows/escrow_missing/fund").status_code == 404
        assert registered_client.get("/protocol/escrows/escrow_missing").status_code == 404

    def test_bad_status_filter(self, registered_client):
        assert registered_client.get("/protocol/escrows", params={"status": "lost"}).status_code == 400


class TestReputationAndStats:
    """Tests for reputation, stats and evaluation."""

    def test_reputation(self, registered_client):
        assert registered_client.get("/protocol/reputation", params={"agent_id": "stranger"}).json() == {
            "agent_id": "stranger",
            "reputation": 50,
        }
        registered_client.post("/protocol/discover", json={})
        updated = registered_client.post("/protocol/reputation/trading_bot_001", json={"delta": -15}).json()
        assert updated["reputation"] == 80

        assert registered_client.post("/protocol/reputation/stranger", json={"delta": 1}).status_code == 404

    def test_stats(self, registered_client):
        stats = registered_client.get("/protocol/stats").json()
        assert stats["total_agents"] == 1
        assert stats["is_registered"] is True

        network = registered_client.get("/protocol/network").json()
        assert network["health"] == "healthy"

    def test_balance(self, client, gateway):
        assert client.get("/protocol/balance").json() == {"balance": 10.0}
        gateway.fail("get_balance")
        assert client.get("/protocol/balance").status_code == 502

    def test_evaluate(self, client):
        response = client.post("/protocol/evaluate", json={"text": "Thank you, the project was completed successfully"})
        data = response.json()
        assert set(data) == {"collaboration", "reputation", "interaction_quality"}
        assert data["reputation"]["evaluation"]["interaction_type"] == "positive"


def test_default_coordinator_uses_environment(monkeypatch):
    """Without an explicit coordinator the app serves the local network."""
    monkeypatch.setenv("POD_AUTO_REGISTER", "false")
    from agentpod.api import routes

    monkeypatch.setattr(routes, "_coordinator", None)
    coordinator = routes.get_coordinator()
    assert isinstance(coordinator._gateway, InMemoryGateway)
    assert coordinator.config.auto_register is False
