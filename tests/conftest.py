"""
Shared fixtures: a controllable clock, a valid config and a seeded local network.
"""

from datetime import datetime, timedelta

import pytest
import pytest_asyncio

from agentpod.config import PodConfig
from agentpod.gateway.memory import InMemoryGateway, reference_agents
from agentpod.protocol import ProtocolCoordinator

WALLET_KEY = "4Nd1mBQtrMJVYVfKf2PJy9NZUZdTAsp7D4xWLs4gDB4T"
FIXED_NOW = datetime(2025, 1, 1, 12, 0, 0)


class Clock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def config():
    return PodConfig(wallet_private_key=WALLET_KEY, agent_name="TestPod", auto_register=False)


@pytest.fixture
def gateway():
    return InMemoryGateway(agents=reference_agents(FIXED_NOW))


@pytest.fixture
def coordinator(gateway, config, clock):
    return ProtocolCoordinator(gateway, config=config, clock=clock)


@pytest_asyncio.fixture
async def registered(coordinator):
    """Coordinator whose local agent is already registered."""
    await coordinator.register()
    return coordinator
