"""
AgentPod REST API (requires the ``server`` extra).
"""

from .routes import get_coordinator, router, set_coordinator
from .server import create_app, run_server

__all__ = ["create_app", "get_coordinator", "router", "run_server", "set_coordinator"]
