"""
AgentPod API Server

FastAPI app exposing the protocol coordinator over REST.
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config import PodConfig
from ..exceptions import AgentPodError
from ..gateway.http import HttpGateway
from ..gateway.memory import InMemoryGateway
from ..log import configure_logging
from ..protocol import ProtocolCoordinator, ProtocolState
from .routes import agentpod_error_handler, get_coordinator, router, set_coordinator

logger = logging.getLogger(__name__)


def coordinator_from_env() -> ProtocolCoordinator:
    """
    Build a coordinator from ``POD_*`` settings.

    ``AGENTPOD_GATEWAY=http`` talks to a real RPC endpoint and relay; the
    default is the in-process network. ``AGENTPOD_DB`` keeps state in SQLite.
    """
    config = PodConfig.from_env()
    if os.environ.get("AGENTPOD_GATEWAY", "memory") == "http":
        gateway = HttpGateway.from_config(config)
    else:
        gateway = InMemoryGateway()

    db_path = os.environ.get("AGENTPOD_DB")
    state = ProtocolState.persistent(db_path) if db_path else None
    return ProtocolCoordinator(gateway, config=config, state=state)


def create_app(coordinator: Optional[ProtocolCoordinator] = None) -> FastAPI:
    """
    Create the API app.

    Args:
        coordinator: Coordinator to serve. Defaults to one built from the environment.
    """
    if coordinator is not None:
        set_coordinator(coordinator)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await get_coordinator().initialize()
        yield

    app = FastAPI(
        title="AgentPod API",
        description="Blockchain-anchored identity, messaging, channels and escrow for AI agents",
        version=__version__,
        lifespan=lifespan,
    )

    # SECURITY: restrict with AGENTPOD_CORS_ORIGINS="https://app.example.com,..."
    cors_origins = os.environ.get("AGENTPOD_CORS_ORIGINS", "*").split(",")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AgentPodError, agentpod_error_handler)
    app.include_router(router)

    @app.get("/")
    async def root():
        return {"message": "AgentPod API", "version": __version__, "docs": "/docs"}

    return app


def run_server(host: str = "0.0.0.0", port: int = 8080):
    """Run the API server."""
    import uvicorn

    configure_logging(os.environ.get("AGENTPOD_LOG_LEVEL", "INFO"))
    set_coordinator(coordinator_from_env())
    uvicorn.run(create_app(), host=host, port=port)


if __name__ == "__main__":
    run_server()
