"""
AgentPod configuration.

Settings are read from the environment (``POD_*`` variables) with the same
defaults the network ships with. ``validate()`` reports every problem at
once; ``require_valid()`` turns them into a ``NotConfiguredError``.
"""

import os
import re
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional
from urllib.parse import urlparse

from .exceptions import NotConfiguredError
from .log import mask_secret

DEFAULT_RPC_ENDPOINT = "https://api.devnet.solana.com"
DEFAULT_PROGRAM_ID = "HEpGLgYsE1kP8aoYKyLFc3JVVrofS7T4zEA6fWBJsZps"
DEFAULT_CAPABILITIES = ["conversation", "analysis", "collaboration"]
DEFAULT_MCP_ENDPOINT = "http://localhost:3000"
DEFAULT_AGENT_NAME = "AgentPod Agent"

REQUIRED_ENV_VARS = ["POD_RPC_ENDPOINT", "POD_PROGRAM_ID", "POD_WALLET_PRIVATE_KEY"]
OPTIONAL_ENV_VARS = ["POD_AGENT_NAME", "POD_AGENT_CAPABILITIES", "POD_MCP_ENDPOINT", "POD_AUTO_REGISTER"]

_BASE58_RE = re.compile(r"^[1-9A-HJ-NP-Za-km-z]+$")


def is_valid_url(value: str) -> bool:
    """Check that a string is an absolute URL with scheme and host."""
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return bool(parsed.scheme) and bool(parsed.netloc)


def is_valid_base58(value: str) -> bool:
    """Check that a string is base58 and between 32 and 44 characters."""
    return bool(_BASE58_RE.match(value)) and 32 <= len(value) <= 44


def parse_capabilities(raw: Optional[str]) -> List[str]:
    """Split a comma-separated capability list, dropping blanks and duplicates."""
    if not raw:
        return list(DEFAULT_CAPABILITIES)
    caps: List[str] = []
    for cap in raw.split(","):
        cap = cap.strip()
        if cap and cap not in caps:
            caps.append(cap)
    return caps


@dataclass
class PodConfig:
    """Protocol settings consumed read-only by the coordinator."""
    rpc_endpoint: str = DEFAULT_RPC_ENDPOINT
    program_id: str = DEFAULT_PROGRAM_ID
    wallet_private_key: str = ""
    agent_name: str = DEFAULT_AGENT_NAME
    capabilities: List[str] = field(default_factory=lambda: list(DEFAULT_CAPABILITIES))
    mcp_endpoint: Optional[str] = DEFAULT_MCP_ENDPOINT
    auto_register: bool = True

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "PodConfig":
        """
        Build a config from environment variables.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.
        """
        env = os.environ if environ is None else environ
        auto_register = env.get("POD_AUTO_REGISTER")
        return cls(
            rpc_endpoint=env.get("POD_RPC_ENDPOINT") or DEFAULT_RPC_ENDPOINT,
            program_id=env.get("POD_PROGRAM_ID") or DEFAULT_PROGRAM_ID,
            wallet_private_key=env.get("POD_WALLET_PRIVATE_KEY") or "",
            agent_name=env.get("POD_AGENT_NAME") or DEFAULT_AGENT_NAME,
            capabilities=parse_capabilities(env.get("POD_AGENT_CAPABILITIES")),
            mcp_endpoint=env.get("POD_MCP_ENDPOINT") or DEFAULT_MCP_ENDPOINT,
            auto_register=auto_register.lower() == "true" if auto_register else True,
        )

    def validate(self) -> List[str]:
        """Return a list of configuration errors (empty when valid)."""
        errors = []
        if not self.rpc_endpoint:
            errors.append("POD_RPC_ENDPOINT is required")
        elif not is_valid_url(self.rpc_endpoint):
            errors.append("POD_RPC_ENDPOINT must be a valid URL")

        if not self.program_id:
            errors.append("POD_PROGRAM_ID is required")
        elif not is_valid_base58(self.program_id):
            errors.append("POD_PROGRAM_ID must be a valid base58 string")

        if not self.wallet_private_key:
            errors.append("POD_WALLET_PRIVATE_KEY is required")
        elif not is_valid_base58(self.wallet_private_key):
            errors.append("POD_WALLET_PRIVATE_KEY must be a valid base58 string")

        if self.mcp_endpoint and not is_valid_url(self.mcp_endpoint):
            errors.append("POD_MCP_ENDPOINT must be a valid URL")

        if not self.capabilities:
            errors.append("At least one capability must be specified")
        return errors

    def is_valid(self) -> bool:
        return not self.validate()

    def require_valid(self) -> "PodConfig":
        """Raise NotConfiguredError unless the config validates."""
        errors = self.validate()
        if errors:
            raise NotConfiguredError(
                f"Configuration validation failed: {', '.join(errors)}", errors=errors
            )
        return self

    def network_name(self) -> str:
        return "Devnet" if "devnet" in self.rpc_endpoint else "Mainnet"

    def masked(self) -> Dict[str, object]:
        """Config as a dict safe for display and logging."""
        return {
            "rpc_endpoint": self.rpc_endpoint,
            "program_id": self.program_id,
            "wallet_private_key": mask_secret(self.wallet_private_key),
            "agent_name": self.agent_name,
            "capabilities": list(self.capabilities),
            "mcp_endpoint": self.mcp_endpoint,
            "auto_register": self.auto_register,
        }
