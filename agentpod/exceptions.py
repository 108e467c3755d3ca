"""
AgentPod exception classes.

Every error raised by the protocol core carries a machine-readable ``code``
and a human-readable ``message`` so a host can render it.
"""

from typing import Optional


class AgentPodError(Exception):
    """Base exception for all AgentPod errors."""

    code = "AGENTPOD_ERROR"

    def __init__(self, message: str, code: Optional[str] = None):
        self.message = message
        if code is not None:
            self.code = code
        super().__init__(f"[{self.code}] {message}")

    def to_dict(self) -> dict:
        return {"error": self.code, "message": self.message}


class NotConfiguredError(AgentPodError):
    """Raised when RPC/program/wallet settings are missing or malformed."""

    code = "NOT_CONFIGURED"

    def __init__(self, message: str, errors: Optional[list] = None):
        super().__init__(message)
        self.errors = errors or []

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["errors"] = list(self.errors)
        return data


class NotRegisteredError(AgentPodError):
    """Raised when a privileged operation runs before registration."""

    code = "NOT_REGISTERED"

    def __init__(self, operation: str = ""):
        message = "Agent is not registered on the network"
        if operation:
            message = f"{message}; '{operation}' requires registration"
        super().__init__(message)
        self.operation = operation


class NotFoundError(AgentPodError):
    """Raised when a channel, agent, message or escrow does not exist."""

    code = "NOT_FOUND"

    def __init__(self, kind: str, identifier: str):
        super().__init__(f"{kind} '{identifier}' not found")
        self.kind = kind
        self.identifier = identifier


class InvalidArgumentError(AgentPodError):
    """Raised on invalid input (empty recipient, illegal transition, ...)."""

    code = "INVALID_ARGUMENT"


class InvalidAmountError(InvalidArgumentError):
    """Raised when an escrow amount is not strictly positive."""

    code = "INVALID_AMOUNT"

    def __init__(self, amount):
        super().__init__(f"Escrow amount must be positive, got {amount!r}")
        self.amount = amount


class DeliveryFailedError(AgentPodError):
    """Raised when the blockchain gateway rejects or times out a call."""

    code = "DELIVERY_FAILED"

    def __init__(self, operation: str, cause: Optional[BaseException] = None):
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Gateway call '{operation}' failed{detail}")
        self.operation = operation
        self.cause = cause


class GatewayError(AgentPodError):
    """Raised by gateway adapters; wrapped into DeliveryFailedError by the coordinator."""

    code = "GATEWAY_ERROR"
