"""
AgentPod logging utilities.

Modules log through ``logging.getLogger(__name__)``; this module only wires
the ``agentpod`` logger hierarchy to a handler and keeps wallet secrets out
of log lines.
"""

import logging
from typing import Optional

_logger = logging.getLogger("agentpod")

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(
    level: int = logging.INFO,
    handler: Optional[logging.Handler] = None,
    format_string: Optional[str] = None,
) -> logging.Logger:
    """
    Configure AgentPod logging.

    Args:
        level: Log level for the ``agentpod`` logger tree
        handler: Custom handler (default: StreamHandler to stderr)
        format_string: Custom format string

    Returns:
        The configured root ``agentpod`` logger
    """
    if handler is None:
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(format_string or DEFAULT_FORMAT))

    for existing in list(_logger.handlers):
        _logger.removeHandler(existing)
    _logger.addHandler(handler)
    _logger.setLevel(level)
    return _logger


def mask_secret(value: Optional[str], visible: int = 4) -> str:
    """Mask a secret so only its first characters survive."""
    if not value:
        return ""
    if len(value) <= visible:
        return "*" * len(value)
    return value[:visible] + "..." + "[REDACTED]"
