"""
AgentPod Plugin Module

Actions, providers and evaluators a host agent runtime can register.

Usage:
    from agentpod.plugin import Context, build_plugin

    plugin = build_plugin()
    context = Context(text="Find trading agents", coordinator=coordinator)
    for action in plugin.matching_actions(context):
        result = await action.run(context)
"""

from .actions import ACTIONS
from .contracts import (
    Action,
    ActionResult,
    Context,
    Evaluator,
    PluginRegistry,
    Provider,
    ProviderResult,
    RecordKind,
)
from .evaluators import EVALUATORS
from .providers import PROVIDERS


def build_plugin() -> PluginRegistry:
    """Registry holding every action, provider and evaluator."""
    registry = PluginRegistry(
        name="agentpod",
        description="Blockchain-anchored agent communication: identity, messaging, channels and escrow",
    )
    for record in ACTIONS + PROVIDERS + EVALUATORS:
        registry.register(record)
    return registry


__all__ = [
    "Action",
    "ActionResult",
    "Context",
    "Evaluator",
    "PluginRegistry",
    "Provider",
    "ProviderResult",
    "RecordKind",
    "build_plugin",
]
