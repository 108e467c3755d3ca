"""
Read-only providers rendering protocol state for the host.
"""

from .contracts import Context, Provider, ProviderResult


async def agent_status(context: Context) -> ProviderResult:
    coordinator = context.coordinator
    if coordinator is None:
        return ProviderResult("AgentPod: not initialized", {"is_initialized": False})

    agent = coordinator.current_agent
    stats = await coordinator.get_protocol_stats()
    network = await coordinator.get_network_stats()
    config = coordinator.config

    if agent is None:
        lines = ["AgentPod: not registered"]
    else:
        lines = [
            f"AgentPod agent {agent.name} ({agent.agent_id})",
            f"Status: {agent.status.value}, reputation {agent.reputation}/100",
            f"Capabilities: {', '.join(agent.capabilities)}",
        ]
    if config is not None:
        lines.append(f"Network: {config.network_name()}")
    lines.append(
        f"Channels: {stats.total_channels}, messages: {stats.total_messages}, "
        f"active escrows: {stats.active_escrows}"
    )

    return ProviderResult("\n".join(lines), {
        "is_initialized": True,
        "is_registered": agent is not None,
        "agent": agent.to_dict() if agent else None,
        "protocol_stats": stats.to_dict(),
        "network_stats": network.to_dict(),
        "config": config.masked() if config else None,
    })


async def network_stats(context: Context) -> ProviderResult:
    coordinator = context.coordinator
    if coordinator is None:
        return ProviderResult("AgentPod network: not connected", {"connected": False})

    connected = await coordinator.health_check()
    network = await coordinator.get_network_stats()
    agent = coordinator.current_agent

    text = (
        f"AgentPod network: {'connected' if connected else 'unreachable'}, "
        f"health {network.health}, block height {network.block_height}"
    )
    return ProviderResult(text, {
        "connected": connected,
        "status": network.health,
        "is_registered": agent is not None,
        "network_stats": network.to_dict(),
        "agent": agent.to_dict() if agent else None,
    })


PROVIDERS = [
    Provider(
        name="agentStatus",
        description="Current agent identity, registration and local protocol counts",
        get=agent_status,
    ),
    Provider(
        name="networkStats",
        description="Network connectivity and chain statistics",
        get=network_stats,
    ),
]
