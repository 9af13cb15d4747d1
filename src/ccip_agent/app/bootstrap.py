"""Runtime bootstrap helpers."""

from __future__ import annotations

from functools import partial

from ccip_agent.app.sessions import SessionRouter
from ccip_agent.bridge import TransferOrchestrator
from ccip_agent.bridge.web3_client import Web3BridgeClient
from ccip_agent.config import Settings
from ccip_agent.errors import ConfigurationError
from ccip_agent.tools import build_tool_registry


def build_orchestrator(settings: Settings) -> TransferOrchestrator:
    """Build the transfer orchestrator backed by the configured chain."""

    settings.validate_server()
    try:
        selector = int(str(settings.destination_chain_selector).strip())
    except ValueError as exc:
        raise ConfigurationError(["DESTINATION_CHAIN_SELECTOR (not an integer)"]) from exc

    client = Web3BridgeClient.from_settings(settings)
    return TransferOrchestrator(
        reader=client,
        bridge=client,
        sender=client.address,
        spender=str(settings.router_address),
        destination_chain_selector=selector,
    )


def build_session_router(settings: Settings, orchestrator: TransferOrchestrator) -> SessionRouter:
    """Build the session router; every new session gets its own tool registry."""

    return SessionRouter(
        partial(build_tool_registry, settings=settings, orchestrator=orchestrator),
        tool_timeout_seconds=settings.tool_timeout_seconds,
        capacity=settings.session_capacity,
        ttl_seconds=settings.session_ttl_seconds,
    )
