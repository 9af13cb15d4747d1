"""HTTP tool server."""

from ccip_agent.server.app import create_app
from ccip_agent.server.protocol import SESSION_HEADER, JsonRpcError, JsonRpcRequest

__all__ = ["SESSION_HEADER", "JsonRpcError", "JsonRpcRequest", "create_app"]
