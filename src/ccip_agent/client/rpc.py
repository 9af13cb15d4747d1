"""JSON-RPC client for the tool server."""

from __future__ import annotations

import itertools
from typing import Any

import httpx
from loguru import logger

from ccip_agent import __version__
from ccip_agent.errors import ExternalProviderError, RoutingError
from ccip_agent.server.protocol import INVALID_PARAMS, PROTOCOL_VERSION, SESSION_HEADER
from ccip_agent.tools.registry import ToolResult


class ToolServerClient:
    """Talks to ``POST /rpc`` and keeps the session id the server assigns."""

    def __init__(
        self,
        url: str,
        *,
        session_id: str | None = None,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self._url = url
        self.session_id = session_id
        self._http = http or httpx.AsyncClient(timeout=httpx.Timeout(None, connect=10.0))
        self._ids = itertools.count(1)

    async def initialize(self) -> dict[str, Any]:
        result = await self._request(
            "initialize",
            {
                "protocolVersion": PROTOCOL_VERSION,
                "capabilities": {},
                "clientInfo": {"name": "ccip-agent-chat", "version": __version__},
            },
        )
        await self._notify("notifications/initialized")
        logger.info("rpc.initialized session={}", self.session_id)
        return result

    async def list_tools(self) -> list[dict[str, Any]]:
        result = await self._request("tools/list", {})
        tools = result.get("tools")
        return tools if isinstance(tools, list) else []

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> ToolResult:
        result = await self._request("tools/call", {"name": name, "arguments": arguments})
        content = result.get("content") or []
        text = "\n".join(str(item.get("text", "")) for item in content if isinstance(item, dict))
        return ToolResult(text=text, is_error=bool(result.get("isError", False)))

    async def aclose(self) -> None:
        await self._http.aclose()

    def _headers(self) -> dict[str, str]:
        return {SESSION_HEADER: self.session_id} if self.session_id else {}

    async def _post(self, payload: dict[str, Any]) -> httpx.Response:
        try:
            response = await self._http.post(self._url, json=payload, headers=self._headers())
        except httpx.HTTPError as exc:
            raise ExternalProviderError(f"tool server unreachable: {exc!s}") from exc
        if assigned := response.headers.get(SESSION_HEADER):
            self.session_id = assigned
        if response.is_error:
            raise ExternalProviderError(f"tool server returned {response.status_code}: {response.text}")
        return response

    async def _notify(self, method: str) -> None:
        await self._post({"jsonrpc": "2.0", "method": method})

    async def _request(self, method: str, params: dict[str, Any]) -> dict[str, Any]:
        response = await self._post({"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params})
        try:
            body = response.json()
        except ValueError as exc:
            raise ExternalProviderError(f"tool server sent invalid JSON: {response.text}") from exc

        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict):
            message = str(error.get("message", "unknown error"))
            if error.get("code") == INVALID_PARAMS and message.startswith("unknown tool: "):
                raise RoutingError(message.removeprefix("unknown tool: "))
            raise ExternalProviderError(f"{method} failed: {message}")
        result = body.get("result") if isinstance(body, dict) else None
        return result if isinstance(result, dict) else {}
