"""Per-session tool handler sets and dispatch."""

from __future__ import annotations

import asyncio
import threading
import time
from collections import OrderedDict
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from loguru import logger

from ccip_agent.bounded import with_timeout
from ccip_agent.errors import ExternalProviderError, OperationTimeout, ValidationError
from ccip_agent.logging_utils import session_context
from ccip_agent.tools.registry import ToolRegistry, ToolResult

RegistryBuilder = Callable[[str], ToolRegistry]


@dataclass
class Session:
    """Runtime state of one client session."""

    session_id: str
    registry: ToolRegistry
    created_at: float
    last_used: float
    dispatch_lock: asyncio.Lock = field(default_factory=asyncio.Lock)


class SessionRouter:
    """Routes tool calls to the handler set of their session.

    Sessions are created on first sight, kept in least-recently-used
    order, and evicted when idle longer than ``ttl_seconds`` or when the
    map grows past ``capacity``.
    """

    def __init__(
        self,
        build_registry: RegistryBuilder,
        *,
        tool_timeout_seconds: float,
        capacity: int = 256,
        ttl_seconds: float = 1800,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._build_registry = build_registry
        self._tool_timeout_seconds = tool_timeout_seconds
        self._capacity = capacity
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._sessions: OrderedDict[str, Session] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions

    def get_session(self, session_id: str) -> Session:
        now = self._clock()
        with self._lock:
            self._evict_expired(now)
            existing = self._sessions.get(session_id)
            if existing is not None:
                existing.last_used = now
                self._sessions.move_to_end(session_id)
                return existing

            session = Session(
                session_id=session_id,
                registry=self._build_registry(session_id),
                created_at=now,
                last_used=now,
            )
            self._sessions[session_id] = session
            logger.info("session.created session={} size={}", session_id, len(self._sessions))
            while len(self._sessions) > self._capacity:
                evicted_id, evicted = self._sessions.popitem(last=False)
                logger.info(
                    "session.evicted session={} reason=capacity age={:.1f}s", evicted_id, now - evicted.created_at
                )
            return session

    def list_tools(self, session_id: str) -> list[dict[str, Any]]:
        return self.get_session(session_id).registry.list_tools()

    async def route(self, session_id: str, tool_name: str, arguments: Mapping[str, Any]) -> ToolResult:
        """Run one tool call; ``RoutingError`` propagates for unknown names."""
        session = self.get_session(session_id)
        with session_context(session_id):
            async with session.dispatch_lock:
                try:
                    text = await with_timeout(
                        session.registry.execute(tool_name, arguments=arguments),
                        self._tool_timeout_seconds,
                        name=f"tool {tool_name}",
                    )
                except (ValidationError, ExternalProviderError, OperationTimeout) as exc:
                    logger.warning("session.tool.error tool={} error={!s}", tool_name, exc)
                    return ToolResult(text=str(exc), is_error=True)
        return ToolResult(text=text)

    def _evict_expired(self, now: float) -> None:
        expired = [sid for sid, session in self._sessions.items() if now - session.last_used > self._ttl_seconds]
        for sid in expired:
            session = self._sessions.pop(sid)
            logger.info("session.evicted session={} reason=ttl age={:.1f}s", sid, now - session.created_at)
