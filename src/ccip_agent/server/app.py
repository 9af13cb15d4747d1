"""FastAPI application exposing the tools over JSON-RPC."""

from __future__ import annotations

import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import APIRouter, FastAPI, Request, status
from fastapi.responses import JSONResponse, Response
from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from ccip_agent import __version__
from ccip_agent.app.sessions import SessionRouter
from ccip_agent.config import Settings
from ccip_agent.errors import RoutingError
from ccip_agent.logging_utils import session_context
from ccip_agent.server.protocol import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    PROTOCOL_VERSION,
    SESSION_HEADER,
    JsonRpcError,
    JsonRpcRequest,
    error_envelope,
    result_envelope,
    text_content,
)


router = APIRouter(tags=["rpc"])


@router.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy"}


@router.post("/rpc")
async def rpc(request: Request) -> Response:
    settings: Settings = request.app.state.settings
    sessions: SessionRouter = request.app.state.session_router
    header_session = request.headers.get(SESSION_HEADER, "").strip()
    session_id = header_session or settings.default_session_id

    try:
        body = await request.json()
    except ValueError:
        return _reply(session_id, error_envelope(None, PARSE_ERROR, "Parse error"))

    try:
        call = JsonRpcRequest.model_validate(body)
    except PydanticValidationError:
        request_id = body.get("id") if isinstance(body, dict) else None
        return _reply(session_id, error_envelope(request_id, INVALID_REQUEST, "Invalid request"))

    if call.method == "initialize" and not header_session:
        session_id = uuid.uuid4().hex

    if call.is_notification:
        return Response(status_code=status.HTTP_202_ACCEPTED, headers={SESSION_HEADER: session_id})

    with session_context(session_id):
        try:
            result = await _dispatch(sessions, session_id, call)
        except JsonRpcError as exc:
            return _reply(session_id, error_envelope(call.id, exc.code, exc.message))
        except Exception:
            correlation_id = uuid.uuid4().hex[:12]
            logger.exception("rpc.error method={} correlation_id={}", call.method, correlation_id)
            message = f"Internal error (correlation id {correlation_id})"
            return _reply(session_id, error_envelope(call.id, INTERNAL_ERROR, message))
    return _reply(session_id, result_envelope(call.id, result))


async def _dispatch(sessions: SessionRouter, session_id: str, call: JsonRpcRequest) -> dict[str, Any]:
    if call.method == "initialize":
        sessions.get_session(session_id)
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {"tools": {"listChanged": False}},
            "serverInfo": {"name": "ccip-agent", "version": __version__},
        }
    if call.method == "ping":
        return {}
    if call.method == "tools/list":
        return {"tools": sessions.list_tools(session_id)}
    if call.method == "tools/call":
        name = call.params.get("name")
        arguments = call.params.get("arguments") or {}
        if not isinstance(name, str) or not name:
            raise JsonRpcError(INVALID_PARAMS, "tools/call requires a tool name")
        if not isinstance(arguments, dict):
            raise JsonRpcError(INVALID_PARAMS, "tools/call arguments must be an object")
        try:
            outcome = await sessions.route(session_id, name, arguments)
        except RoutingError as exc:
            raise JsonRpcError(INVALID_PARAMS, str(exc)) from exc
        return text_content(outcome.text, is_error=outcome.is_error)
    raise JsonRpcError(METHOD_NOT_FOUND, f"Method not found: {call.method}")


def _reply(session_id: str, payload: dict[str, Any]) -> JSONResponse:
    return JSONResponse(content=payload, headers={SESSION_HEADER: session_id})


def create_app(settings: Settings, session_router: SessionRouter) -> FastAPI:
    """Create the tool server around an already-built session router."""

    @asynccontextmanager
    async def lifespan(_application: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "server.start port={} session_capacity={} tool_timeout={}s",
            settings.mcp_server_port,
            settings.session_capacity,
            settings.tool_timeout_seconds,
        )
        yield
        logger.info("server.stop sessions={}", len(session_router))

    application = FastAPI(title="ccip-agent tool server", version=__version__, lifespan=lifespan)
    application.state.settings = settings
    application.state.session_router = session_router
    application.include_router(router)
    return application
