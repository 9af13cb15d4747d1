"""Command line entry points."""

from __future__ import annotations

import asyncio

import typer
import uvicorn
from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from ccip_agent.app.bootstrap import build_orchestrator, build_session_router
from ccip_agent.cli.chat import run_chat
from ccip_agent.cli.render import Renderer
from ccip_agent.client import ConversationDriver, OllamaCompletionClient, ToolServerClient
from ccip_agent.client.prompt import DEFAULT_TOOL_ROWS, render_system_prompt, tool_rows
from ccip_agent.config import Settings, load_settings
from ccip_agent.errors import ConfigurationError, ExternalProviderError
from ccip_agent.logging_utils import configure_logging
from ccip_agent.server import create_app

app = typer.Typer(
    name="ccip-agent",
    help="Chat with a local model that can move tokens across chains.",
    add_completion=False,
    rich_markup_mode="rich",
)


def _load_settings_or_exit() -> Settings:
    try:
        return load_settings()
    except PydanticValidationError as exc:
        typer.echo(f"Invalid configuration: {exc}", err=True)
        raise typer.Exit(1) from exc


@app.command("serve")
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address, defaults to MCP_SERVER_HOST"),
    port: int | None = typer.Option(None, "--port", "-p", help="Listen port, defaults to MCP_SERVER_PORT"),
) -> None:
    """Run the JSON-RPC tool server."""

    settings = _load_settings_or_exit()
    configure_logging(profile="default", level=settings.log_level)
    try:
        orchestrator = build_orchestrator(settings)
    except ConfigurationError as exc:
        logger.error("server.config.error {}", exc)
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc

    session_router = build_session_router(settings, orchestrator)
    logger.info("server.sender address={}", orchestrator.sender)
    uvicorn.run(
        create_app(settings, session_router),
        host=host or settings.mcp_server_host,
        port=port or settings.mcp_server_port,
    )


@app.command("chat")
def chat(
    server_url: str | None = typer.Option(None, "--server-url", help="Tool server, defaults to MCP_SERVER_URL"),
    session_id: str | None = typer.Option(None, "--session-id", help="Reuse a server session"),
) -> None:
    """Start the interactive console."""

    settings = _load_settings_or_exit()
    configure_logging(profile="chat", level=settings.log_level)
    exit_code = asyncio.run(_chat(settings, server_url or settings.mcp_server_url, session_id))
    if exit_code:
        raise typer.Exit(exit_code)


async def _chat(settings: Settings, server_url: str, session_id: str | None) -> int:
    renderer = Renderer()
    tools = ToolServerClient(server_url, session_id=session_id)
    completion = OllamaCompletionClient.from_settings(settings)
    try:
        try:
            await tools.initialize()
            listed = await tools.list_tools()
        except ExternalProviderError as exc:
            renderer.error(f"Could not reach the tool server: {exc}")
            return 1

        rows = tool_rows(listed) or list(DEFAULT_TOOL_ROWS)
        driver = ConversationDriver(
            complete=completion.complete,
            tools=tools,
            model_timeout_seconds=settings.model_timeout_seconds,
            tool_timeout_seconds=settings.tool_timeout_seconds,
            system_prompt=render_system_prompt(rows),
            observer=renderer.on_turn_event,
        )
        renderer.welcome(
            server_url=server_url,
            session_id=tools.session_id,
            tools=[str(tool.get("name")) for tool in listed],
        )
        await run_chat(driver, renderer)
        return 0
    finally:
        await tools.aclose()
        await completion.aclose()
