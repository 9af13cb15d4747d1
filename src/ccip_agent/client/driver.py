"""Conversational driver: completion, tool dispatch, follow-up."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Protocol

from loguru import logger

from ccip_agent.bounded import with_timeout
from ccip_agent.client.intent import ToolInvocationIntent, detect_tool_invocation
from ccip_agent.client.prompt import FOLLOWUP_INSTRUCTION, render_system_prompt
from ccip_agent.client.transcript import Role, Transcript
from ccip_agent.errors import AgentError, ExternalProviderError, OperationTimeout, RoutingError
from ccip_agent.tools.registry import ToolResult

EXIT_COMMAND = "exit"
CANNED_FOLLOWUPS: dict[str, str] = {
    "moveToken": "The token transfer has been completed successfully! The transaction details are shown above.",
}
DEFAULT_CANNED_FOLLOWUP = "The tool has finished. Its result is shown above."
ERROR_CANNED_FOLLOWUP = "The tool reported an error. The details are shown above."

CompletionFn = Callable[[str], Awaitable[str]]
TurnObserver = Callable[[str, str], None]


class ToolInvoker(Protocol):
    async def call_tool(self, name: str, arguments: dict[str, Any]) -> ToolResult: ...


@dataclass(frozen=True)
class TurnResult:
    """Outcome of one user turn."""

    reply: str
    exit_requested: bool = False
    intent: ToolInvocationIntent | None = None
    tool_result: ToolResult | None = None
    warning: str | None = None
    error: str | None = None


class ConversationDriver:
    """Runs one completion/tool/completion cycle per user turn.

    At most one tool is dispatched per turn. Completion failures end the
    conversation; tool failures end only the current turn.
    """

    def __init__(
        self,
        *,
        complete: CompletionFn,
        tools: ToolInvoker,
        model_timeout_seconds: float,
        tool_timeout_seconds: float,
        system_prompt: str | None = None,
        observer: TurnObserver | None = None,
    ) -> None:
        self._complete = complete
        self._tools = tools
        self._model_timeout_seconds = model_timeout_seconds
        self._tool_timeout_seconds = tool_timeout_seconds
        self._observer = observer
        self.transcript = Transcript()
        self.transcript.append(Role.SYSTEM, system_prompt or render_system_prompt())

    async def handle_input(self, raw: str) -> TurnResult:
        text = raw.strip()
        if text.casefold() == EXIT_COMMAND:
            return TurnResult(reply="", exit_requested=True)
        if not text:
            return TurnResult(reply="")

        self.transcript.append(Role.USER, text)
        try:
            reply = await self._completion(self.transcript.render())
        except (ExternalProviderError, OperationTimeout) as exc:
            logger.error("driver.completion.error error={!s}", exc)
            return TurnResult(reply="", exit_requested=True, error=f"Error calling LLM: {exc!s}")

        intent = detect_tool_invocation(reply)
        if intent is None:
            self.transcript.append(Role.ASSISTANT, reply)
            return TurnResult(reply=reply)
        return await self._dispatch(intent)

    async def _dispatch(self, intent: ToolInvocationIntent) -> TurnResult:
        if intent.warning:
            logger.warning("driver.tool.arguments tool={} warning={}", intent.tool_name, intent.warning)
        logger.info("driver.tool.invoke tool={} arguments={}", intent.tool_name, intent.arguments)
        self._notify("tool", intent.tool_name)

        try:
            if not intent.has_valid_name:
                raise RoutingError(intent.tool_name)
            result = await with_timeout(
                self._tools.call_tool(intent.tool_name, intent.arguments),
                self._tool_timeout_seconds,
                name=f"tool {intent.tool_name}",
            )
        except AgentError as exc:
            logger.error("driver.tool.error tool={} error={!s}", intent.tool_name, exc)
            return TurnResult(
                reply="",
                intent=intent,
                warning=intent.warning,
                error=f"Tool invocation error: {exc!s}",
            )

        self.transcript.append_tool_result(intent.tool_name, result.text)
        self._notify("followup", intent.tool_name)
        followup_prompt = f"{self.transcript.render()}\n\n{FOLLOWUP_INSTRUCTION}"
        try:
            followup = await self._completion(followup_prompt)
        except (ExternalProviderError, OperationTimeout) as exc:
            logger.error("driver.followup.error error={!s}", exc)
            return TurnResult(
                reply="",
                exit_requested=True,
                intent=intent,
                tool_result=result,
                warning=intent.warning,
                error=f"Error getting LLM follow-up: {exc!s}",
            )

        if detect_tool_invocation(followup) is not None:
            logger.warning("driver.followup.tool_call_suppressed tool={}", intent.tool_name)
            followup = _canned_followup(intent.tool_name, result)
        self.transcript.append(Role.ASSISTANT, followup)
        return TurnResult(reply=followup, intent=intent, tool_result=result, warning=intent.warning)

    async def _completion(self, prompt: str) -> str:
        return await with_timeout(self._complete(prompt), self._model_timeout_seconds, name="model completion")

    def _notify(self, kind: str, content: str) -> None:
        if self._observer is not None:
            self._observer(kind, content)


def _canned_followup(tool_name: str, result: ToolResult) -> str:
    if result.is_error:
        return ERROR_CANNED_FOLLOWUP
    return CANNED_FOLLOWUPS.get(tool_name, DEFAULT_CANNED_FOLLOWUP)
