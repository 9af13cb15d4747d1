"""Interactive client: transcript, tool-call parsing and the conversational driver."""

from ccip_agent.client.completion import OllamaCompletionClient
from ccip_agent.client.driver import ConversationDriver, TurnResult
from ccip_agent.client.intent import ToolInvocationIntent, detect_tool_invocation, parse_arguments
from ccip_agent.client.rpc import ToolServerClient
from ccip_agent.client.transcript import Role, Transcript

__all__ = [
    "ConversationDriver",
    "OllamaCompletionClient",
    "Role",
    "ToolInvocationIntent",
    "ToolServerClient",
    "Transcript",
    "TurnResult",
    "detect_tool_invocation",
    "parse_arguments",
]
