"""Tool registry and the per-session handler set."""

from ccip_agent.tools.builtin import build_tool_registry
from ccip_agent.tools.registry import ToolDescriptor, ToolRegistry, ToolResult

__all__ = ["ToolDescriptor", "ToolRegistry", "ToolResult", "build_tool_registry"]
