"""System prompt for the tool-calling console."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

FOLLOWUP_INSTRUCTION = "Provide a helpful summary of the result to the user. Do not call any additional tools."

DEFAULT_TOOL_ROWS: tuple[str, ...] = (
    "helloWorld(): returns a simple greeting",
    "getCurrentTime(): returns the current time in ISO format",
    "moveToken({ tokenAddress, amount, destinationAccount }): moves a token between chains (may take several minutes)",
)


def tool_rows(tools: Iterable[Mapping[str, Any]]) -> list[str]:
    """Render ``tools/list`` entries as one signature line each."""

    rows: list[str] = []
    for tool in tools:
        name = str(tool.get("name", "")).strip()
        if not name:
            continue
        schema = tool.get("inputSchema") or {}
        properties = schema.get("properties") if isinstance(schema, Mapping) else None
        fields = list(properties) if isinstance(properties, Mapping) else []
        signature = f"{name}({{ {', '.join(fields)} }})" if fields else f"{name}()"
        description = str(tool.get("description", "")).strip()
        rows.append(f"{signature}: {description}" if description else signature)
    return rows


def render_system_prompt(rows: Iterable[str] = DEFAULT_TOOL_ROWS) -> str:
    tool_lines = "\n".join(f"  • {row}" for row in rows)
    return (
        "You are an assistant with access to the following tools when needed:\n"
        f"{tool_lines}\n"
        "\n"
        "IMPORTANT INSTRUCTIONS:\n"
        "- When you need to use a tool, output ONLY the tool command on a single line:\n"
        "  TOOL: <toolName> <JSON arguments>\n"
        "- Do NOT add any additional text on the same line or immediately after the tool command\n"
        "- After the tool executes and returns a result, then provide your helpful summary\n"
        "- For successful token transfers, confirm the transaction details to the user\n"
        "- Only use tools when absolutely necessary to answer the user's question\n"
        "\n"
        "EXAMPLES:\n"
        'Good: TOOL: moveToken { "tokenAddress": "0x123...", "amount": 10, "destinationAccount": "0x456..." }\n'
        'Bad: TOOL: moveToken({ "tokenAddress": "0x123..." }) The transaction will be processed...\n'
        "\n"
        "Note: Cross-chain transfers can take 5+ minutes to complete due to blockchain confirmation times."
    )
