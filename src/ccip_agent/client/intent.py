"""Tool-invocation detection in model replies."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any

TOOL_MARKER = "TOOL:"
PAREN_CALL_RE = re.compile(r"^(\w+)\(\s*(\{.*\})\s*\)$")
TOOL_NAME_RE = re.compile(r"^\w+$")
# Unquoted keys only: `key: "text"` or `key: 123`.
KEY_VALUE_RE = re.compile(r'(\w+):\s*"([^"]+)"|(\w+):\s*(\d+)')


@dataclass(frozen=True)
class ParsedArguments:
    """Argument mapping plus a warning when every parse tier failed."""

    values: dict[str, Any] = field(default_factory=dict)
    warning: str | None = None
    method: str = "empty"  # json|scrape|empty


@dataclass(frozen=True)
class ToolInvocationIntent:
    """Tool call requested by one model reply."""

    tool_name: str
    raw_arguments: str
    arguments: dict[str, Any]
    warning: str | None = None

    @property
    def has_valid_name(self) -> bool:
        return TOOL_NAME_RE.fullmatch(self.tool_name) is not None


def detect_tool_invocation(reply: str) -> ToolInvocationIntent | None:
    """Return the tool call on the first line of ``reply``, if there is one.

    Anything after the first line is dropped.
    """

    if not reply.startswith(TOOL_MARKER):
        return None

    first_line = reply.splitlines()[0]
    tool_name, raw_arguments = split_tool_call(first_line[len(TOOL_MARKER) :].strip())
    if not tool_name:
        return None

    parsed = parse_arguments(raw_arguments)
    return ToolInvocationIntent(
        tool_name=tool_name,
        raw_arguments=raw_arguments,
        arguments=parsed.values,
        warning=parsed.warning,
    )


def split_tool_call(rest: str) -> tuple[str, str]:
    """Split ``name({...})`` or ``name {...}`` into name and payload."""

    paren = PAREN_CALL_RE.match(rest)
    if paren is not None:
        return paren.group(1), paren.group(2)

    name, _, payload = rest.partition(" ")
    return name, payload.strip()


def parse_arguments(raw: str) -> ParsedArguments:
    """Parse a payload with JSON first, then a key:value scrape, then give up with ``{}``."""

    if not raw:
        return ParsedArguments(method="empty")

    try:
        decoded = json.loads(raw)
    except ValueError as exc:
        json_error = str(exc)
    else:
        if isinstance(decoded, dict):
            return ParsedArguments(values=decoded, method="json")
        json_error = f"expected a JSON object, got {type(decoded).__name__}"

    scraped = scrape_key_values(raw)
    if scraped:
        return ParsedArguments(values=scraped, method="scrape")

    return ParsedArguments(
        warning=f"could not parse tool arguments {raw!r} ({json_error}); continuing with no arguments",
        method="empty",
    )


def scrape_key_values(raw: str) -> dict[str, Any]:
    if not (raw.startswith("{") and '"' in raw and '\\"' not in raw):
        return {}

    values: dict[str, Any] = {}
    for match in KEY_VALUE_RE.finditer(raw):
        if match.group(1) is not None:
            values[match.group(1)] = match.group(2)
        else:
            values[match.group(3)] = int(match.group(4))
    return values
