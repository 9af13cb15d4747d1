"""Unified tool registry."""

from __future__ import annotations

import builtins
import inspect
import json
import time
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from typing import Any

from loguru import logger
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ccip_agent.errors import RoutingError, ValidationError

ToolHandler = Callable[[Any], Awaitable[str] | str]


def _shorten_text(text: str, width: int = 30, placeholder: str = "...") -> str:
    """Shorten text to width characters, cutting in the middle of words if needed."""
    if len(text) <= width:
        return text

    available = width - len(placeholder)
    if available <= 0:
        return placeholder

    return text[:available] + placeholder


@dataclass(frozen=True)
class ToolResult:
    """Text returned to the caller of one tool invocation."""

    text: str
    is_error: bool = False


@dataclass(frozen=True)
class ToolDescriptor:
    """Tool metadata and runtime handle."""

    name: str
    description: str
    input_model: type[BaseModel]
    handler: ToolHandler

    def input_schema(self) -> dict[str, Any]:
        return self.input_model.model_json_schema(by_alias=True)


class ToolRegistry:
    """Tools available to one session."""

    def __init__(self, session_id: str = "-") -> None:
        self.session_id = session_id
        self._tools: dict[str, ToolDescriptor] = {}

    def register(
        self,
        *,
        name: str,
        description: str,
        input_model: type[BaseModel],
    ) -> Callable[[ToolHandler], ToolHandler]:
        def decorator(handler: ToolHandler) -> ToolHandler:
            self._tools[name] = ToolDescriptor(
                name=name,
                description=description,
                input_model=input_model,
                handler=handler,
            )
            return handler

        return decorator

    def get(self, name: str) -> ToolDescriptor | None:
        return self._tools.get(name)

    def descriptors(self) -> builtins.list[ToolDescriptor]:
        return sorted(self._tools.values(), key=lambda item: item.name)

    def list_tools(self) -> builtins.list[dict[str, Any]]:
        return [
            {
                "name": descriptor.name,
                "description": descriptor.description,
                "inputSchema": descriptor.input_schema(),
            }
            for descriptor in self.descriptors()
        ]

    def validate(self, name: str, arguments: Mapping[str, Any]) -> BaseModel:
        descriptor = self.get(name)
        if descriptor is None:
            raise RoutingError(name)
        try:
            return descriptor.input_model.model_validate(arguments)
        except PydanticValidationError as exc:
            raise ValidationError(_format_validation_error(name, exc)) from exc

    async def execute(self, name: str, *, arguments: Mapping[str, Any]) -> str:
        params = self.validate(name, arguments)
        descriptor = self._tools[name]
        self._log_tool_call(name, arguments)

        start = time.monotonic()
        try:
            result = descriptor.handler(params)
            if inspect.isawaitable(result):
                result = await result
            return str(result)
        except Exception:
            logger.exception("tool.call.error name={}", name)
            raise
        finally:
            duration = time.monotonic() - start
            logger.info("tool.call.end name={} duration={:.3f}ms", name, duration * 1000)

    def _log_tool_call(self, name: str, arguments: Mapping[str, Any]) -> None:
        params: list[str] = []
        for key, value in arguments.items():
            try:
                rendered = json.dumps(value, ensure_ascii=False)
            except TypeError:
                rendered = repr(value)
            value = _shorten_text(rendered, width=30, placeholder="...")
            if value.startswith('"') and not value.endswith('"'):
                value = value + '"'
            params.append(f"{key}={value}")
        logger.info("tool.call.start name={} session={} {{ {} }}", name, self.session_id, ", ".join(params))


def _format_validation_error(name: str, exc: PydanticValidationError) -> str:
    problems: list[str] = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "arguments"
        problems.append(f"{location}: {error.get('msg', 'invalid value')}")
    return f"invalid arguments for {name}: " + "; ".join(problems)
