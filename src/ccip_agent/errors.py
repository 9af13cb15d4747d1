"""Application-level exception types for ccip-agent."""

from __future__ import annotations


class AgentError(Exception):
    """Base exception for ccip-agent."""


class ConfigurationError(AgentError):
    """Raised when a required setting is missing at startup."""

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        super().__init__(f"Missing required environment variables: {', '.join(self.missing)}")


class ValidationError(AgentError):
    """Raised when tool arguments are malformed."""


class RoutingError(AgentError):
    """Raised when a tool name does not match any registered tool."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"unknown tool: {name}")


class ExternalProviderError(AgentError):
    """Raised when the chain, the bridge router or the completion endpoint fails."""


class OperationTimeout(AgentError):
    """Raised when a bounded operation does not settle within its budget."""

    def __init__(self, operation: str, budget_seconds: float, elapsed_seconds: float) -> None:
        self.operation = operation
        self.budget_seconds = budget_seconds
        self.elapsed_seconds = elapsed_seconds
        super().__init__(f"{operation} timed out after {elapsed_seconds:.1f}s (budget {budget_seconds:g}s)")
