"""Built-in tool definitions."""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ccip_agent.bridge import Failed, TransferOrchestrator, TransferRequest
from ccip_agent.config import Settings
from ccip_agent.errors import ExternalProviderError, ValidationError
from ccip_agent.tools.registry import ToolRegistry

ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")
GREETING = "Hello, World! The ccip-agent tool server is up."


class EmptyInput(BaseModel):
    model_config = ConfigDict(extra="ignore")


class MoveTokenInput(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    token_address: str | None = Field(
        default=None,
        alias="tokenAddress",
        description="ERC-20 token on the source chain; defaults to TOKEN_ADDRESS",
    )
    amount: int = Field(..., gt=0, description="Amount in the token's smallest unit")
    destination_account: str | None = Field(
        default=None,
        alias="destinationAccount",
        description="Receiver on the destination chain; defaults to DESTINATION_ACCOUNT",
    )

    @field_validator("amount", mode="before")
    @classmethod
    def _reject_bool_amount(cls, value: object) -> object:
        if isinstance(value, bool):
            raise ValueError("expected an integer amount, got a boolean")
        return value

    @field_validator("token_address", "destination_account")
    @classmethod
    def _check_address(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        if ADDRESS_RE.fullmatch(value) is None:
            raise ValueError("expected a 0x-prefixed 20-byte hex address")
        return value


def _utc_now() -> datetime:
    return datetime.now(UTC)


def build_tool_registry(
    session_id: str,
    *,
    settings: Settings,
    orchestrator: TransferOrchestrator,
    clock: Callable[[], datetime] = _utc_now,
) -> ToolRegistry:
    """Build the isolated handler set of one session."""

    registry = ToolRegistry(session_id)

    @registry.register(name="helloWorld", description="returns a simple greeting", input_model=EmptyInput)
    def hello_world(_params: EmptyInput) -> str:
        return GREETING

    @registry.register(
        name="getCurrentTime",
        description="returns the current time in ISO format",
        input_model=EmptyInput,
    )
    def get_current_time(_params: EmptyInput) -> str:
        return clock().astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")

    @registry.register(
        name="moveToken",
        description="moves a token between chains (may take several minutes)",
        input_model=MoveTokenInput,
    )
    async def move_token(params: MoveTokenInput) -> str:
        token_address = params.token_address or settings.token_address
        destination_account = params.destination_account or settings.destination_account
        missing = [
            name
            for name, value in (("tokenAddress", token_address), ("destinationAccount", destination_account))
            if not value
        ]
        if missing:
            raise ValidationError(f"invalid arguments for moveToken: missing {', '.join(missing)}")

        outcome = await orchestrator.execute(
            TransferRequest(
                token_address=token_address,
                amount=params.amount,
                destination_account=destination_account,
            )
        )
        if isinstance(outcome, Failed):
            raise ExternalProviderError(outcome.message())
        return outcome.message()

    return registry
