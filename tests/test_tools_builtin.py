from datetime import UTC, datetime

import pytest

from ccip_agent.errors import ExternalProviderError, ValidationError
from ccip_agent.tools.builtin import GREETING, build_tool_registry

from .fakes import RECEIVER, SELECTOR, TOKEN

OTHER_TOKEN = "0x5555555555555555555555555555555555555555"


def _clock() -> datetime:
    return datetime(2026, 10, 19, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def registry(settings, orchestrator):
    return build_tool_registry("s1", settings=settings, orchestrator=orchestrator, clock=_clock)


def test_registry_exposes_the_three_tools(registry) -> None:
    assert [descriptor.name for descriptor in registry.descriptors()] == ["getCurrentTime", "helloWorld", "moveToken"]
    schema = registry.get("moveToken").input_schema()
    assert set(schema["properties"]) == {"tokenAddress", "amount", "destinationAccount"}
    assert schema["required"] == ["amount"]


@pytest.mark.asyncio
async def test_hello_world_and_current_time(registry) -> None:
    assert await registry.execute("helloWorld", arguments={}) == GREETING
    assert await registry.execute("getCurrentTime", arguments={}) == "2026-10-19T12:00:00.000Z"


@pytest.mark.asyncio
async def test_move_token_submits_transfer(registry, chain) -> None:
    output = await registry.execute(
        "moveToken",
        arguments={"tokenAddress": OTHER_TOKEN, "amount": 7, "destinationAccount": RECEIVER},
    )

    assert "Transaction hash: 0xfeed" in output
    assert "Message ID: 0xbeef" in output
    assert chain.calls[-1] == ("send", (OTHER_TOKEN, 7, RECEIVER, SELECTOR))


@pytest.mark.asyncio
async def test_move_token_falls_back_to_configured_addresses(registry, chain) -> None:
    await registry.execute("moveToken", arguments={"amount": "3"})

    assert chain.calls[-1] == ("send", (TOKEN, 3, RECEIVER, SELECTOR))


@pytest.mark.asyncio
async def test_move_token_reports_insufficient_balance(registry, chain) -> None:
    chain.balance = 2

    output = await registry.execute("moveToken", arguments={"amount": 5})

    assert output.startswith("Insufficient balance: have 2, need 5")
    assert chain.names() == ["balance_of"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "arguments",
    [
        {},
        {"amount": 0},
        {"amount": -4},
        {"amount": 1.5},
        {"amount": True},
        {"amount": False},
        {"amount": 5, "tokenAddress": "0xabc"},
        {"amount": 5, "destinationAccount": "not-an-address"},
    ],
)
async def test_move_token_rejects_malformed_arguments(registry, chain, arguments) -> None:
    with pytest.raises(ValidationError):
        await registry.execute("moveToken", arguments=arguments)
    assert chain.calls == []


@pytest.mark.asyncio
async def test_move_token_without_any_destination_is_rejected(settings, orchestrator, chain) -> None:
    bare = settings.model_copy(update={"destination_account": None})
    registry = build_tool_registry("s1", settings=bare, orchestrator=orchestrator)

    with pytest.raises(ValidationError, match="destinationAccount"):
        await registry.execute("moveToken", arguments={"amount": 5})
    assert chain.calls == []


@pytest.mark.asyncio
async def test_failed_transfer_surfaces_as_provider_error(registry, chain) -> None:
    chain.send_error = RuntimeError("router reverted")

    with pytest.raises(ExternalProviderError, match="Transfer failed: router reverted"):
        await registry.execute("moveToken", arguments={"amount": 5})


def test_each_build_returns_an_independent_handler_set(settings, orchestrator) -> None:
    first = build_tool_registry("a", settings=settings, orchestrator=orchestrator)
    second = build_tool_registry("b", settings=settings, orchestrator=orchestrator)

    assert first is not second
    assert first.get("moveToken").handler is not second.get("moveToken").handler
    assert (first.session_id, second.session_id) == ("a", "b")
