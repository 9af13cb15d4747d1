import pytest

from ccip_agent.client.driver import CANNED_FOLLOWUPS, ConversationDriver
from ccip_agent.client.prompt import FOLLOWUP_INSTRUCTION
from ccip_agent.client.transcript import Role
from ccip_agent.errors import ExternalProviderError, RoutingError
from ccip_agent.tools.registry import ToolResult

from .fakes import FakeCompletion, FakeTools

MOVE_TOKEN_REPLY = 'TOOL: moveToken {"tokenAddress": "0xabc", "amount": 5, "destinationAccount": "0xdef"}'


def _driver(completion: FakeCompletion, tools: FakeTools, **kwargs) -> ConversationDriver:
    kwargs.setdefault("model_timeout_seconds", 1)
    kwargs.setdefault("tool_timeout_seconds", 1)
    return ConversationDriver(complete=completion.complete, tools=tools, **kwargs)


@pytest.mark.asyncio
async def test_plain_reply_is_not_dispatched() -> None:
    completion = FakeCompletion(replies=["It is noon."])
    tools = FakeTools()
    driver = _driver(completion, tools)

    result = await driver.handle_input("What time is it?")

    assert result.reply == "It is noon."
    assert result.intent is None
    assert tools.calls == []
    assert [u.role for u in driver.transcript.utterances] == [Role.SYSTEM, Role.USER, Role.ASSISTANT]
    assert completion.prompts[0].startswith("SYSTEM: You are an assistant")
    assert completion.prompts[0].endswith("User: What time is it?")


@pytest.mark.asyncio
async def test_tool_turn_appends_result_and_requests_followup() -> None:
    completion = FakeCompletion(replies=[MOVE_TOKEN_REPLY, "Sent 5 tokens."])
    tools = FakeTools(result=ToolResult(text="Cross-chain transfer submitted successfully."))
    events: list[tuple[str, str]] = []
    driver = _driver(completion, tools, observer=lambda kind, content: events.append((kind, content)))

    result = await driver.handle_input("send 5 tokens")

    assert tools.calls == [("moveToken", {"tokenAddress": "0xabc", "amount": 5, "destinationAccount": "0xdef"})]
    assert result.reply == "Sent 5 tokens."
    assert result.tool_result == ToolResult(text="Cross-chain transfer submitted successfully.")
    assert result.warning is None
    assert events == [("tool", "moveToken"), ("followup", "moveToken")]

    followup_prompt = completion.prompts[1]
    assert "Tool result for moveToken: Cross-chain transfer submitted successfully." in followup_prompt
    assert followup_prompt.endswith(FOLLOWUP_INSTRUCTION)
    assert driver.transcript.utterances[-1].content == "Sent 5 tokens."


@pytest.mark.asyncio
async def test_tool_shaped_followup_is_replaced() -> None:
    completion = FakeCompletion(replies=[MOVE_TOKEN_REPLY, "TOOL: moveToken {}"])
    tools = FakeTools()
    driver = _driver(completion, tools)

    result = await driver.handle_input("send 5 tokens")

    assert result.reply == CANNED_FOLLOWUPS["moveToken"]
    assert len(tools.calls) == 1


@pytest.mark.asyncio
async def test_exit_ends_without_completion() -> None:
    completion = FakeCompletion(replies=[])
    driver = _driver(completion, FakeTools())

    result = await driver.handle_input("  EXIT ")

    assert result.exit_requested
    assert completion.prompts == []


@pytest.mark.asyncio
async def test_blank_input_is_ignored() -> None:
    completion = FakeCompletion(replies=[])
    driver = _driver(completion, FakeTools())

    result = await driver.handle_input("   ")

    assert not result.exit_requested
    assert completion.prompts == []
    assert len(driver.transcript) == 1


@pytest.mark.asyncio
async def test_completion_error_ends_conversation() -> None:
    completion = FakeCompletion(replies=[ExternalProviderError("LLM request failed: 500 Internal Server Error - boom")])
    driver = _driver(completion, FakeTools())

    result = await driver.handle_input("hi")

    assert result.exit_requested
    assert result.error == "Error calling LLM: LLM request failed: 500 Internal Server Error - boom"


@pytest.mark.asyncio
async def test_completion_timeout_ends_conversation() -> None:
    completion = FakeCompletion(replies=["late"], delay=0.5)
    driver = _driver(completion, FakeTools(), model_timeout_seconds=0.05)

    result = await driver.handle_input("hi")

    assert result.exit_requested
    assert "model completion timed out" in result.error


@pytest.mark.asyncio
async def test_tool_timeout_reports_error_without_followup() -> None:
    completion = FakeCompletion(replies=[MOVE_TOKEN_REPLY, "unused"])
    tools = FakeTools(delay=0.5)
    driver = _driver(completion, tools, tool_timeout_seconds=0.05)

    result = await driver.handle_input("send 5 tokens")

    assert not result.exit_requested
    assert result.error.startswith("Tool invocation error: tool moveToken timed out")
    assert len(completion.prompts) == 1
    assert all(u.role is not Role.TOOL for u in driver.transcript.utterances)


@pytest.mark.asyncio
async def test_unknown_tool_is_reported() -> None:
    completion = FakeCompletion(replies=["TOOL: transferAll {}"])
    driver = _driver(completion, FakeTools(result=RoutingError("transferAll")))

    result = await driver.handle_input("move everything")

    assert result.error == "Tool invocation error: unknown tool: transferAll"
    assert not result.exit_requested


@pytest.mark.asyncio
async def test_unparsable_arguments_dispatch_empty_mapping_with_warning() -> None:
    completion = FakeCompletion(replies=['TOOL: moveToken {"amount": 5', "Something went wrong."])
    tools = FakeTools(result=ToolResult(text="invalid arguments for moveToken: amount: Field required", is_error=True))
    driver = _driver(completion, tools)

    result = await driver.handle_input("send 5")

    assert tools.calls == [("moveToken", {})]
    assert result.warning is not None
    assert "could not parse tool arguments" in result.warning
    assert result.tool_result.is_error


@pytest.mark.asyncio
async def test_error_result_followup_uses_error_message() -> None:
    completion = FakeCompletion(replies=[MOVE_TOKEN_REPLY, "TOOL: helloWorld"])
    tools = FakeTools(result=ToolResult(text="Transfer failed: reverted", is_error=True))
    driver = _driver(completion, tools)

    result = await driver.handle_input("send")

    assert result.reply != CANNED_FOLLOWUPS["moveToken"]
    assert "error" in result.reply


@pytest.mark.asyncio
async def test_malformed_tool_name_is_reported_as_unknown_tool() -> None:
    completion = FakeCompletion(replies=['TOOL: moveToken{"amount":5}'])
    tools = FakeTools()
    driver = _driver(completion, tools)

    result = await driver.handle_input("send 5")

    assert tools.calls == []
    assert result.error == 'Tool invocation error: unknown tool: moveToken{"amount":5}'
    assert not result.exit_requested
    assert len(completion.prompts) == 1
