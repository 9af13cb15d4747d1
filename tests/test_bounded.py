import asyncio

import pytest

from ccip_agent.bounded import with_timeout
from ccip_agent.errors import ExternalProviderError, OperationTimeout


@pytest.mark.asyncio
async def test_returns_value_within_budget() -> None:
    async def _quick() -> str:
        return "done"

    assert await with_timeout(_quick(), 1, name="quick") == "done"


@pytest.mark.asyncio
async def test_own_error_is_not_turned_into_a_timeout() -> None:
    async def _broken() -> str:
        raise ExternalProviderError("rpc down")

    with pytest.raises(ExternalProviderError, match="rpc down"):
        await with_timeout(_broken(), 1, name="broken")


@pytest.mark.asyncio
async def test_timeout_carries_name_and_budget() -> None:
    with pytest.raises(OperationTimeout) as exc_info:
        await with_timeout(asyncio.sleep(1), 0.05, name="model completion")

    error = exc_info.value
    assert error.operation == "model completion"
    assert error.budget_seconds == 0.05
    assert error.elapsed_seconds >= 0.05
    assert "model completion timed out" in str(error)
    assert not isinstance(error, ExternalProviderError)


@pytest.mark.asyncio
async def test_operation_keeps_running_after_timeout() -> None:
    finished = asyncio.Event()

    async def _slow() -> None:
        await asyncio.sleep(0.1)
        finished.set()

    with pytest.raises(OperationTimeout):
        await with_timeout(_slow(), 0.01, name="slow")

    await asyncio.wait_for(finished.wait(), timeout=1)
    assert finished.is_set()
