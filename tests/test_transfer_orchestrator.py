import pytest

from ccip_agent.bridge import Completed, Failed, InsufficientBalance, TransferRequest
from ccip_agent.errors import ExternalProviderError

from .fakes import RECEIVER, ROUTER, SELECTOR, SENDER, TOKEN


def _request(amount: int) -> TransferRequest:
    return TransferRequest(token_address=TOKEN, amount=amount, destination_account=RECEIVER)


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", [101, 1_000, 10**24])
async def test_amount_above_balance_short_circuits(chain, orchestrator, amount: int) -> None:
    chain.balance = 100

    outcome = await orchestrator.execute(_request(amount))

    assert outcome == InsufficientBalance(have=100, need=amount)
    assert chain.names() == ["balance_of"]
    assert chain.calls[0] == ("balance_of", (TOKEN, SENDER))


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", [1, 50, 100])
async def test_transfer_completes_with_send_receipt(chain, orchestrator, amount: int) -> None:
    chain.tx_hash = f"0xtx{amount}"
    chain.message_id = f"0xmsg{amount}"

    outcome = await orchestrator.execute(_request(amount))

    assert outcome == Completed(tx_hash=f"0xtx{amount}", message_id=f"0xmsg{amount}")
    assert chain.names() == ["balance_of", "approve", "send"]
    assert chain.calls[1] == ("approve", (TOKEN, ROUTER, amount))
    assert chain.calls[2] == ("send", (TOKEN, amount, RECEIVER, SELECTOR))


@pytest.mark.asyncio
async def test_failed_approval_never_sends(chain, orchestrator) -> None:
    chain.approve_error = ExternalProviderError("approve transaction 0xabc reverted")

    outcome = await orchestrator.execute(_request(10))

    assert outcome == Failed(reason="approve transaction 0xabc reverted")
    assert "send" not in chain.names()


@pytest.mark.asyncio
async def test_balance_read_failure_is_reported(chain, orchestrator) -> None:
    chain.balance_error = ConnectionError("rpc down")

    outcome = await orchestrator.execute(_request(10))

    assert outcome == Failed(reason="rpc down")
    assert chain.names() == ["balance_of"]


@pytest.mark.asyncio
async def test_send_failure_is_reported_once(chain, orchestrator) -> None:
    chain.send_error = RuntimeError()

    outcome = await orchestrator.execute(_request(10))

    assert outcome == Failed(reason="RuntimeError")
    assert chain.names() == ["balance_of", "approve", "send"]


def test_outcome_messages_carry_details() -> None:
    assert "have 3, need 7" in InsufficientBalance(have=3, need=7).message()
    completed = Completed(tx_hash="0xaaa", message_id="0xbbb").message()
    assert "0xaaa" in completed
    assert "0xbbb" in completed
    assert Failed(reason="nope").message() == "Transfer failed: nope"
