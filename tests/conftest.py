from __future__ import annotations

import pytest

from ccip_agent.bridge import TransferOrchestrator
from ccip_agent.config import Settings

from .fakes import RECEIVER, ROUTER, SELECTOR, SENDER, TOKEN, FakeChain


@pytest.fixture
def chain() -> FakeChain:
    return FakeChain()


@pytest.fixture
def orchestrator(chain: FakeChain) -> TransferOrchestrator:
    return TransferOrchestrator(
        reader=chain,
        bridge=chain,
        sender=SENDER,
        spender=ROUTER,
        destination_chain_selector=SELECTOR,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        rpc_url="http://localhost:8545",
        private_key="0x" + "11" * 32,
        router_address=ROUTER,
        token_address=TOKEN,
        destination_chain_selector=str(SELECTOR),
        destination_account=RECEIVER,
        tool_timeout_seconds=5,
        model_timeout_seconds=5,
    )
