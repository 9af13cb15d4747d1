"""Interfaces of the chain and bridge collaborators."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class SendReceipt:
    """Source-chain transaction hash and the bridge's own message id."""

    tx_hash: str
    message_id: str


class ChainReader(Protocol):
    async def balance_of(self, token_address: str, owner: str) -> int: ...


class BridgeClient(Protocol):
    async def approve(self, token_address: str, spender: str, amount: int) -> str:
        """Submit an allowance approval and return its hash once confirmed."""
        ...

    async def send(
        self,
        token_address: str,
        amount: int,
        destination_account: str,
        destination_chain_selector: int,
    ) -> SendReceipt: ...
