"""Balance check, approval and cross-chain send for one transfer."""

from __future__ import annotations

from loguru import logger

from ccip_agent.bridge.providers import BridgeClient, ChainReader
from ccip_agent.bridge.types import Completed, Failed, InsufficientBalance, TransferOutcome, TransferRequest


class TransferOrchestrator:
    """Sole entry point for cross-chain sends.

    Every call yields exactly one outcome. Provider failures are folded
    into ``Failed`` and never retried.
    """

    def __init__(
        self,
        *,
        reader: ChainReader,
        bridge: BridgeClient,
        sender: str,
        spender: str,
        destination_chain_selector: int,
    ) -> None:
        self._reader = reader
        self._bridge = bridge
        self._sender = sender
        self._spender = spender
        self._destination_chain_selector = destination_chain_selector

    @property
    def sender(self) -> str:
        return self._sender

    async def execute(self, request: TransferRequest) -> TransferOutcome:
        try:
            balance = await self._reader.balance_of(request.token_address, self._sender)
            logger.info(
                "transfer.balance token={} owner={} balance={} need={}",
                request.token_address,
                self._sender,
                balance,
                request.amount,
            )
            if balance < request.amount:
                return InsufficientBalance(have=balance, need=request.amount)

            approval_hash = await self._bridge.approve(request.token_address, self._spender, request.amount)
            logger.info("transfer.approve spender={} amount={} tx={}", self._spender, request.amount, approval_hash)

            receipt = await self._bridge.send(
                request.token_address,
                request.amount,
                request.destination_account,
                self._destination_chain_selector,
            )
        except Exception as exc:
            logger.exception("transfer.failed token={} amount={}", request.token_address, request.amount)
            return Failed(reason=str(exc) or exc.__class__.__name__)

        logger.info("transfer.send tx={} message_id={}", receipt.tx_hash, receipt.message_id)
        return Completed(tx_hash=receipt.tx_hash, message_id=receipt.message_id)
