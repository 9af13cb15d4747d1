"""web3.py adapter for ERC-20 reads and CCIP router writes."""

from __future__ import annotations

import asyncio
from typing import Any

from eth_abi import encode
from eth_account import Account
from loguru import logger
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3

from ccip_agent.bridge.providers import SendReceipt
from ccip_agent.config import Settings
from ccip_agent.errors import ConfigurationError, ExternalProviderError

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
# bytes4(keccak256("CCIP EVMExtraArgsV1")); token-only transfers need no receiver gas.
EVM_EXTRA_ARGS_V1_TAG = bytes.fromhex("97a657c9")

ERC20_ABI: list[dict[str, Any]] = [
    {
        "name": "balanceOf",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "account", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "name": "approve",
        "type": "function",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "spender", "type": "address"}, {"name": "amount", "type": "uint256"}],
        "outputs": [{"name": "", "type": "bool"}],
    },
]

_EVM2ANY_MESSAGE = {
    "name": "message",
    "type": "tuple",
    "components": [
        {"name": "receiver", "type": "bytes"},
        {"name": "data", "type": "bytes"},
        {
            "name": "tokenAmounts",
            "type": "tuple[]",
            "components": [{"name": "token", "type": "address"}, {"name": "amount", "type": "uint256"}],
        },
        {"name": "feeToken", "type": "address"},
        {"name": "extraArgs", "type": "bytes"},
    ],
}

ROUTER_ABI: list[dict[str, Any]] = [
    {
        "name": "getFee",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "destinationChainSelector", "type": "uint64"}, _EVM2ANY_MESSAGE],
        "outputs": [{"name": "fee", "type": "uint256"}],
    },
    {
        "name": "ccipSend",
        "type": "function",
        "stateMutability": "payable",
        "inputs": [{"name": "destinationChainSelector", "type": "uint64"}, _EVM2ANY_MESSAGE],
        "outputs": [{"name": "", "type": "bytes32"}],
    },
]


class Web3BridgeClient:
    """Reads balances and submits approval and CCIP send transactions.

    Fees are paid in the native coin. All sessions share one signing key,
    so nonce lookup and submission are serialized.
    """

    def __init__(
        self,
        w3: AsyncWeb3,
        *,
        private_key: str,
        router_address: str,
        receipt_timeout_seconds: float = 240,
    ) -> None:
        self._w3 = w3
        try:
            self._account = Account.from_key(private_key)
        except Exception as exc:
            raise ConfigurationError(["PRIVATE_KEY (not a valid private key)"]) from exc
        try:
            router = Web3.to_checksum_address(router_address)
        except ValueError as exc:
            raise ConfigurationError(["ROUTER_ADDRESS (not a valid address)"]) from exc
        self._router = w3.eth.contract(address=router, abi=ROUTER_ABI)
        self._receipt_timeout_seconds = receipt_timeout_seconds
        self._submit_lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> Web3BridgeClient:
        settings.validate_server()
        if settings.private_key is None or settings.rpc_url is None or settings.router_address is None:
            raise ConfigurationError(settings.missing_server_settings())
        return cls(
            AsyncWeb3(AsyncHTTPProvider(settings.rpc_url)),
            private_key=settings.private_key.get_secret_value(),
            router_address=settings.router_address,
            receipt_timeout_seconds=settings.receipt_timeout_seconds,
        )

    @property
    def address(self) -> str:
        return self._account.address

    async def balance_of(self, token_address: str, owner: str) -> int:
        token = self._token(token_address)
        return int(await token.functions.balanceOf(Web3.to_checksum_address(owner)).call())

    async def approve(self, token_address: str, spender: str, amount: int) -> str:
        token = self._token(token_address)
        call = token.functions.approve(Web3.to_checksum_address(spender), amount)
        return await self._transact(call, label="approve")

    async def send(
        self,
        token_address: str,
        amount: int,
        destination_account: str,
        destination_chain_selector: int,
    ) -> SendReceipt:
        message = (
            encode(["address"], [Web3.to_checksum_address(destination_account)]),
            b"",
            [(Web3.to_checksum_address(token_address), amount)],
            ZERO_ADDRESS,
            EVM_EXTRA_ARGS_V1_TAG + encode(["uint256"], [0]),
        )
        fee = int(await self._router.functions.getFee(destination_chain_selector, message).call())
        logger.info("ccip.fee selector={} fee={}", destination_chain_selector, fee)

        call = self._router.functions.ccipSend(destination_chain_selector, message)
        # The router returns the message id; a static call predicts it before submission.
        message_id = await call.call({"from": self._account.address, "value": fee})
        tx_hash = await self._transact(call, label="ccipSend", value=fee)
        return SendReceipt(tx_hash=tx_hash, message_id=Web3.to_hex(message_id))

    def _token(self, token_address: str):
        return self._w3.eth.contract(address=Web3.to_checksum_address(token_address), abi=ERC20_ABI)

    async def _transact(self, call, *, label: str, value: int = 0) -> str:
        async with self._submit_lock:
            nonce = await self._w3.eth.get_transaction_count(self._account.address, "pending")
            tx = await call.build_transaction({"from": self._account.address, "value": value, "nonce": nonce})
            signed = self._account.sign_transaction(tx)
            raw_hash = await self._w3.eth.send_raw_transaction(signed.raw_transaction)
        tx_hash = Web3.to_hex(raw_hash)
        logger.info("chain.submitted label={} tx={} nonce={}", label, tx_hash, nonce)

        receipt = await self._w3.eth.wait_for_transaction_receipt(raw_hash, timeout=self._receipt_timeout_seconds)
        if receipt["status"] != 1:
            raise ExternalProviderError(f"{label} transaction {tx_hash} reverted")
        return tx_hash
