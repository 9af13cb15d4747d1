"""Transfer request and outcome types."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class TransferRequest:
    """One cross-chain transfer, amount in the token's smallest unit."""

    token_address: str
    amount: int
    destination_account: str


@dataclass(frozen=True)
class InsufficientBalance:
    have: int
    need: int

    def message(self) -> str:
        return f"Insufficient balance: have {self.have}, need {self.need}. No transfer was submitted."


@dataclass(frozen=True)
class Completed:
    tx_hash: str
    message_id: str

    def message(self) -> str:
        return (
            "Cross-chain transfer submitted successfully. "
            f"Transaction hash: {self.tx_hash}. Message ID: {self.message_id}."
        )


@dataclass(frozen=True)
class Failed:
    reason: str

    def message(self) -> str:
        return f"Transfer failed: {self.reason}"


TransferOutcome = InsufficientBalance | Completed | Failed
