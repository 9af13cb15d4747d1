"""Cross-chain token transfer orchestration."""

from ccip_agent.bridge.orchestrator import TransferOrchestrator
from ccip_agent.bridge.providers import BridgeClient, ChainReader, SendReceipt
from ccip_agent.bridge.types import Completed, Failed, InsufficientBalance, TransferOutcome, TransferRequest

__all__ = [
    "BridgeClient",
    "ChainReader",
    "Completed",
    "Failed",
    "InsufficientBalance",
    "SendReceipt",
    "TransferOrchestrator",
    "TransferOutcome",
    "TransferRequest",
]
