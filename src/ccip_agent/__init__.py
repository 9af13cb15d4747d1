"""Chat with a local model that can move ERC-20 tokens across chains over CCIP."""

__version__ = "0.1.0"
