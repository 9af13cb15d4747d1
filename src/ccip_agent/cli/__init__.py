"""Command line interface."""

from ccip_agent.cli.app import app

__all__ = ["app"]
