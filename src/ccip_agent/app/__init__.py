"""Server-side runtime wiring."""

from ccip_agent.app.sessions import Session, SessionRouter

__all__ = ["Session", "SessionRouter"]
