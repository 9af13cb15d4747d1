"""Runtime logging helpers."""

from __future__ import annotations

import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from logging import Handler
from typing import Iterator, Literal

import loguru
from loguru import logger
from rich import get_console
from rich.logging import RichHandler

LogProfile = Literal["default", "chat"]

_PROFILE_FORMATS: dict[LogProfile, str] = {
    "chat": "{message}",
    "default": "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<6} | {name}:{function}:{line} | {extra[session]} | {message}",
}
_CONFIGURED_PROFILE: LogProfile | None = None
_current_session: ContextVar[str] = ContextVar("current_session", default="-")


def current_session() -> str:
    return _current_session.get()


@contextmanager
def session_context(session_id: str) -> Iterator[None]:
    """Tag log records emitted inside the block with one session id."""
    token = _current_session.set(session_id)
    try:
        yield
    finally:
        _current_session.reset(token)


def _build_chat_handler() -> Handler:
    return RichHandler(
        console=get_console(),
        show_level=True,
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=False,
    )


def configure_logging(*, profile: LogProfile = "default", level: str | None = None) -> None:
    """Configure process-level logging once."""

    def inject_context(record: loguru.Record) -> None:
        record["extra"]["session"] = current_session()

    global _CONFIGURED_PROFILE
    if profile == _CONFIGURED_PROFILE:
        return

    resolved_level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logger.remove()
    logger.configure(patcher=inject_context)
    if profile == "chat":
        logger.add(
            _build_chat_handler(),
            level=resolved_level,
            format=_PROFILE_FORMATS[profile],
            backtrace=False,
            diagnose=False,
        )
    else:
        logger.add(
            sys.stderr,
            level=resolved_level,
            format=_PROFILE_FORMATS[profile],
            backtrace=False,
            diagnose=False,
        )
    _CONFIGURED_PROFILE = profile
