"""Time budgets around external operations."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable
from typing import TypeVar

from loguru import logger

from ccip_agent.errors import OperationTimeout

T = TypeVar("T")


async def with_timeout(operation: Awaitable[T], seconds: float, *, name: str) -> T:
    """Wait for ``operation`` at most ``seconds``, then raise ``OperationTimeout``.

    The wrapper only stops waiting. The operation keeps running as a
    background task and its late outcome is logged when it settles.
    """
    task = asyncio.ensure_future(operation)
    start = time.monotonic()
    done, _ = await asyncio.wait({task}, timeout=seconds)
    if task in done:
        return task.result()

    elapsed = time.monotonic() - start
    logger.warning("bounded.timeout name={} budget={}s elapsed={:.3f}s", name, seconds, elapsed)
    task.add_done_callback(lambda finished: _log_late_outcome(name, finished))
    raise OperationTimeout(name, seconds, elapsed)


def _log_late_outcome(name: str, task: asyncio.Future) -> None:
    if task.cancelled():
        logger.info("bounded.late name={} status=cancelled", name)
        return
    error = task.exception()
    if error is not None:
        logger.info("bounded.late name={} status=error error={!s}", name, error)
        return
    logger.info("bounded.late name={} status=ok", name)
