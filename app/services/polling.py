"""Bounded waiting for result files written by a backend."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Awaitable, Callable, Optional

from app.domain import ClientDisconnectedError, ResultTimeoutError

logger = logging.getLogger("app.services.analysis_pipeline")

DEFAULT_TIMEOUT = 60.0
DEFAULT_POLL_INTERVAL = 0.5

AbortCheck = Callable[[], Awaitable[bool]]


async def await_file(
    path: Path,
    timeout: float = DEFAULT_TIMEOUT,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
    should_abort: Optional[AbortCheck] = None,
) -> Path:
    """Wait until ``path`` exists, sleeping ``poll_interval`` between checks.

    Returns as soon as the file is observed. Raises ``ResultTimeoutError`` once
    ``timeout`` seconds have elapsed; the final sleep is clipped to the
    remaining time so the wait never overruns by more than one interval.
    ``should_abort`` lets the caller end the wait early, e.g. when the HTTP
    client disconnected.
    """

    loop = asyncio.get_running_loop()
    started = loop.time()
    checks = 0

    while True:
        checks += 1
        if path.exists():
            logger.debug("Result file %s appeared after %d check(s)", path, checks)
            return path

        elapsed = loop.time() - started
        if elapsed >= timeout:
            raise ResultTimeoutError(path, elapsed)

        if should_abort is not None and await should_abort():
            raise ClientDisconnectedError(f"Client disconnected while waiting for {path}")

        await asyncio.sleep(min(poll_interval, timeout - elapsed))


__all__ = ["DEFAULT_POLL_INTERVAL", "DEFAULT_TIMEOUT", "await_file"]
