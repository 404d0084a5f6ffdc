"""Fixed-budget polling helper."""
from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)

Sleep = Callable[[float], Awaitable[None]]


async def poll_until_ready(
    probe: Callable[[], Awaitable[bool]],
    *,
    attempts: int,
    interval: float,
    sleep: Sleep = asyncio.sleep,
) -> bool:
    """Call *probe* up to *attempts* times, *interval* seconds apart.

    Returns ``True`` as soon as a probe succeeds and ``False`` once the
    attempt budget is spent. The budget is a count, not a deadline: slow
    probes do not shorten it.
    """

    if attempts < 1:
        raise ValueError("attempts must be >= 1")

    for attempt in range(1, attempts + 1):
        if await probe():
            logger.debug("Probe succeeded on attempt %d/%d", attempt, attempts)
            return True
        logger.debug("Probe failed on attempt %d/%d", attempt, attempts)
        if attempt < attempts:
            await sleep(interval)
    return False
