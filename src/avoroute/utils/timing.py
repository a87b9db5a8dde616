"""Timing helpers for slow external calls."""

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

logger = logging.getLogger(__name__)


@asynccontextmanager
async def timed(label: str, log: Optional[logging.Logger] = None):
    """Log how long the wrapped block took at debug level.

    Example:
        async with timed(f"Fee data {chain_id}"):
            fee_data = await rpc.get_fee_data()
    """
    log = log or logger
    started = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - started) * 1000
        log.debug(f"{label}: {elapsed_ms:.1f}ms")
