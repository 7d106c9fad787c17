"""
Per-rider cashout lock.

Serializes cashout requests of one rider across workers with a Redis lock,
so the balance check and the ledger writes of two requests never overlap.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from redis.exceptions import LockError

from zapshift.app.core.config import settings
from zapshift.app.core.exceptions import CashoutInProgressError

logger = logging.getLogger("zapshift.cashout")

CASHOUT_LOCK_PREFIX = "lock:cashout:rider:"


def cashout_lock_key(rider_email: str) -> str:
    return f"{CASHOUT_LOCK_PREFIX}{rider_email.lower()}"


@asynccontextmanager
async def rider_cashout_lock(
    redis_client,
    rider_email: str,
    timeout: float = None,
    wait: float = None,
) -> AsyncIterator[None]:
    """
    Hold the cashout lock of `rider_email` for the duration of the block.

    Args:
        redis_client: Async Redis client
        rider_email: Rider whose cashouts are serialized
        timeout: Lock TTL in seconds (released automatically if the holder dies)
        wait: Seconds to wait for a concurrent holder before giving up

    Raises:
        CashoutInProgressError: if the lock could not be acquired in time
    """
    timeout = timeout if timeout is not None else settings.cashout_lock_timeout_seconds
    wait = wait if wait is not None else settings.cashout_lock_wait_seconds

    lock = redis_client.lock(
        cashout_lock_key(rider_email),
        timeout=timeout,
        blocking_timeout=wait,
    )
    acquired = await lock.acquire()
    if not acquired:
        logger.warning("Cashout lock busy for rider %s", rider_email)
        raise CashoutInProgressError(rider_email)

    try:
        yield
    finally:
        try:
            await lock.release()
        except LockError:
            logger.warning("Cashout lock for rider %s expired before release", rider_email)
