"""
Redis lock admission guard.
Implements AdmissionGuard with a single global Redis lock.

Why global and not per event:
  Duplicate checks span every event, so two requests for different events
  can still collide on the same email or phone. Only a lock covering the
  whole registration namespace closes that window.

Fail-open:
  If the lock cannot be acquired (Redis error or wait timeout) the admission
  proceeds unguarded. A Redis hiccup must not block registration; the cost
  is the same race window as UnguardedAdmission for that request.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

import redis.asyncio as redis
from redis.exceptions import LockError

from registration_api.services.interfaces.admission_guard import AdmissionGuard
from registration_api.core.metrics import admission_lock_unavailable
from registration_api.core.logging import get_logger

logger = get_logger(__name__)


class RedisLockGuard(AdmissionGuard):
    """
    Serialize admissions through one Redis lock.

    The lock auto-expires after `timeout` seconds so a crashed worker
    cannot wedge registration; callers wait at most `blocking_timeout`.
    """

    name = "redis"

    def __init__(
        self,
        client: redis.Redis,
        lock_name: str,
        timeout: float = 10.0,
        blocking_timeout: float = 3.0,
    ):
        self.redis = client
        self.lock_name = lock_name
        self.timeout = timeout
        self.blocking_timeout = blocking_timeout

    @asynccontextmanager
    async def hold(self) -> AsyncIterator[bool]:
        lock = self.redis.lock(
            self.lock_name,
            timeout=self.timeout,
            blocking_timeout=self.blocking_timeout,
        )
        try:
            acquired = bool(await lock.acquire())
        except (redis.RedisError, LockError) as e:
            logger.warning("admission_lock_error", lock=self.lock_name, error=str(e))
            acquired = False

        if not acquired:
            admission_lock_unavailable.inc()
            logger.warning("admission_lock_unavailable", lock=self.lock_name)

        try:
            yield acquired
        finally:
            if acquired:
                try:
                    await lock.release()
                except (redis.RedisError, LockError) as e:
                    # expired under us; nothing left to release
                    logger.warning("admission_lock_release_failed", lock=self.lock_name, error=str(e))
