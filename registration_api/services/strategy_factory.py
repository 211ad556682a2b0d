"""
Admission guard factory.
Configures which admission guard strategy to use.
"""

from typing import Optional

import redis.asyncio as redis

from registration_api.services.interfaces.admission_guard import AdmissionGuard
from registration_api.services.interfaces.unguarded_admission import UnguardedAdmission
from registration_api.services.lock_guard import RedisLockGuard
from registration_api.core.config import Settings


def lock_name_for(key_prefix: str) -> str:
    """Lock key outside the registration namespace so prefix scans never see it."""
    return f"{key_prefix.rstrip(':')}_admission_lock"


def get_admission_guard(settings: Settings, client: Optional[redis.Redis] = None) -> AdmissionGuard:
    """
    Get configured admission guard.

    Strategy selection via ADMISSION_GUARD:
    - none (default): UnguardedAdmission, documented race window
    - redis: RedisLockGuard, requires a Redis client
    """
    strategy = settings.ADMISSION_GUARD.lower()

    if strategy == "redis":
        if client is None:
            raise ValueError("ADMISSION_GUARD=redis requires a Redis connection")
        return RedisLockGuard(
            client,
            lock_name=lock_name_for(settings.REGISTRATION_KEY_PREFIX),
            timeout=settings.ADMISSION_LOCK_TIMEOUT,
            blocking_timeout=settings.ADMISSION_LOCK_WAIT,
        )
    if strategy == "none":
        return UnguardedAdmission()
    raise ValueError(f"Unknown ADMISSION_GUARD: {settings.ADMISSION_GUARD}")
