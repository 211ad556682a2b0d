"""
Unguarded admission - no serialization.
Concurrent admissions may both pass the checks and both write.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from registration_api.services.interfaces.admission_guard import AdmissionGuard


class UnguardedAdmission(AdmissionGuard):
    """
    Always proceed without a lock.

    Known race: two requests for the same email, the same phone, or the
    last open seat can interleave between scan and write, leaving a
    duplicate or an over-capacity event behind.

    Use when:
    - Single worker, low traffic
    - Occasional over-admission is acceptable
    """

    name = "none"

    @asynccontextmanager
    async def hold(self) -> AsyncIterator[bool]:
        yield False
