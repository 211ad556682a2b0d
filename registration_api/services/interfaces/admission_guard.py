"""
Admission guard strategy interface.
Allows swapping between a racy check-then-write and a serialized one.
"""

from abc import ABC, abstractmethod
from typing import AsyncContextManager


class AdmissionGuard(ABC):
    """
    Interface for admission guards.

    The guard wraps the scan -> duplicate/capacity checks -> write sequence.

    Implementations:
    - UnguardedAdmission: no serialization, concurrent admissions may race
    - RedisLockGuard: one global Redis lock around the whole sequence
    """

    name: str = "abstract"

    @abstractmethod
    def hold(self) -> AsyncContextManager[bool]:
        """
        Context manager held for the duration of one admission.

        Yields:
            True if admissions are serialized for this call
            False if this call may race with others
        """
        ...
