"""
Service interfaces for dependency inversion.
Allows swapping implementations without changing business logic.
"""

from .admission_guard import AdmissionGuard
from .unguarded_admission import UnguardedAdmission

__all__ = ['AdmissionGuard', 'UnguardedAdmission']
