"""
Admission engine: decides whether a registration is accepted and persists it.

ADMISSION PIPELINE
==================

  1. Validate required fields (name, phone, email, conferenceId)
  2. Validate email shape (local@domain.tld)
  3. Reject if the case-folded email is already registered (any event)
  4. Reject if the normalized phone is already registered (any event)
  5. Reject if the event already holds EVENT_CAPACITY registrations
  6. Generate id, persist with status "confirmed"
  7. Best-effort newsletter forwarding (after commit, never rolls back)

Steps 3-5 share one prefix scan of the whole registration namespace.

Duplicate scope:
  Steps 3 and 4 deliberately look at every event, not just the target one.
  A person can only ever hold one registration across all conferences.

Availability over consistency:
  If the scan in steps 3-5 fails, the checks are skipped and the write is
  attempted anyway. A storage outage therefore cannot block registration,
  but it can let duplicates or an extra registrant through.

Race window:
  Scan and write are separate store calls with no transaction between them.
  With UnguardedAdmission (the default) two concurrent requests can both
  pass the checks. RedisLockGuard serializes steps 3-6 to close the window.
"""

import re
import time
from dataclasses import dataclass
from typing import Any, Optional

from registration_api.core.exceptions import (
    CapacityError,
    DuplicateError,
    RegistrationError,
    StorageError,
    ValidationError,
)
from registration_api.core.logging import get_logger
from registration_api.core.metrics import (
    admission_checks_skipped,
    admission_latency,
    record_registration,
    record_storage_error,
)
from registration_api.infrastructure.kv_store import KeyValueStore
from registration_api.infrastructure.mailchimp_client import NewsletterOutcome
from registration_api.models.registration import (
    Registration,
    RegistrationCandidate,
    generate_registration_id,
)
from registration_api.services.interfaces import AdmissionGuard, UnguardedAdmission
from registration_api.services.newsletter_service import NewsletterForwarder
from registration_api.services.normalization import normalize_email, normalize_phone

logger = get_logger(__name__)

DEFAULT_CAPACITY = 150
DEFAULT_KEY_PREFIX = "conference_registration:"
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

_RESULT_LABELS = {
    ValidationError: "invalid",
    DuplicateError: "duplicate",
    CapacityError: "full",
}


@dataclass(frozen=True)
class AdmissionResult:
    registration: Registration
    newsletter_result: Optional[NewsletterOutcome] = None
    checked: bool = True  # False when the duplicate/capacity scan failed
    guarded: bool = False

    @property
    def registration_id(self) -> str:
        return self.registration.id


class AdmissionService:
    """Sole writer of registration records."""

    def __init__(
        self,
        store: KeyValueStore,
        guard: Optional[AdmissionGuard] = None,
        forwarder: Optional[NewsletterForwarder] = None,
        capacity: int = DEFAULT_CAPACITY,
        key_prefix: str = DEFAULT_KEY_PREFIX,
    ):
        self.store = store
        self.guard = guard or UnguardedAdmission()
        self.forwarder = forwarder
        self.capacity = capacity
        self.key_prefix = key_prefix

    async def admit(self, candidate: RegistrationCandidate) -> AdmissionResult:
        """
        Admit a registration candidate.

        Raises:
            ValidationError: required field missing or malformed email
            DuplicateError: email or phone already registered
            CapacityError: event is full
            StorageError: the commit write failed
        """
        start = time.perf_counter()
        try:
            registration, checked, guarded = await self._admit(candidate)
        except RegistrationError as e:
            record_registration(_RESULT_LABELS.get(type(e), "error"))
            raise
        finally:
            admission_latency.observe(time.perf_counter() - start)

        record_registration("admitted")

        newsletter_result = None
        if registration.newsletter_consent and self.forwarder is not None:
            newsletter_result = await self.forwarder.forward(registration.email)

        return AdmissionResult(
            registration=registration,
            newsletter_result=newsletter_result,
            checked=checked,
            guarded=guarded,
        )

    async def _admit(self, candidate: RegistrationCandidate) -> tuple[Registration, bool, bool]:
        fields = self._validate(candidate)

        async with self.guard.hold() as guarded:
            checked = await self._check(fields["event_id"], fields["email"], fields["phone"])
            registration = Registration(
                id=generate_registration_id(),
                newsletter_consent=candidate.newsletter_consent,
                **fields,
            )
            await self._commit(registration)

        return registration, checked, guarded

    def _validate(self, candidate: RegistrationCandidate) -> dict[str, str]:
        name = (candidate.name or "").strip()
        phone = (candidate.phone or "").strip()
        email = (candidate.email or "").strip()
        # the event id is opaque: presence is checked, the value is kept as given
        event_id = candidate.event_id or ""

        if not (name and phone and email and event_id):
            logger.info("registration_rejected", reason="missing_fields")
            raise ValidationError("required fields missing")

        if not EMAIL_PATTERN.match(email):
            logger.info("registration_rejected", reason="invalid_email")
            raise ValidationError("invalid email format")

        return {"event_id": event_id, "name": name, "phone": phone, "email": email}

    async def _check(self, event_id: str, email: str, phone: str) -> bool:
        """
        Run duplicate and capacity checks against one scan of the store.
        Returns False when the scan failed and the checks were skipped.
        """
        try:
            existing = await self.store.get_by_prefix(self.key_prefix)
        except StorageError as e:
            record_storage_error("scan")
            admission_checks_skipped.inc()
            logger.warning("admission_check_failed", event_id=event_id, error=str(e))
            return False

        records = [r for r in existing if isinstance(r, dict)]

        email_key = normalize_email(email)
        if any(normalize_email(r["email"]) == email_key for r in records if isinstance(r.get("email"), str)):
            logger.info("registration_rejected", reason="duplicate_email", event_id=event_id)
            raise DuplicateError("email already registered")

        phone_key = normalize_phone(phone)
        if any(normalize_phone(r["phone"]) == phone_key for r in records if isinstance(r.get("phone"), str)):
            logger.info("registration_rejected", reason="duplicate_phone", event_id=event_id)
            raise DuplicateError("phone already registered")

        taken = sum(1 for r in records if record_event_id(r) == event_id)
        if taken >= self.capacity:
            logger.info("registration_rejected", reason="event_full", event_id=event_id, taken=taken)
            raise CapacityError("event full")

        return True

    async def _commit(self, registration: Registration) -> None:
        key = f"{self.key_prefix}{registration.id}"
        try:
            await self.store.set(key, registration.to_record())
        except StorageError:
            record_storage_error("write")
            logger.error("registration_write_failed", registration_id=registration.id)
            raise

        logger.info(
            "registration_created",
            registration_id=registration.id,
            event_id=registration.event_id,
            newsletter_consent=registration.newsletter_consent,
        )


def record_event_id(record: dict[str, Any]) -> Optional[str]:
    """Event id of a stored record; older records may hold it as a number."""
    value = record.get("conferenceId")
    return None if value is None else str(value)
