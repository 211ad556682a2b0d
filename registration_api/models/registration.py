"""
Registration record and the candidate submitted for admission.

Key design decisions:
- Registration is frozen: there is no edit or cancel flow
- Wire and storage use camelCase keys; the event id travels as "conferenceId"
- Stored name/phone/email keep the registrant's casing and formatting;
  only comparison keys are normalized (see services.normalization)
"""

import time
import uuid
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

CONFIRMED = "confirmed"
ID_PREFIX = "reg_"


def generate_registration_id() -> str:
    """Millisecond timestamp plus a 128-bit random suffix."""
    return f"{ID_PREFIX}{int(time.time() * 1000)}_{uuid.uuid4().hex}"


class RegistrationCandidate(BaseModel):
    """Raw, unvalidated admission input."""

    model_config = ConfigDict(frozen=True)

    event_id: Optional[str] = None
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    newsletter_consent: bool = False


class Registration(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        coerce_numbers_to_str=True,
    )

    id: str = Field(default_factory=generate_registration_id)
    event_id: str = Field(alias="conferenceId")
    name: str
    phone: str
    email: str
    newsletter_consent: bool = False
    status: str = CONFIRMED
    registered_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_record(self) -> dict:
        """JSON-safe dict in the stored (camelCase) layout."""
        return self.model_dump(mode="json", by_alias=True)

    def __repr__(self) -> str:
        return f"<Registration(id={self.id}, event={self.event_id}, email={self.email})>"
